"""Application services composing the engine with the data store.

Every service receives its collaborators explicitly; none of them holds
module-level state.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import date, datetime, timedelta
import logging

from seedble.advisor import LLMAdvisor, SkillInsight, skill_insights
from seedble.assessment import (
    SkillResponse,
    build_skill_entries,
    complete_assessment,
    new_assessment,
)
from seedble.data_store import DataStore, new_skill
from seedble.engine import review_lifecycle
from seedble.engine.recommendations import TeamRecommendation, recommend_team
from seedble.engine.review_lifecycle import VariancePolicy
from seedble.engine.statistics import (
    Notification,
    ReviewBuckets,
    TeamReviewStats,
    UserStatistics,
    notifications_for,
    partition_reviews,
    team_review_stats,
    user_statistics,
)
from seedble.errors import ValidationError
from seedble.models import (
    Assessment,
    AssessmentType,
    CandidateProfile,
    Project,
    ProjectDraft,
    ProjectOverview,
    Skill,
    SkillCategory,
    utcnow,
)
from seedble.review_models import PeerReview, ReviewCategory, SkillRating
from seedble.settings import SeedbleSettings


logger = logging.getLogger(__name__)

PROJECT_DURATION_DAYS = 90

# The catalog has no "innovation" category; those skills are filed as process.
_CATALOG_CATEGORY: dict[ReviewCategory, SkillCategory] = {
    "technical": "technical",
    "soft": "soft",
    "process": "process",
    "innovation": "process",
}


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------
class ProjectService:
    """Project creation workflow: draft → recommendation → selection → create."""

    def __init__(
        self,
        store: DataStore,
        advisor: LLMAdvisor | None = None,
        settings: SeedbleSettings | None = None,
    ):
        self._store = store
        self._advisor = advisor
        self._settings = settings or SeedbleSettings()

    @staticmethod
    def parse_required_skills(text: str) -> list[str]:
        """Split a comma-separated skill list, dropping blanks."""
        return [part.strip() for part in text.split(",") if part.strip()]

    @staticmethod
    def validate_draft(draft: ProjectDraft) -> None:
        """Raises ValidationError when name or description is missing."""
        missing = [f for f in ("name", "description") if not getattr(draft, f).strip()]
        if missing:
            raise ValidationError(f"Project {' and '.join(missing)} required")

    def load_candidates(self) -> list[CandidateProfile]:
        catalog = {s.id: s for s in self._store.list_skills()}
        return [
            CandidateProfile.from_entries(user, self._store.get_user_skill_entries(user.id), catalog)
            for user in self._store.list_candidate_users()
        ]

    def recommend(self, draft: ProjectDraft) -> TeamRecommendation:
        self.validate_draft(draft)
        candidates = self.load_candidates()
        recommendation = recommend_team(
            candidates,
            draft.to_requirement(),
            narrator=self._advisor,
            project_name=draft.name,
            project_description=draft.description,
        )
        logger.info(
            "Recommended %d of %d candidates for %s (coverage=%d%%, prediction=%d%%)",
            len(recommendation.recommended_team),
            len(candidates),
            draft.name,
            recommendation.skills_coverage,
            recommendation.success_prediction,
        )
        return recommendation

    def default_selection(self, recommendation: TeamRecommendation) -> list[str]:
        """User ids pre-selected in the UI: the first few recommended members."""
        team = recommendation.recommended_team[: self._settings.auto_select]
        return [s.user_id for s in team]

    def create_project(
        self,
        draft: ProjectDraft,
        selected_user_ids: list[str],
        start: date | None = None,
    ) -> Project:
        """Persist the project and add the selected members.

        Raises:
            ValidationError: On an invalid draft or an empty selection.
            NotFoundError: If a selected user does not exist.
        """
        self.validate_draft(draft)
        if not selected_user_ids:
            raise ValidationError("Select at least one team member")

        # Resolve users first so a bad id fails before anything is written.
        members = [self._store.get_user(uid) for uid in dict.fromkeys(selected_user_ids)]

        start_date = start or date.today()
        end_date = start_date + timedelta(days=PROJECT_DURATION_DAYS) if draft.timeline.strip() else None
        project = self._store.create_project(
            name=draft.name.strip(),
            start_date=start_date,
            description=draft.description.strip(),
            end_date=end_date,
            priority=draft.priority,
            tags=draft.tags,
            required_skills=draft.to_requirement().required_skill_names,
            budget=draft.budget,
        )
        for user in members:
            self._store.add_project_member(project.id, user.id, user.role or "Member")
        logger.info("Project %s created with %d members", project.id, len(members))
        return project

    def list_project_overviews(self) -> list[ProjectOverview]:
        """Every project, newest first, with its members' names and roles."""
        names = {u.id: u.full_name for u in self._store.list_candidate_users()}
        return [
            ProjectOverview(
                project=project,
                members=[
                    (names.get(m.user_id, m.user_id), m.role)
                    for m in self._store.list_project_members(project.id)
                ],
            )
            for project in self._store.list_projects()
        ]


# ---------------------------------------------------------------------------
# Peer reviews
# ---------------------------------------------------------------------------
class ReviewService:
    """Assignment, submission and validation of peer reviews."""

    def __init__(self, store: DataStore, settings: SeedbleSettings | None = None):
        self._store = store
        settings = settings or SeedbleSettings()
        self._policy = VariancePolicy(threshold=settings.variance_threshold)

    def assign_review(self, reviewer_id: str, reviewee_id: str, project_id: str) -> PeerReview:
        review = review_lifecycle.create_review(reviewer_id, reviewee_id, project_id)
        saved = self._store.create_peer_review(review)
        logger.info("Assigned review %s: %s → %s", saved.id, reviewer_id, reviewee_id)
        return saved

    def start_review(self, review_id: str) -> PeerReview:
        review = self._store.get_peer_review(review_id)
        return self._store.save_peer_review(review_lifecycle.start_review(review))

    def submit_review(
        self,
        review_id: str,
        ratings: list[SkillRating],
        feedback: str = "",
        now: datetime | None = None,
    ) -> PeerReview:
        """Complete a review from its per-skill ratings.

        A pending review is started implicitly. Skills missing from the
        catalog are created in the same write as the review. The variance
        policy may flag the result. Nothing is written when any check fails.

        Raises:
            ValidationError: On empty ratings or an illegal transition.
            NotFoundError: If the review does not exist.
        """
        if not ratings:
            raise ValidationError("A review needs at least one rated skill")
        ts = now or utcnow()
        review = self._store.get_peer_review(review_id)
        if review.status == "pending":
            review = review_lifecycle.start_review(review, ts)
        if not review_lifecycle.can_transition(review.status, "completed"):
            raise ValidationError(f"Review {review.id} cannot move from '{review.status}' to 'completed'")

        resolved, new_skills = self._resolve_skills(ratings)
        completed, details = review_lifecycle.complete_review(review, resolved, feedback, ts)
        final = review_lifecycle.apply_variance_policy(completed, self._policy, ts)
        self._store.save_review_submission(final, details, new_skills)

        if final.status == "flagged":
            logger.warning("Review %s auto-flagged: %s", final.id, final.flag_reason)
        logger.info("Review %s submitted with %d ratings", final.id, len(details))
        return final

    def _resolve_skills(self, ratings: list[SkillRating]) -> tuple[list[SkillRating], list[Skill]]:
        """Give every rating a skill id; unknown names get new, unsaved skills."""
        catalog = {s.name.casefold(): s for s in self._store.list_skills()}
        created: dict[str, Skill] = {}
        resolved: list[SkillRating] = []
        for rating in ratings:
            if rating.skill_id:
                resolved.append(rating)
                continue
            key = rating.skill.strip().casefold()
            skill = catalog.get(key) or created.get(key)
            if skill is None:
                skill = new_skill(rating.skill, _CATALOG_CATEGORY[rating.category])
                created[key] = skill
            resolved.append(rating.model_copy(update={"skill_id": skill.id}))
        return resolved, list(created.values())

    def validate_review(self, review_id: str) -> PeerReview:
        review = self._store.get_peer_review(review_id)
        return self._store.save_peer_review(review_lifecycle.validate_review(review))

    def flag_review(self, review_id: str, reason: str) -> PeerReview:
        review = self._store.get_peer_review(review_id)
        flagged = self._store.save_peer_review(review_lifecycle.flag_review(review, reason))
        logger.info("Review %s flagged: %s", review_id, flagged.flag_reason)
        return flagged

    def reviews_for(self, user_id: str) -> ReviewBuckets:
        return partition_reviews(self._store.list_peer_reviews(), user_id)

    def team_stats(self, user_id: str) -> TeamReviewStats:
        buckets = self.reviews_for(user_id)
        return team_review_stats(buckets, active_users=len(self._store.list_candidate_users()))

    def notifications(self, user_id: str, read_ids: Collection[str] = ()) -> list[Notification]:
        """Review notifications for the dashboard; *read_ids* come from the session."""
        return notifications_for(
            user_id,
            self._store.list_peer_reviews(),
            user_names={u.id: u.full_name for u in self._store.list_candidate_users()},
            project_names={p.id: p.name for p in self._store.list_projects()},
            read_ids=read_ids,
        )

    def reviews_awaiting_validation(self) -> list[PeerReview]:
        """Completed reviews, oldest first."""
        completed = [r for r in self._store.list_peer_reviews() if r.status == "completed"]
        return sorted(completed, key=lambda r: r.completed_at or r.updated_at)

    def user_statistics(self, user_id: str) -> UserStatistics:
        return user_statistics(
            user_id,
            skill_count=len(self._store.get_user_skill_entries(user_id)),
            assessment_statuses=[a.status for a in self._store.list_assessments(user_id)],
            project_count=len(self._store.get_user_projects(user_id)),
            reviews=self._store.list_peer_reviews(),
        )


# ---------------------------------------------------------------------------
# Assessments
# ---------------------------------------------------------------------------
class AssessmentService:
    """Skill self-assessment sessions."""

    def __init__(self, store: DataStore, advisor: LLMAdvisor | None = None):
        self._store = store
        self._advisor = advisor

    def start(self, user_id: str, assessment_type: AssessmentType = "complete") -> Assessment:
        self._store.get_user(user_id)
        return self._store.create_assessment(new_assessment(user_id, assessment_type))

    def submit(
        self,
        assessment_id: str,
        responses: dict[str, SkillResponse],
        completion_time: int,
    ) -> Assessment:
        """Store the skill entries and mark the assessment completed.

        Raises:
            ValidationError: On empty responses or an already completed assessment.
        """
        assessment = self._store.get_assessment(assessment_id)
        now = utcnow()
        done = complete_assessment(assessment, len(responses), completion_time, now)
        entries = build_skill_entries(assessment.user_id, responses, now)
        self._store.upsert_user_skills(entries)
        saved = self._store.save_assessment(done)
        logger.info(
            "Assessment %s completed: %d skills in %ds",
            saved.id, saved.skills_evaluated, saved.completion_time or 0,
        )
        return saved

    def insights(self, user_id: str) -> list[SkillInsight]:
        """Personal development insights for the dashboard."""
        catalog = {s.id: s for s in self._store.list_skills()}
        user = self._store.get_user(user_id)
        profile = CandidateProfile.from_entries(user, self._store.get_user_skill_entries(user_id), catalog)
        return skill_insights(profile.skills, self._advisor)
