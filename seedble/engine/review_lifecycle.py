"""Peer review lifecycle: state transitions and score aggregation.

    pending → in_progress → completed → validated
                                      ↘ flagged

Status only moves forward; ``validated`` and ``flagged`` are terminal.
All functions are *pure*: they return new PeerReview objects and never mutate
their inputs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
import uuid

from pydantic import BaseModel, Field

from seedble.errors import ValidationError
from seedble.models import utcnow
from seedble.review_models import (
    REVIEW_CATEGORIES,
    CategoryScores,
    PeerReview,
    ReviewDetail,
    ReviewStatus,
    SkillRating,
)


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------
# A category without any rated skill scores 0 rather than blocking the
# overall score. This lowers the overall score of partially rated reviews.
EMPTY_CATEGORY_SCORE = 0.0

VARIANCE_FLAG_REASON = "Significant score variance detected"

ALLOWED_TRANSITIONS: dict[ReviewStatus, frozenset[ReviewStatus]] = {
    "pending": frozenset({"in_progress"}),
    "in_progress": frozenset({"completed"}),
    "completed": frozenset({"validated", "flagged"}),
    "validated": frozenset(),
    "flagged": frozenset(),
}


class VariancePolicy(BaseModel):
    """Automatic flagging of completed reviews with widely spread scores.

    ``threshold=None`` disables the policy; flagging is then manual only.
    """

    threshold: float | None = Field(default=None, ge=0, le=5)

    def should_flag(self, review: PeerReview) -> bool:
        if self.threshold is None or review.status != "completed":
            return False
        spread = score_spread(review)
        return spread is not None and spread >= self.threshold


# ---------------------------------------------------------------------------
# Score aggregation
# ---------------------------------------------------------------------------
def compute_category_scores(ratings: list[SkillRating]) -> CategoryScores:
    """Mean rating per category; categories with no ratings score 0.

    Raises:
        ValidationError: If *ratings* is empty.
    """
    if not ratings:
        raise ValidationError("A review needs at least one rated skill")
    by_category: dict[str, list[int]] = {c: [] for c in REVIEW_CATEGORIES}
    for rating in ratings:
        by_category[rating.category].append(rating.score)
    return CategoryScores(**{
        category: (sum(values) / len(values) if values else EMPTY_CATEGORY_SCORE)
        for category, values in by_category.items()
    })


def score_spread(review: PeerReview) -> float | None:
    """Max − min of the four category scores; None until all are set."""
    scores = review.category_scores()
    return scores.spread if scores is not None else None


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------
def can_transition(current: ReviewStatus, target: ReviewStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(review: PeerReview, target: ReviewStatus, now: datetime | None = None) -> PeerReview:
    """Move *review* to *target*; scores and other fields are left untouched.

    Completion carries scores, so it goes through ``complete_review``.

    Raises:
        ValidationError: If the transition is not allowed.
    """
    if target == "completed":
        raise ValidationError(f"Review {review.id} is completed through its ratings, not a bare transition")
    return _move(review, target, now)


def _move(
    review: PeerReview,
    target: ReviewStatus,
    now: datetime | None = None,
    **updates: Any,
) -> PeerReview:
    if not can_transition(review.status, target):
        raise ValidationError(
            f"Review {review.id} cannot move from '{review.status}' to '{target}'"
        )
    data = review.model_dump(exclude={"overall_score"})
    data.update(updates)
    data["status"] = target
    data["updated_at"] = now or utcnow()
    return PeerReview.model_validate(data)


def create_review(
    reviewer_id: str,
    reviewee_id: str,
    project_id: str,
    now: datetime | None = None,
) -> PeerReview:
    """A new pending review.

    Raises:
        ValidationError: If reviewer and reviewee are the same user.
    """
    if reviewer_id == reviewee_id:
        raise ValidationError("A user cannot review themselves")
    ts = now or utcnow()
    return PeerReview(
        id=uuid.uuid4().hex,
        reviewer_id=reviewer_id,
        reviewee_id=reviewee_id,
        project_id=project_id,
        status="pending",
        created_at=ts,
        updated_at=ts,
    )


def start_review(review: PeerReview, now: datetime | None = None) -> PeerReview:
    """pending → in_progress (the reviewer opened the correction sheet)."""
    return _move(review, "in_progress", now)


def complete_review(
    review: PeerReview,
    ratings: list[SkillRating],
    feedback: str = "",
    now: datetime | None = None,
) -> tuple[PeerReview, list[ReviewDetail]]:
    """in_progress → completed, with category scores and per-skill details.

    Every rating must carry a ``skill_id`` so it can be persisted.

    Raises:
        ValidationError: On an empty rating list, a rating without skill id,
            or a review that is not in progress.
    """
    if not can_transition(review.status, "completed"):
        raise ValidationError(
            f"Review {review.id} cannot move from '{review.status}' to 'completed'"
        )
    scores = compute_category_scores(ratings)
    missing = [r.skill for r in ratings if not r.skill_id]
    if missing:
        raise ValidationError(f"Ratings without skill id: {', '.join(missing)}")

    ts = now or utcnow()
    completed = _move(
        review,
        "completed",
        ts,
        technical_score=scores.technical,
        soft_score=scores.soft,
        process_score=scores.process,
        innovation_score=scores.innovation,
        feedback=feedback,
        completed_at=ts,
    )
    details = [
        ReviewDetail(
            id=uuid.uuid4().hex,
            review_id=review.id,
            skill_id=r.skill_id,  # type: ignore[arg-type]
            score=r.score,
            feedback=r.feedback,
        )
        for r in ratings
    ]
    return completed, details


def validate_review(review: PeerReview, now: datetime | None = None) -> PeerReview:
    """completed → validated; scores are left untouched."""
    ts = now or utcnow()
    return _move(review, "validated", ts, validated_at=ts)


def flag_review(review: PeerReview, reason: str, now: datetime | None = None) -> PeerReview:
    """completed → flagged.

    Raises:
        ValidationError: If *reason* is blank.
    """
    if not reason.strip():
        raise ValidationError("Flagging a review requires a reason")
    return _move(review, "flagged", now, flag_reason=reason.strip())


def apply_variance_policy(
    review: PeerReview,
    policy: VariancePolicy,
    now: datetime | None = None,
) -> PeerReview:
    """Flag *review* if the policy says so, otherwise return it unchanged."""
    if policy.should_flag(review):
        return flag_review(review, VARIANCE_FLAG_REASON, now)
    return review
