"""Data-access collaborator: the contract and a JSON-file implementation.

The core never reaches for a global client; services receive a ``DataStore``
explicitly. ``JsonDataStore`` keeps the whole dataset in one JSON document,
guarded by a lock and written atomically (last writer wins).
"""

from __future__ import annotations

from datetime import date
import json
import logging
from pathlib import Path
import threading
from typing import Protocol
import uuid

from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError

from seedble.errors import NotFoundError, PersistenceError, ValidationError
from seedble.models import (
    Assessment,
    CandidateUser,
    CircleMember,
    KnowledgeCircle,
    Project,
    ProjectMember,
    ProjectPriority,
    Skill,
    SkillCategory,
    UserSkillEntry,
)
from seedble.review_models import PeerReview, ReviewDetail


logger = logging.getLogger(__name__)

_DEFAULT_PATH = "seedble_data.json"

_OPEN_REVIEW_STATUSES = ("pending", "in_progress")


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------
class DataStore(Protocol):
    """Operations the core needs from the persistence layer."""

    def list_skills(self) -> list[Skill]: ...
    def get_or_create_skill(self, name: str, category: SkillCategory) -> Skill: ...
    def list_candidate_users(self) -> list[CandidateUser]: ...
    def get_user(self, user_id: str) -> CandidateUser: ...
    def get_user_skill_entries(self, user_id: str) -> list[UserSkillEntry]: ...
    def upsert_user_skills(self, entries: list[UserSkillEntry]) -> list[UserSkillEntry]: ...
    def create_assessment(self, assessment: Assessment) -> Assessment: ...
    def get_assessment(self, assessment_id: str) -> Assessment: ...
    def save_assessment(self, assessment: Assessment) -> Assessment: ...
    def list_assessments(self, user_id: str) -> list[Assessment]: ...
    def create_project(
        self,
        name: str,
        start_date: date,
        description: str = "",
        end_date: date | None = None,
        priority: ProjectPriority = "medium",
        tags: list[str] | None = None,
        required_skills: list[str] | None = None,
        budget: int | None = None,
    ) -> Project: ...
    def add_project_member(self, project_id: str, user_id: str, role: str) -> ProjectMember: ...
    def list_project_members(self, project_id: str) -> list[ProjectMember]: ...
    def get_user_projects(self, user_id: str) -> list[Project]: ...
    def list_projects(self) -> list[Project]: ...
    def create_peer_review(self, review: PeerReview) -> PeerReview: ...
    def get_peer_review(self, review_id: str) -> PeerReview: ...
    def save_peer_review(self, review: PeerReview) -> PeerReview: ...
    def save_review_submission(
        self,
        review: PeerReview,
        details: list[ReviewDetail],
        new_skills: list[Skill] | None = None,
    ) -> PeerReview: ...
    def list_peer_reviews(self) -> list[PeerReview]: ...
    def list_review_details(self, review_id: str) -> list[ReviewDetail]: ...
    def list_knowledge_circles(self) -> list[KnowledgeCircle]: ...


# ---------------------------------------------------------------------------
# JSON document
# ---------------------------------------------------------------------------
class StoreSnapshot(BaseModel):
    """The full persisted dataset."""

    version: str = "1.0"
    users: list[CandidateUser] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    user_skills: list[UserSkillEntry] = Field(default_factory=list)
    assessments: list[Assessment] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    project_members: list[ProjectMember] = Field(default_factory=list)
    peer_reviews: list[PeerReview] = Field(default_factory=list)
    review_details: list[ReviewDetail] = Field(default_factory=list)
    knowledge_circles: list[KnowledgeCircle] = Field(default_factory=list)
    circle_members: list[CircleMember] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.users or self.skills or self.projects)


def _new_id() -> str:
    return uuid.uuid4().hex


def new_skill(name: str, category: SkillCategory) -> Skill:
    """A catalog skill with a fresh id; nothing is written.

    Raises:
        ValidationError: If *name* is blank.
    """
    clean = name.strip()
    if not clean:
        raise ValidationError("Skill name must not be blank")
    return Skill(id=_new_id(), name=clean, category=category, description=f"{category} skill: {clean}")


class JsonDataStore:
    """Thread-safe, file-backed DataStore."""

    def __init__(self, path: str = _DEFAULT_PATH) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Snapshot access
    # ------------------------------------------------------------------
    def load(self) -> StoreSnapshot:
        """The whole dataset; an empty one when no file exists yet."""
        with self._lock:
            return self._read()

    def replace(self, snapshot: StoreSnapshot) -> None:
        """Overwrite the whole dataset."""
        with self._lock:
            self._write(snapshot)

    # ------------------------------------------------------------------
    # Users & skills
    # ------------------------------------------------------------------
    def add_user(self, user: CandidateUser) -> CandidateUser:
        with self._lock:
            data = self._read()
            if any(u.id == user.id for u in data.users):
                raise ValidationError(f"User '{user.id}' already exists")
            data.users.append(user)
            self._write(data)
        return user

    def list_candidate_users(self) -> list[CandidateUser]:
        with self._lock:
            return sorted(self._read().users, key=lambda u: u.full_name)

    def get_user(self, user_id: str) -> CandidateUser:
        with self._lock:
            return self._find_user(self._read(), user_id)

    def list_skills(self) -> list[Skill]:
        with self._lock:
            return sorted(self._read().skills, key=lambda s: s.name)

    def get_or_create_skill(self, name: str, category: SkillCategory) -> Skill:
        """Case-insensitive lookup by name; creates the skill when missing."""
        skill = new_skill(name, category)
        with self._lock:
            data = self._read()
            existing = next((s for s in data.skills if s.name.casefold() == skill.name.casefold()), None)
            if existing is not None:
                return existing
            data.skills.append(skill)
            self._write(data)
        logger.info("Created skill %s (%s)", skill.name, category)
        return skill

    def get_user_skill_entries(self, user_id: str) -> list[UserSkillEntry]:
        with self._lock:
            return [e for e in self._read().user_skills if e.user_id == user_id]

    def upsert_user_skills(self, entries: list[UserSkillEntry]) -> list[UserSkillEntry]:
        """Insert or replace entries, keyed by (user_id, skill_id)."""
        with self._lock:
            data = self._read()
            skill_ids = {s.id for s in data.skills}
            for entry in entries:
                self._find_user(data, entry.user_id)
                if entry.skill_id not in skill_ids:
                    raise NotFoundError("skill", entry.skill_id)
            incoming = {(e.user_id, e.skill_id): e for e in entries}
            kept = [e for e in data.user_skills if (e.user_id, e.skill_id) not in incoming]
            data.user_skills = [*kept, *incoming.values()]
            self._write(data)
        return list(incoming.values())

    # ------------------------------------------------------------------
    # Assessments
    # ------------------------------------------------------------------
    def create_assessment(self, assessment: Assessment) -> Assessment:
        with self._lock:
            data = self._read()
            self._find_user(data, assessment.user_id)
            data.assessments.append(assessment)
            self._write(data)
        return assessment

    def get_assessment(self, assessment_id: str) -> Assessment:
        with self._lock:
            found = next((a for a in self._read().assessments if a.id == assessment_id), None)
        if found is None:
            raise NotFoundError("assessment", assessment_id)
        return found

    def save_assessment(self, assessment: Assessment) -> Assessment:
        with self._lock:
            data = self._read()
            idx = self._index(data.assessments, assessment.id, "assessment")
            data.assessments[idx] = assessment
            self._write(data)
        return assessment

    def list_assessments(self, user_id: str) -> list[Assessment]:
        with self._lock:
            found = [a for a in self._read().assessments if a.user_id == user_id]
        return sorted(found, key=lambda a: a.created_at, reverse=True)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------
    def create_project(
        self,
        name: str,
        start_date: date,
        description: str = "",
        end_date: date | None = None,
        priority: ProjectPriority = "medium",
        tags: list[str] | None = None,
        required_skills: list[str] | None = None,
        budget: int | None = None,
    ) -> Project:
        try:
            project = Project(
                id=_new_id(),
                name=name,
                description=description,
                start_date=start_date,
                end_date=end_date,
                priority=priority,
                tags=tags or [],
                required_skills=required_skills or [],
                budget=budget,
            )
        except SchemaError as exc:
            raise ValidationError(f"Invalid project: {exc}") from exc
        with self._lock:
            data = self._read()
            data.projects.append(project)
            self._write(data)
        logger.info("Created project %s (%s)", project.name, project.id)
        return project

    def add_project_member(self, project_id: str, user_id: str, role: str) -> ProjectMember:
        with self._lock:
            data = self._read()
            self._index(data.projects, project_id, "project")
            self._find_user(data, user_id)
            if any(m.project_id == project_id and m.user_id == user_id for m in data.project_members):
                raise ValidationError(f"User '{user_id}' is already a member of project '{project_id}'")
            member = ProjectMember(id=_new_id(), project_id=project_id, user_id=user_id, role=role)
            data.project_members.append(member)
            self._write(data)
        return member

    def list_project_members(self, project_id: str) -> list[ProjectMember]:
        with self._lock:
            return [m for m in self._read().project_members if m.project_id == project_id]

    def list_projects(self) -> list[Project]:
        with self._lock:
            return sorted(self._read().projects, key=lambda p: p.created_at, reverse=True)

    def get_user_projects(self, user_id: str) -> list[Project]:
        with self._lock:
            data = self._read()
            ids = {m.project_id for m in data.project_members if m.user_id == user_id}
            return [p for p in data.projects if p.id in ids]

    # ------------------------------------------------------------------
    # Peer reviews
    # ------------------------------------------------------------------
    def create_peer_review(self, review: PeerReview) -> PeerReview:
        with self._lock:
            data = self._read()
            self._find_user(data, review.reviewer_id)
            self._find_user(data, review.reviewee_id)
            self._index(data.projects, review.project_id, "project")
            data.peer_reviews.append(review)
            self._write(data)
        return review

    def get_peer_review(self, review_id: str) -> PeerReview:
        with self._lock:
            data = self._read()
            return data.peer_reviews[self._index(data.peer_reviews, review_id, "peer review")]

    def save_peer_review(self, review: PeerReview) -> PeerReview:
        with self._lock:
            data = self._read()
            data.peer_reviews[self._index(data.peer_reviews, review.id, "peer review")] = review
            self._write(data)
        return review

    def save_review_submission(
        self,
        review: PeerReview,
        details: list[ReviewDetail],
        new_skills: list[Skill] | None = None,
    ) -> PeerReview:
        """Write a submitted review, its details and any new skills in one write.

        The stored review must still be open (pending or in progress). A new
        skill whose name already exists in the catalog is not added again;
        details pointing at it are moved to the existing skill.

        Raises:
            ValidationError: If the stored review was already submitted.
            NotFoundError: On an unknown review or skill.
        """
        with self._lock:
            data = self._read()
            idx = self._index(data.peer_reviews, review.id, "peer review")
            stored = data.peer_reviews[idx]
            if stored.status not in _OPEN_REVIEW_STATUSES:
                raise ValidationError(f"Review {review.id} is already '{stored.status}'")

            by_name = {s.name.casefold(): s for s in data.skills}
            remap: dict[str, str] = {}
            added: list[Skill] = []
            for skill in new_skills or []:
                existing = by_name.get(skill.name.casefold())
                if existing is not None:
                    remap[skill.id] = existing.id
                    continue
                by_name[skill.name.casefold()] = skill
                added.append(skill)
            details = [
                d.model_copy(update={"skill_id": remap[d.skill_id]}) if d.skill_id in remap else d
                for d in details
            ]

            skill_ids = {s.id for s in data.skills} | {s.id for s in added}
            for detail in details:
                if detail.skill_id not in skill_ids:
                    raise NotFoundError("skill", detail.skill_id)
            data.skills.extend(added)
            data.peer_reviews[idx] = review
            data.review_details.extend(details)
            self._write(data)
        for skill in added:
            logger.info("Created skill %s (%s)", skill.name, skill.category)
        return review

    def list_peer_reviews(self) -> list[PeerReview]:
        with self._lock:
            return list(self._read().peer_reviews)

    def list_review_details(self, review_id: str) -> list[ReviewDetail]:
        with self._lock:
            return [d for d in self._read().review_details if d.review_id == review_id]

    # ------------------------------------------------------------------
    # Knowledge circles
    # ------------------------------------------------------------------
    def add_knowledge_circle(self, circle: KnowledgeCircle) -> KnowledgeCircle:
        with self._lock:
            data = self._read()
            data.knowledge_circles.append(circle)
            self._write(data)
        return circle

    def add_circle_member(self, circle_id: str, user_id: str) -> None:
        with self._lock:
            data = self._read()
            self._index(data.knowledge_circles, circle_id, "knowledge circle")
            self._find_user(data, user_id)
            if not any(m.circle_id == circle_id and m.user_id == user_id for m in data.circle_members):
                data.circle_members.append(CircleMember(circle_id=circle_id, user_id=user_id))
                self._write(data)

    def list_knowledge_circles(self) -> list[KnowledgeCircle]:
        """Circles sorted by name, with live member counts."""
        with self._lock:
            data = self._read()
        counts: dict[str, int] = {}
        for m in data.circle_members:
            counts[m.circle_id] = counts.get(m.circle_id, 0) + 1
        return [
            c.model_copy(update={"member_count": counts.get(c.id, 0)})
            for c in sorted(data.knowledge_circles, key=lambda c: c.name)
        ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @staticmethod
    def _find_user(data: StoreSnapshot, user_id: str) -> CandidateUser:
        user = next((u for u in data.users if u.id == user_id), None)
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    @staticmethod
    def _index(items: list, item_id: str, kind: str) -> int:
        for i, item in enumerate(items):
            if item.id == item_id:
                return i
        raise NotFoundError(kind, item_id)

    def _read(self) -> StoreSnapshot:
        if not self._path.exists():
            return StoreSnapshot()
        try:
            with open(self._path, encoding="utf-8") as fh:
                return StoreSnapshot(**json.load(fh))
        except Exception as exc:
            raise PersistenceError(f"Failed to load data store {self._path}: {exc}") from exc

    def _write(self, data: StoreSnapshot) -> None:
        data_dict = data.model_dump(mode="json")
        tmp = self._path.with_suffix(".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(data_dict, fh, indent=2, ensure_ascii=False)
            tmp.replace(self._path)
        except Exception as exc:
            if tmp.exists():
                tmp.unlink()
            raise PersistenceError(f"Failed to save data store {self._path}: {exc}") from exc
