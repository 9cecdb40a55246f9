"""Domain models for skills, candidates, projects and assessments.

Defines the skill catalog entry, per-user skill profile entries, the candidate
profile consumed by the scorer, and the project / assessment records kept by
the data store.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from seedble.errors import NotFoundError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
SkillCategory = Literal["technical", "soft", "process"]
ProjectPriority = Literal["low", "medium", "high"]
ProjectStatus = Literal["active", "completed", "archived"]
AssessmentType = Literal["complete", "quick", "role-specific"]
AssessmentStatus = Literal["in_progress", "completed"]


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------
class Skill(BaseModel):
    """A named skill in the catalog. Names are unique, case-insensitively."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    category: SkillCategory
    description: str = ""
    created_at: datetime = Field(default_factory=utcnow)


class UserSkillEntry(BaseModel):
    """One assessed skill of one user; unique per (user_id, skill_id)."""

    user_id: str = Field(..., min_length=1)
    skill_id: str = Field(..., min_length=1)
    level: int = Field(ge=1, le=5)
    interest: int = Field(ge=1, le=5)
    is_priority: bool = False
    last_assessed: datetime = Field(default_factory=utcnow)


class CandidateUser(BaseModel):
    """A user who can be staffed on projects or reviewed."""

    id: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1, max_length=100)
    role: str = ""
    department: str = ""
    email: str = ""


class ProfileSkill(BaseModel):
    """A user skill entry joined with its catalog name."""

    name: str = Field(..., min_length=1)
    category: SkillCategory
    level: int = Field(ge=1, le=5)
    interest: int = Field(default=1, ge=1, le=5)
    is_priority: bool = False


class CandidateProfile(BaseModel):
    """Snapshot of a candidate and their skills, as seen by the scorer."""

    user: CandidateUser
    skills: list[ProfileSkill] = Field(default_factory=list)

    @classmethod
    def from_entries(
        cls,
        user: CandidateUser,
        entries: list[UserSkillEntry],
        catalog: dict[str, Skill],
    ) -> CandidateProfile:
        """Join *entries* with the *catalog* (skill id → Skill)."""
        skills: list[ProfileSkill] = []
        for entry in entries:
            skill = catalog.get(entry.skill_id)
            if skill is None:
                raise NotFoundError("skill", entry.skill_id)
            skills.append(ProfileSkill(
                name=skill.name,
                category=skill.category,
                level=entry.level,
                interest=entry.interest,
                is_priority=entry.is_priority,
            ))
        return cls(user=user, skills=skills)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------
def _clean_skill_names(names: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for raw in names:
        name = raw.strip()
        key = name.casefold()
        if not name or key in seen:
            continue
        seen.add(key)
        result.append(name)
    return result


class ProjectRequirement(BaseModel):
    """Transient recommendation input: required skills + desired team size."""

    required_skill_names: list[str] = Field(default_factory=list)
    team_size_hint: int = Field(default=4, ge=1, le=50)

    @field_validator("required_skill_names")
    @classmethod
    def dedupe_names(cls, v: list[str]) -> list[str]:
        """Strip blanks and drop case-insensitive duplicates, keeping order."""
        return _clean_skill_names(v)


class ProjectDraft(BaseModel):
    """Project fields collected by the creation workflow."""

    name: str = ""
    description: str = ""
    priority: ProjectPriority = "medium"
    timeline: str = ""
    budget: int | None = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)
    required_skills: list[str] = Field(default_factory=list)
    team_size: int = Field(default=4, ge=1, le=50)

    def to_requirement(self) -> ProjectRequirement:
        return ProjectRequirement(
            required_skill_names=self.required_skills,
            team_size_hint=self.team_size,
        )


class Project(BaseModel):
    """A persisted project."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    start_date: date
    end_date: date | None = None
    status: ProjectStatus = "active"
    priority: ProjectPriority = "medium"
    tags: list[str] = Field(default_factory=list)
    required_skills: list[str] = Field(default_factory=list)
    budget: int | None = None
    created_at: datetime = Field(default_factory=utcnow)


class ProjectMember(BaseModel):
    """Membership of a user in a project."""

    id: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    role: str = ""


class ProjectOverview(BaseModel):
    """A project with its members' display names, for listings."""

    project: Project
    members: list[tuple[str, str]] = Field(default_factory=list)  # (full name, role)


# ---------------------------------------------------------------------------
# Assessments
# ---------------------------------------------------------------------------
class Assessment(BaseModel):
    """A skill self-assessment session."""

    id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    type: AssessmentType = "complete"
    status: AssessmentStatus = "in_progress"
    skills_evaluated: int = Field(default=0, ge=0)
    completion_time: int | None = Field(default=None, ge=0)  # seconds
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: datetime | None = None


# ---------------------------------------------------------------------------
# Knowledge circles
# ---------------------------------------------------------------------------
class KnowledgeCircle(BaseModel):
    """A community-of-practice grouping."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    category: str = ""
    icon: str = "💡"
    color: str = "#8B5CF6"
    member_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)


class CircleMember(BaseModel):
    circle_id: str
    user_id: str
