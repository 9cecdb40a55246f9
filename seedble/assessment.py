"""Skill self-assessment: responses → user skill entries.

A skill is a *priority* for the user when both level and interest are 4+.
"""

from __future__ import annotations

from datetime import datetime
import uuid

from pydantic import BaseModel, Field

from seedble.errors import ValidationError
from seedble.models import Assessment, AssessmentType, Skill, UserSkillEntry, utcnow


PRIORITY_MIN_LEVEL = 4
PRIORITY_MIN_INTEREST = 4


class SkillResponse(BaseModel):
    """Answer for one skill on the assessment form."""

    level: int = Field(default=1, ge=1, le=5)
    interest: int = Field(default=1, ge=1, le=5)


def is_priority(level: int, interest: int) -> bool:
    return level >= PRIORITY_MIN_LEVEL and interest >= PRIORITY_MIN_INTEREST


def initial_responses(skills: list[Skill]) -> dict[str, SkillResponse]:
    """Every skill starts at level 1, interest 1."""
    return {skill.id: SkillResponse() for skill in skills}


def new_assessment(
    user_id: str,
    assessment_type: AssessmentType = "complete",
    now: datetime | None = None,
) -> Assessment:
    return Assessment(
        id=uuid.uuid4().hex,
        user_id=user_id,
        type=assessment_type,
        status="in_progress",
        created_at=now or utcnow(),
    )


def build_skill_entries(
    user_id: str,
    responses: dict[str, SkillResponse],
    now: datetime | None = None,
) -> list[UserSkillEntry]:
    """One UserSkillEntry per answered skill.

    Raises:
        ValidationError: If there are no responses.
    """
    if not responses:
        raise ValidationError("An assessment needs at least one skill response")
    ts = now or utcnow()
    return [
        UserSkillEntry(
            user_id=user_id,
            skill_id=skill_id,
            level=r.level,
            interest=r.interest,
            is_priority=is_priority(r.level, r.interest),
            last_assessed=ts,
        )
        for skill_id, r in responses.items()
    ]


def complete_assessment(
    assessment: Assessment,
    skills_evaluated: int,
    completion_time: int,
    now: datetime | None = None,
) -> Assessment:
    """in_progress → completed.

    Raises:
        ValidationError: If the assessment is already completed.
    """
    if assessment.status != "in_progress":
        raise ValidationError(f"Assessment {assessment.id} is already {assessment.status}")
    return assessment.model_copy(update={
        "status": "completed",
        "skills_evaluated": skills_evaluated,
        "completion_time": max(0, completion_time),
        "completed_at": now or utcnow(),
    })
