"""Compatibility scoring between a candidate and a project's required skills.

All functions are *pure*: no side-effects, no I/O.

Scaling: the average skill level (1-5) is mapped onto 0-100 by ×20 before it
is averaged with the skill-match percentage, so both terms are percentages::

    compatibility = round((skill_match_pct + average_level * 20) / 2)
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from pydantic import BaseModel, Field

from seedble.models import CandidateProfile, ProfileSkill


# ---------------------------------------------------------------------------
# Policy constants
# ---------------------------------------------------------------------------
LEVEL_TO_PERCENT = 20
EMPTY_MATCH_PERCENTAGE = 0.0
EMPTY_AVERAGE_LEVEL = 0.0


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------
class CandidateScore(BaseModel):
    """Derived fit of one candidate for one requirement set. Never persisted."""

    user_id: str
    full_name: str = ""
    role: str = ""
    matching_skills: list[str] = Field(default_factory=list)
    skill_match_pct: float = Field(ge=0, le=100)
    average_level: float = Field(ge=0, le=5)
    compatibility: int = Field(ge=0, le=100)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def _key(name: str) -> str:
    return name.strip().casefold()


def _required_keys(required_skills: Iterable[str]) -> dict[str, str]:
    """Map normalized key → first spelling, dropping blanks and duplicates."""
    keys: dict[str, str] = {}
    for name in required_skills:
        key = _key(name)
        if key and key not in keys:
            keys[key] = name.strip()
    return keys


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def matching_skills(skills: list[ProfileSkill], required_skills: Iterable[str]) -> list[str]:
    """Case-insensitive intersection, in required-skill order and spelling."""
    owned = {_key(s.name) for s in skills}
    return [name for key, name in _required_keys(required_skills).items() if key in owned]


def skill_match_percentage(skills: list[ProfileSkill], required_skills: Iterable[str]) -> float:
    """100 × |matching| / |required|; 0 when nothing is required."""
    required = _required_keys(required_skills)
    if not required:
        return EMPTY_MATCH_PERCENTAGE
    return 100.0 * len(matching_skills(skills, required.values())) / len(required)


def average_level(skills: list[ProfileSkill]) -> float:
    """Mean level across all of the candidate's skills; 0 for none."""
    if not skills:
        return EMPTY_AVERAGE_LEVEL
    return sum(s.level for s in skills) / len(skills)


def calculate_compatibility(match_pct: float, avg_level: float) -> int:
    """Combine a match percentage and a 0-5 level into a 0-100 score."""
    score = round_half_up((match_pct + avg_level * LEVEL_TO_PERCENT) / 2)
    return max(0, min(100, score))


def score_candidate(profile: CandidateProfile, required_skills: Iterable[str]) -> CandidateScore:
    """Compute the full CandidateScore for *profile*."""
    required = list(_required_keys(required_skills).values())
    match_pct = skill_match_percentage(profile.skills, required)
    avg = average_level(profile.skills)
    return CandidateScore(
        user_id=profile.user.id,
        full_name=profile.user.full_name,
        role=profile.user.role,
        matching_skills=matching_skills(profile.skills, required),
        skill_match_pct=match_pct,
        average_level=round(avg, 2),
        compatibility=calculate_compatibility(match_pct, avg),
    )


def score_candidates(
    profiles: list[CandidateProfile],
    required_skills: Iterable[str],
) -> list[CandidateScore]:
    """Score every profile, preserving input order."""
    required = list(required_skills)
    return [score_candidate(p, required) for p in profiles]
