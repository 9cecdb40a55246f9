"""Team recommendation engine.

Ranks candidates by compatibility with a project's required skills, selects
the top N and derives project-level metrics plus a short narrative.
The numeric output is *pure*; only the optional narrator touches the outside
world, and its failure falls back to templated text.
"""

from __future__ import annotations

import logging
from typing import Literal, Protocol

from pydantic import BaseModel, Field

from seedble.engine.compatibility import CandidateScore, round_half_up, score_candidates
from seedble.models import CandidateProfile, ProjectRequirement


logger = logging.getLogger(__name__)

STRONG_MATCH_PCT = 75
LOW_COMPATIBILITY = 50
SENIOR_LEVEL = 4.0


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------
class TeamNarrative(BaseModel):
    """Free-text rationale for a recommended team."""

    reasoning: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class NarrativeContext(BaseModel):
    """Everything a narrator may use to describe a recommendation."""

    project_name: str = ""
    project_description: str = ""
    required_skills: list[str] = Field(default_factory=list)
    team_size: int = 4
    recommended_team: list[CandidateScore] = Field(default_factory=list)
    skills_coverage: int = 0
    success_prediction: int = 0
    uncovered_skills: list[str] = Field(default_factory=list)


class TeamRecommendation(BaseModel):
    """Ranked candidates, the selected top N and the derived metrics."""

    ranked_candidates: list[CandidateScore] = Field(default_factory=list)
    recommended_team: list[CandidateScore] = Field(default_factory=list)
    skills_coverage: int = Field(default=0, ge=0, le=100)
    success_prediction: int = Field(default=0, ge=0, le=100)
    covered_skills: list[str] = Field(default_factory=list)
    uncovered_skills: list[str] = Field(default_factory=list)
    reasoning: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    narrative_source: Literal["ai", "template"] = "template"


class TeamNarrator(Protocol):
    """Optional collaborator producing the narrative (e.g. an LLM)."""

    def generate_team_narrative(self, context: NarrativeContext) -> TeamNarrative: ...


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def rank_candidates(scores: list[CandidateScore]) -> list[CandidateScore]:
    """Sort by compatibility desc, then average level desc, then input order."""
    return sorted(scores, key=lambda s: (-s.compatibility, -s.average_level))


def recommend_team(
    profiles: list[CandidateProfile],
    requirement: ProjectRequirement,
    narrator: TeamNarrator | None = None,
    project_name: str = "",
    project_description: str = "",
) -> TeamRecommendation:
    """Recommend the top ``requirement.team_size_hint`` candidates.

    An empty candidate pool yields an empty recommendation with all metrics
    at 0. Running twice on the same inputs yields the same ranking and numbers.
    """
    required = requirement.required_skill_names
    ranked = rank_candidates(score_candidates(profiles, required))
    team = ranked[: requirement.team_size_hint]

    coverage = _mean_rounded([s.skill_match_pct for s in team])
    prediction = _mean_rounded([float(s.compatibility) for s in team])
    covered = _covered_skills(team, required)
    uncovered = [name for name in required if name not in covered]

    context = NarrativeContext(
        project_name=project_name,
        project_description=project_description,
        required_skills=required,
        team_size=requirement.team_size_hint,
        recommended_team=team,
        skills_coverage=coverage,
        success_prediction=prediction,
        uncovered_skills=uncovered,
    )
    narrative, source = _narrate(context, narrator)

    return TeamRecommendation(
        ranked_candidates=ranked,
        recommended_team=team,
        skills_coverage=coverage,
        success_prediction=prediction,
        covered_skills=covered,
        uncovered_skills=uncovered,
        reasoning=narrative.reasoning,
        risks=narrative.risks,
        suggestions=narrative.suggestions,
        narrative_source=source,
    )


def template_narrative(context: NarrativeContext) -> TeamNarrative:
    """Deterministic narrative built from the computed metrics."""
    reasoning: list[str] = []
    risks: list[str] = []
    suggestions: list[str] = []

    _strength_lines(context, reasoning)
    _risk_lines(context, risks)
    _suggestion_lines(context, suggestions)

    return TeamNarrative(reasoning=reasoning, risks=risks, suggestions=suggestions)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------
def _mean_rounded(values: list[float]) -> int:
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def _covered_skills(team: list[CandidateScore], required: list[str]) -> list[str]:
    owned = {name for s in team for name in s.matching_skills}
    return [name for name in required if name in owned]


def _owners(context: NarrativeContext, skill: str) -> list[CandidateScore]:
    return [s for s in context.recommended_team if skill in s.matching_skills]


def _narrate(
    context: NarrativeContext,
    narrator: TeamNarrator | None,
) -> tuple[TeamNarrative, Literal["ai", "template"]]:
    if narrator is not None:
        try:
            return narrator.generate_team_narrative(context), "ai"
        except Exception:
            logger.warning("Team narrative unavailable, using templated text", exc_info=True)
    return template_narrative(context), "template"


def _strength_lines(context: NarrativeContext, out: list[str]) -> None:
    for s in context.recommended_team:
        if context.required_skills and s.skill_match_pct >= STRONG_MATCH_PCT:
            out.append(
                f"Strong match ({round_half_up(s.skill_match_pct)}%) for {s.full_name or s.user_id} "
                f"on {', '.join(s.matching_skills)}"
            )
        if s.average_level >= SENIOR_LEVEL:
            out.append(
                f"{s.full_name or s.user_id} brings senior-level depth "
                f"(average level {s.average_level:.1f}/5)"
            )
    if context.recommended_team and context.required_skills and not context.uncovered_skills:
        out.append("The recommended team covers every required skill")
    if context.recommended_team and not out:
        out.append("Team ranked by skill compatibility with the project requirements")


def _risk_lines(context: NarrativeContext, out: list[str]) -> None:
    team = context.recommended_team
    if len(team) < context.team_size:
        out.append(f"Only {len(team)} candidate(s) available for a team of {context.team_size}")
    out.extend(f"No recommended member covers {skill}" for skill in context.uncovered_skills)
    for skill in context.required_skills:
        owners = _owners(context, skill)
        if len(owners) == 1 and len(team) > 1:
            out.append(f"{skill} depends on a single team member ({owners[0].full_name or owners[0].user_id})")
    out.extend(
        f"Low compatibility for {s.full_name or s.user_id} ({s.compatibility}%)"
        for s in team
        if s.compatibility < LOW_COMPATIBILITY
    )


def _suggestion_lines(context: NarrativeContext, out: list[str]) -> None:
    if not context.required_skills:
        out.append("Add required skills to get a skill-based recommendation")
        return
    out.extend(f"Consider adding a specialist in {skill}" for skill in context.uncovered_skills)
    for skill in context.required_skills:
        owners = _owners(context, skill)
        if len(owners) == 1 and len(context.recommended_team) > 1:
            out.append(f"Plan knowledge sharing on {skill} so the team is not blocked on one person")
