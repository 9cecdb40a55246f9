"""AI advisor: LLM-generated team narratives, skill insights and suggestions.

``LLMAdvisor`` raises ``NarrativeUnavailableError`` whenever the LLM call or
the parsing of its JSON reply fails. Callers fall back to the deterministic
defaults defined here, so the application works without any LLM configured.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Literal

from crewai import LLM
from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError

from seedble.engine.recommendations import NarrativeContext, TeamNarrative
from seedble.errors import NarrativeUnavailableError
from seedble.models import ProfileSkill


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------
class SkillInsight(BaseModel):
    """A personalised development insight."""

    title: str = Field(..., min_length=1)
    description: str = ""
    action: str = ""
    priority: Literal["high", "medium", "low"] = "medium"


class SuggestedSkill(BaseModel):
    name: str = Field(..., min_length=1)
    confidence: int = Field(ge=0, le=100)
    reason: str = ""


class RoleSkillSuggestions(BaseModel):
    """Skills relevant to a role, by catalog category."""

    technical: list[SuggestedSkill] = Field(default_factory=list)
    soft: list[SuggestedSkill] = Field(default_factory=list)
    process: list[SuggestedSkill] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
FIRST_ASSESSMENT_INSIGHT = SkillInsight(
    title="Complete Your First Assessment",
    description="You haven't completed a skills assessment yet. Start now to get personalized insights.",
    action="Start Assessment",
    priority="high",
)

DEFAULT_INSIGHTS: list[SkillInsight] = [
    SkillInsight(
        title="Skill Gap Identified",
        description="Your DevOps skills could benefit from focused development to match your seniority level",
        action="Explore DevOps Learning Path",
        priority="high",
    ),
    SkillInsight(
        title="Emerging Skill Opportunity",
        description="AI/ML skills are trending in your field. Consider adding them to your development plan",
        action="Assess AI/ML Skills",
        priority="medium",
    ),
]

DEFAULT_ROLE_SUGGESTIONS = RoleSkillSuggestions(
    technical=[
        SuggestedSkill(name="JavaScript", confidence=95, reason="Essential for modern web development"),
        SuggestedSkill(name="React", confidence=90, reason="Popular frontend framework"),
    ],
    soft=[SuggestedSkill(name="Communication", confidence=95, reason="Essential for team collaboration")],
    process=[SuggestedSkill(name="Agile", confidence=90, reason="Standard development methodology")],
)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------
TEAM_SYSTEM_PROMPT = "You are a staffing expert who explains why a team fits a project."

TEAM_PROMPT = """Review the recommended team for this project.

Project: {project_name}
Description: {project_description}
Required skills: {required_skills}
Skills coverage: {skills_coverage}%
Success prediction: {success_prediction}%
Uncovered skills: {uncovered_skills}

Recommended team (JSON):
{team}

Reply with valid JSON only, using this structure:
{{"reasoning": ["strength"], "risks": ["risk"], "suggestions": ["suggestion"]}}"""

INSIGHTS_SYSTEM_PROMPT = (
    "You are an expert career development consultant who analyses skills and gives strategic advice."
)

INSIGHTS_PROMPT = """Analyse the following skills of a professional:
{skills}

Generate 3 personalised insights. For each give a concise title, a short
description of the problem or opportunity, a recommended action and a
priority (high, medium, low).

Reply with valid JSON only, using this structure:
[{{"title": "...", "description": "...", "action": "...", "priority": "high|medium|low"}}]"""

SUGGESTIONS_SYSTEM_PROMPT = (
    "You are a career development expert who knows the skills required by technology roles."
)

SUGGESTIONS_PROMPT = """Suggest relevant skills for a professional with the role "{role}"
and experience level "{experience}".

Split them into technical, soft and process skills. For each give the skill
name, a confidence percentage that it is relevant, and a short reason.

Reply with valid JSON only, using this structure:
{{"technical": [{{"name": "...", "confidence": 95, "reason": "..."}}],
  "soft": [{{"name": "...", "confidence": 90, "reason": "..."}}],
  "process": [{{"name": "...", "confidence": 85, "reason": "..."}}]}}"""


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------
def extract_json(raw_text: str) -> Any:
    """Parse JSON from an LLM reply, bare or inside a markdown code block.

    Raises:
        NarrativeUnavailableError: If no valid JSON can be found.
    """
    fenced = re.search(r"```(?:json)?\s*([\[{].*[\]}])\s*```", raw_text, re.DOTALL)
    json_str = fenced.group(1) if fenced else raw_text.strip()

    if not json_str.startswith(("{", "[")):
        starts = [i for i in (json_str.find("{"), json_str.find("[")) if i >= 0]
        end = max(json_str.rfind("}"), json_str.rfind("]"))
        if starts and end > min(starts):
            json_str = json_str[min(starts): end + 1]

    try:
        return json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise NarrativeUnavailableError(f"LLM reply is not valid JSON: {raw_text[:200]}") from exc


# ---------------------------------------------------------------------------
# Advisor
# ---------------------------------------------------------------------------
class LLMAdvisor:
    """AI collaborator backed by a crewai LLM."""

    def __init__(self, llm: LLM):
        self._llm = llm

    def generate_team_narrative(self, context: NarrativeContext) -> TeamNarrative:
        team = [
            {
                "name": s.full_name,
                "role": s.role,
                "matching_skills": s.matching_skills,
                "skill_match": round(s.skill_match_pct),
                "average_level": s.average_level,
                "compatibility": s.compatibility,
            }
            for s in context.recommended_team
        ]
        prompt = TEAM_PROMPT.format(
            project_name=context.project_name or "(unnamed)",
            project_description=context.project_description or "(none)",
            required_skills=", ".join(context.required_skills) or "(none)",
            skills_coverage=context.skills_coverage,
            success_prediction=context.success_prediction,
            uncovered_skills=", ".join(context.uncovered_skills) or "(none)",
            team=json.dumps(team, indent=2, ensure_ascii=False),
        )
        data = self._ask(TEAM_SYSTEM_PROMPT, prompt)
        if not isinstance(data, dict):
            raise NarrativeUnavailableError("Team narrative must be a JSON object")
        return self._build(TeamNarrative, data)

    def generate_skill_insights(self, skills: list[ProfileSkill]) -> list[SkillInsight]:
        payload = [s.model_dump() for s in skills]
        prompt = INSIGHTS_PROMPT.format(skills=json.dumps(payload, indent=2, ensure_ascii=False))
        data = self._ask(INSIGHTS_SYSTEM_PROMPT, prompt)
        if not isinstance(data, list):
            raise NarrativeUnavailableError("Skill insights must be a JSON array")
        return [self._build(SkillInsight, item) for item in data]

    def suggest_skills_for_role(self, role: str, experience: str = "mid-level") -> RoleSkillSuggestions:
        prompt = SUGGESTIONS_PROMPT.format(role=role, experience=experience)
        data = self._ask(SUGGESTIONS_SYSTEM_PROMPT, prompt)
        if not isinstance(data, dict):
            raise NarrativeUnavailableError("Skill suggestions must be a JSON object")
        return self._build(RoleSkillSuggestions, data)

    def _ask(self, system: str, prompt: str) -> Any:
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        try:
            reply = self._llm.call(messages)
        except Exception as exc:
            raise NarrativeUnavailableError(f"LLM call failed: {exc}") from exc
        if not isinstance(reply, str) or not reply.strip():
            raise NarrativeUnavailableError("LLM returned an empty reply")
        return extract_json(reply)

    @staticmethod
    def _build(model: type[BaseModel], data: Any) -> Any:
        try:
            return model.model_validate(data)
        except SchemaError as exc:
            raise NarrativeUnavailableError(f"Unexpected {model.__name__} shape: {exc}") from exc


# ---------------------------------------------------------------------------
# Fallback-aware helpers
# ---------------------------------------------------------------------------
def skill_insights(skills: list[ProfileSkill], advisor: LLMAdvisor | None = None) -> list[SkillInsight]:
    """Insights for a user's skills; never raises on LLM failure."""
    if not skills:
        return [FIRST_ASSESSMENT_INSIGHT]
    if advisor is None:
        return list(DEFAULT_INSIGHTS)
    try:
        return advisor.generate_skill_insights(skills)
    except NarrativeUnavailableError:
        logger.warning("Skill insights unavailable, using defaults", exc_info=True)
        return list(DEFAULT_INSIGHTS)


def skill_suggestions(
    role: str,
    experience: str = "mid-level",
    advisor: LLMAdvisor | None = None,
) -> RoleSkillSuggestions:
    """Skill suggestions for a role; never raises on LLM failure."""
    if advisor is None:
        return DEFAULT_ROLE_SUGGESTIONS.model_copy(deep=True)
    try:
        return advisor.suggest_skills_for_role(role, experience or "mid-level")
    except NarrativeUnavailableError:
        logger.warning("Skill suggestions unavailable for %s, using defaults", role, exc_info=True)
        return DEFAULT_ROLE_SUGGESTIONS.model_copy(deep=True)
