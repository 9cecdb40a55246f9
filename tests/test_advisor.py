"""Tests for seedble.advisor module."""

from unittest.mock import MagicMock

import pytest

from seedble.advisor import (
    DEFAULT_INSIGHTS,
    DEFAULT_ROLE_SUGGESTIONS,
    FIRST_ASSESSMENT_INSIGHT,
    LLMAdvisor,
    extract_json,
    skill_insights,
    skill_suggestions,
)
from seedble.engine.compatibility import CandidateScore
from seedble.engine.recommendations import NarrativeContext
from seedble.errors import NarrativeUnavailableError
from seedble.models import ProfileSkill


def _advisor(reply=None, error=None) -> tuple[LLMAdvisor, MagicMock]:
    llm = MagicMock()
    if error is not None:
        llm.call.side_effect = error
    else:
        llm.call.return_value = reply
    return LLMAdvisor(llm), llm


SKILLS = [ProfileSkill(name="React", category="technical", level=4, interest=5)]


# ---------------------------------------------------------------------------
# extract_json
# ---------------------------------------------------------------------------


class TestExtractJson:
    def test_bare_object(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_fenced_block(self):
        assert extract_json('Here you go:\n```json\n[{"a": 1}]\n```\nThanks') == [{"a": 1}]

    def test_embedded_in_prose(self):
        assert extract_json('Sure! {"risks": ["x"]} Hope it helps.') == {"risks": ["x"]}

    def test_invalid_json_raises(self):
        with pytest.raises(NarrativeUnavailableError, match="not valid JSON"):
            extract_json("no json here")


# ---------------------------------------------------------------------------
# LLMAdvisor
# ---------------------------------------------------------------------------


class TestTeamNarrative:
    def test_parses_reply(self):
        advisor, llm = _advisor('{"reasoning": ["Fit"], "risks": [], "suggestions": ["Pair up"]}')
        context = NarrativeContext(
            project_name="Shop",
            required_skills=["React"],
            recommended_team=[CandidateScore(
                user_id="u1", full_name="Marco Rossi", matching_skills=["React"],
                skill_match_pct=100, average_level=4, compatibility=90,
            )],
        )
        narrative = advisor.generate_team_narrative(context)

        assert narrative.reasoning == ["Fit"]
        assert narrative.suggestions == ["Pair up"]
        messages = llm.call.call_args.args[0]
        assert [m["role"] for m in messages] == ["system", "user"]
        assert "Shop" in messages[1]["content"]
        assert "Marco Rossi" in messages[1]["content"]

    def test_llm_error_becomes_unavailable(self):
        advisor, _ = _advisor(error=ConnectionError("timeout"))
        with pytest.raises(NarrativeUnavailableError, match="LLM call failed"):
            advisor.generate_team_narrative(NarrativeContext())

    def test_empty_reply(self):
        advisor, _ = _advisor("   ")
        with pytest.raises(NarrativeUnavailableError, match="empty"):
            advisor.generate_team_narrative(NarrativeContext())

    def test_wrong_shape(self):
        advisor, _ = _advisor('["not", "an", "object"]')
        with pytest.raises(NarrativeUnavailableError):
            advisor.generate_team_narrative(NarrativeContext())


class TestSkillInsights:
    def test_parses_reply(self):
        advisor, _ = _advisor(
            '```json\n[{"title": "Go deeper", "description": "d", "action": "a", "priority": "low"}]\n```'
        )
        insights = advisor.generate_skill_insights(SKILLS)
        assert [(i.title, i.priority) for i in insights] == [("Go deeper", "low")]

    def test_invalid_priority_rejected(self):
        advisor, _ = _advisor('[{"title": "x", "priority": "urgent"}]')
        with pytest.raises(NarrativeUnavailableError, match="SkillInsight"):
            advisor.generate_skill_insights(SKILLS)

    def test_empty_profile_skips_llm(self):
        advisor, llm = _advisor("[]")
        assert skill_insights([], advisor) == [FIRST_ASSESSMENT_INSIGHT]
        llm.call.assert_not_called()

    def test_defaults_without_advisor(self):
        assert skill_insights(SKILLS) == DEFAULT_INSIGHTS

    def test_defaults_on_failure(self):
        advisor, _ = _advisor("garbage")
        assert skill_insights(SKILLS, advisor) == DEFAULT_INSIGHTS


class TestSkillSuggestions:
    def test_parses_reply(self):
        advisor, llm = _advisor(
            '{"technical": [{"name": "Go", "confidence": 80, "reason": "r"}], "soft": [], "process": []}'
        )
        suggestions = skill_suggestions("Backend Developer", "senior", advisor)
        assert [s.name for s in suggestions.technical] == ["Go"]
        assert "senior" in llm.call.call_args.args[0][1]["content"]

    def test_confidence_out_of_range_falls_back(self):
        advisor, _ = _advisor('{"technical": [{"name": "Go", "confidence": 180}]}')
        assert skill_suggestions("Dev", advisor=advisor) == DEFAULT_ROLE_SUGGESTIONS

    def test_defaults_without_advisor(self):
        result = skill_suggestions("Dev")
        assert result == DEFAULT_ROLE_SUGGESTIONS
        result.technical.clear()
        assert DEFAULT_ROLE_SUGGESTIONS.technical
