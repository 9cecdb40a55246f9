"""Tests for seedble/engine/compatibility.py."""

import pytest

from seedble.engine.compatibility import (
    EMPTY_AVERAGE_LEVEL,
    average_level,
    calculate_compatibility,
    matching_skills,
    round_half_up,
    score_candidate,
    score_candidates,
    skill_match_percentage,
)
from seedble.models import CandidateProfile, CandidateUser, ProfileSkill


def _profile(user_id: str, **levels: int) -> CandidateProfile:
    return CandidateProfile(
        user=CandidateUser(id=user_id, full_name=f"User {user_id}", role="Developer"),
        skills=[ProfileSkill(name=name, category="technical", level=lvl) for name, lvl in levels.items()],
    )


class TestMatchingSkills:
    def test_case_insensitive_intersection(self):
        skills = _profile("a", react=4, SQL=2).skills
        assert matching_skills(skills, ["React", "sql", "Figma"]) == ["React", "sql"]

    def test_keeps_required_order_and_drops_duplicates(self):
        skills = _profile("a", React=4, SQL=2).skills
        assert matching_skills(skills, ["SQL", "react", "React", " "]) == ["SQL", "react"]

    def test_no_skills_no_match(self):
        assert matching_skills([], ["React"]) == []


class TestSkillMatchPercentage:
    def test_full_match(self):
        skills = _profile("a", React=4, SQL=2).skills
        assert skill_match_percentage(skills, ["React", "SQL"]) == 100.0

    def test_partial_match(self):
        skills = _profile("a", React=4).skills
        assert skill_match_percentage(skills, ["React", "SQL", "CSS", "Figma"]) == 25.0

    def test_empty_required_list_is_zero(self):
        """No division by zero when nothing is required."""
        skills = _profile("a", React=4).skills
        assert skill_match_percentage(skills, []) == 0.0

    def test_blank_required_names_count_as_empty(self):
        skills = _profile("a", React=4).skills
        assert skill_match_percentage(skills, ["", "  "]) == 0.0


class TestAverageLevel:
    def test_mean_over_all_skills(self):
        skills = _profile("a", React=4, SQL=2, CSS=5).skills
        assert average_level(skills) == pytest.approx(11 / 3)

    def test_no_skills_is_zero(self):
        assert average_level([]) == EMPTY_AVERAGE_LEVEL == 0.0


class TestCalculateCompatibility:
    def test_level_scaled_to_percent(self):
        # (50 + 3 * 20) / 2 = 55
        assert calculate_compatibility(50.0, 3.0) == 55

    def test_rounds_half_up(self):
        # (25 + 2 * 20) / 2 = 32.5
        assert calculate_compatibility(25.0, 2.0) == 33

    def test_bounds(self):
        assert calculate_compatibility(0.0, 0.0) == 0
        assert calculate_compatibility(100.0, 5.0) == 100

    def test_round_half_up_differs_from_bankers_rounding(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(86.5) == 87
        assert round_half_up(86.49) == 86


class TestScoreCandidate:
    def test_react_sql_example(self):
        """React 4, SQL 2, CSS 5 against React + SQL scores 87."""
        score = score_candidate(_profile("a", React=4, SQL=2, CSS=5), ["React", "SQL"])
        assert score.matching_skills == ["React", "SQL"]
        assert score.skill_match_pct == 100.0
        assert score.average_level == pytest.approx(3.67)
        # (100 + 73.33) / 2 = 86.67
        assert score.compatibility == 87

    def test_zero_entries_depends_only_on_match(self):
        score = score_candidate(_profile("a"), ["React"])
        assert score.average_level == 0.0
        assert score.skill_match_pct == 0.0
        assert score.compatibility == 0

    @pytest.mark.parametrize("match_pct,expected", [
        (100.0, 50),
        (50.0, 25),
        (0.0, 0),
    ])
    def test_zero_level_compatibility_is_half_match(self, match_pct, expected):
        """With no skill entries the level term vanishes."""
        assert calculate_compatibility(match_pct, EMPTY_AVERAGE_LEVEL) == expected

    def test_empty_required_uses_level_only(self):
        score = score_candidate(_profile("a", React=5, SQL=5), [])
        assert score.skill_match_pct == 0.0
        assert score.compatibility == 50

    def test_carries_user_identity(self):
        score = score_candidate(_profile("u7", React=3), ["React"])
        assert score.user_id == "u7"
        assert score.full_name == "User u7"
        assert score.role == "Developer"


class TestScoreCandidates:
    def test_preserves_input_order(self):
        profiles = [_profile("a", CSS=1), _profile("b", React=5), _profile("c")]
        scores = score_candidates(profiles, ["React"])
        assert [s.user_id for s in scores] == ["a", "b", "c"]

    def test_empty_pool(self):
        assert score_candidates([], ["React"]) == []
