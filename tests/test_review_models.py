"""Unit tests for review_models.py"""

import pytest
from pydantic import ValidationError as SchemaError

from seedble.errors import ValidationError
from seedble.review_models import (
    CORRECTION_SHEETS,
    REVIEW_CATEGORIES,
    CategoryScores,
    PeerReview,
    get_correction_sheet,
)


class TestCategoryScores:
    def test_overall_is_unweighted_mean(self):
        scores = CategoryScores(technical=4.2, soft=4.0, process=3.8, innovation=4.1)
        assert scores.overall == pytest.approx(4.025)

    def test_out_of_range_rejected(self):
        with pytest.raises(SchemaError):
            CategoryScores(technical=5.5, soft=4, process=4, innovation=4)


class TestPeerReview:
    def test_completed_review_needs_all_scores(self):
        with pytest.raises(SchemaError, match="all four category scores"):
            PeerReview(
                id="r1", reviewer_id="u1", reviewee_id="u2", project_id="p1",
                status="completed", technical_score=4, soft_score=4, process_score=4,
            )

    def test_overall_score_none_until_scored(self):
        review = PeerReview(id="r1", reviewer_id="u1", reviewee_id="u2", project_id="p1", technical_score=4)
        assert review.category_scores() is None
        assert review.overall_score is None

    def test_round_trip_ignores_computed_overall(self):
        review = PeerReview(
            id="r1", reviewer_id="u1", reviewee_id="u2", project_id="p1", status="completed",
            technical_score=4, soft_score=0, process_score=3, innovation_score=4,
        )
        data = review.model_dump(mode="json")
        assert data["overall_score"] == 2.75
        assert PeerReview.model_validate(data) == review


class TestCorrectionSheets:
    def test_default_roles(self):
        assert set(CORRECTION_SHEETS) == {"Senior Developer", "UX Designer", "Project Manager"}

    @pytest.mark.parametrize("role", list(CORRECTION_SHEETS))
    def test_every_category_has_five_skills(self, role):
        sheet = CORRECTION_SHEETS[role]
        for category in REVIEW_CATEGORIES:
            assert len(sheet.skills_for(category)) == 5

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError, match="No correction sheet"):
            get_correction_sheet("Astronaut")

    def test_category_of(self):
        sheet = get_correction_sheet("Senior Developer")
        assert sheet.category_of("Testing Practices") == "process"
        assert sheet.category_of("Leadership") is None

    def test_build_ratings_in_sheet_order(self):
        sheet = get_correction_sheet("Project Manager")
        ratings = sheet.build_ratings(
            {"Team Development": 2, "Leadership": 5, "Project Planning": 4},
            feedback={"Leadership": "Great"},
        )
        assert [(r.skill, r.category, r.score) for r in ratings] == [
            ("Project Planning", "technical", 4),
            ("Leadership", "soft", 5),
            ("Team Development", "innovation", 2),
        ]
        assert ratings[1].feedback == "Great"
        assert ratings[0].skill_id is None

    def test_build_ratings_rejects_unknown_skill(self):
        sheet = get_correction_sheet("UX Designer")
        with pytest.raises(ValidationError, match="Kubernetes"):
            sheet.build_ratings({"Kubernetes": 3})
