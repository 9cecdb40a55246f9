"""Peer review data models and role-specific correction sheets.

A correction sheet lists, per review category, the skills a reviewer rates
(1-5) for a reviewee in a given role. Three sheets ship by default:
Senior Developer, UX Designer and Project Manager.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, computed_field, model_validator

from seedble.errors import ValidationError
from seedble.models import utcnow


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
ReviewStatus = Literal["pending", "in_progress", "completed", "validated", "flagged"]
ReviewCategory = Literal["technical", "soft", "process", "innovation"]

REVIEW_CATEGORIES: tuple[ReviewCategory, ...] = ("technical", "soft", "process", "innovation")


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------
class CategoryScores(BaseModel):
    """The four fixed category scores of a review, each in [0, 5]."""

    technical: float = Field(ge=0, le=5)
    soft: float = Field(ge=0, le=5)
    process: float = Field(ge=0, le=5)
    innovation: float = Field(ge=0, le=5)

    def as_dict(self) -> dict[str, float]:
        return {c: getattr(self, c) for c in REVIEW_CATEGORIES}

    @property
    def overall(self) -> float:
        """Unweighted mean of the four categories."""
        return sum(self.as_dict().values()) / len(REVIEW_CATEGORIES)

    @property
    def spread(self) -> float:
        values = self.as_dict().values()
        return max(values) - min(values)


class PeerReview(BaseModel):
    """A peer review from assignment to validation."""

    id: str = Field(..., min_length=1)
    reviewer_id: str = Field(..., min_length=1)
    reviewee_id: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1)
    status: ReviewStatus = "pending"

    technical_score: float | None = Field(default=None, ge=0, le=5)
    soft_score: float | None = Field(default=None, ge=0, le=5)
    process_score: float | None = Field(default=None, ge=0, le=5)
    innovation_score: float | None = Field(default=None, ge=0, le=5)

    feedback: str = ""
    flag_reason: str = ""

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    completed_at: datetime | None = None
    validated_at: datetime | None = None

    @model_validator(mode="after")
    def scores_required_once_completed(self) -> PeerReview:
        if self.status in ("completed", "validated", "flagged") and self.category_scores() is None:
            raise ValueError(f"A {self.status} review must carry all four category scores")
        return self

    def category_scores(self) -> CategoryScores | None:
        """Return the four scores, or None while any is missing."""
        values = {c: getattr(self, f"{c}_score") for c in REVIEW_CATEGORIES}
        if any(v is None for v in values.values()):
            return None
        return CategoryScores(**values)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_score(self) -> float | None:
        """Mean of the four category scores; None until all four are set."""
        scores = self.category_scores()
        return scores.overall if scores is not None else None


class SkillRating(BaseModel):
    """A single 1-5 rating of one skill within a review category."""

    skill: str = Field(..., min_length=1)
    category: ReviewCategory
    score: int = Field(ge=1, le=5)
    feedback: str | None = None
    skill_id: str | None = None


class ReviewDetail(BaseModel):
    """Persisted per-skill rating, child of a completed review."""

    id: str = Field(..., min_length=1)
    review_id: str = Field(..., min_length=1)
    skill_id: str = Field(..., min_length=1)
    score: int = Field(ge=1, le=5)
    feedback: str | None = None


# ---------------------------------------------------------------------------
# Correction sheets
# ---------------------------------------------------------------------------
class CorrectionSheet(BaseModel):
    """Skills to rate for one reviewee role, grouped by review category."""

    role: str = Field(..., min_length=1)
    technical: list[str] = Field(..., min_length=1)
    soft: list[str] = Field(..., min_length=1)
    process: list[str] = Field(..., min_length=1)
    innovation: list[str] = Field(..., min_length=1)

    def skills_for(self, category: ReviewCategory) -> list[str]:
        return list(getattr(self, category))

    def category_of(self, skill: str) -> ReviewCategory | None:
        for category in REVIEW_CATEGORIES:
            if skill in getattr(self, category):
                return category
        return None

    def build_ratings(
        self,
        scores: dict[str, int],
        feedback: dict[str, str] | None = None,
    ) -> list[SkillRating]:
        """Turn a ``{skill: score}`` form into ratings, in sheet order.

        Raises:
            ValidationError: If a rated skill is not on this sheet.
        """
        unknown = [s for s in scores if self.category_of(s) is None]
        if unknown:
            raise ValidationError(
                f"Skills not on the {self.role} correction sheet: {', '.join(sorted(unknown))}"
            )
        notes = feedback or {}
        return [
            SkillRating(skill=skill, category=category, score=scores[skill], feedback=notes.get(skill))
            for category in REVIEW_CATEGORIES
            for skill in getattr(self, category)
            if skill in scores
        ]


CORRECTION_SHEETS: dict[str, CorrectionSheet] = {
    "Senior Developer": CorrectionSheet(
        role="Senior Developer",
        technical=[
            "Code Quality & Architecture",
            "Technical Problem Solving",
            "Framework/Technology Expertise",
            "Performance Optimization",
            "Security Best Practices",
        ],
        soft=[
            "Team Collaboration",
            "Communication Clarity",
            "Mentoring & Knowledge Sharing",
            "Adaptability",
            "Time Management",
        ],
        process=[
            "Code Review Quality",
            "Documentation Standards",
            "Testing Practices",
            "Agile Methodology",
            "Deployment Processes",
        ],
        innovation=[
            "Creative Problem Solving",
            "Technology Adoption",
            "Process Improvement",
            "Knowledge Contribution",
            "Initiative Taking",
        ],
    ),
    "UX Designer": CorrectionSheet(
        role="UX Designer",
        technical=[
            "Design Tool Proficiency",
            "User Research Methods",
            "Prototyping Skills",
            "Visual Design",
            "Interaction Design",
        ],
        soft=[
            "Stakeholder Communication",
            "Empathy & User Advocacy",
            "Presentation Skills",
            "Collaboration",
            "Feedback Reception",
        ],
        process=[
            "Design Process Adherence",
            "User Testing Execution",
            "Design System Usage",
            "Project Timeline Management",
            "Quality Assurance",
        ],
        innovation=[
            "Design Innovation",
            "User Experience Enhancement",
            "Process Optimization",
            "Trend Awareness",
            "Creative Solutions",
        ],
    ),
    "Project Manager": CorrectionSheet(
        role="Project Manager",
        technical=["Project Planning", "Resource Management", "Risk Assessment", "Budget Management", "Tool Proficiency"],
        soft=["Leadership", "Stakeholder Management", "Conflict Resolution", "Team Motivation", "Communication"],
        process=[
            "Methodology Implementation",
            "Quality Management",
            "Change Management",
            "Reporting & Documentation",
            "Meeting Facilitation",
        ],
        innovation=[
            "Process Innovation",
            "Strategic Thinking",
            "Continuous Improvement",
            "Technology Integration",
            "Team Development",
        ],
    ),
}


def get_correction_sheet(role: str) -> CorrectionSheet:
    """Return the correction sheet for *role*.

    Raises:
        ValidationError: If no sheet exists for the role.
    """
    sheet = CORRECTION_SHEETS.get(role)
    if sheet is None:
        raise ValidationError(f"No correction sheet for role '{role}'")
    return sheet
