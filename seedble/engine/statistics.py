"""Review buckets, dashboard counters and review notifications.

All functions are *pure*.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from seedble.review_models import PeerReview


class ReviewBuckets(BaseModel):
    """A user's reviews: to do, done (as reviewer) and received."""

    pending: list[PeerReview] = Field(default_factory=list)
    completed: list[PeerReview] = Field(default_factory=list)
    received: list[PeerReview] = Field(default_factory=list)


class TeamReviewStats(BaseModel):
    total_reviews: int = Field(default=0, ge=0)
    completed_reviews: int = Field(default=0, ge=0)
    pending_reviews: int = Field(default=0, ge=0)
    average_score: float = Field(default=0.0, ge=0, le=5)
    completion_rate: float = Field(default=0.0, ge=0, le=100)
    active_users: int = Field(default=0, ge=0)


class UserStatistics(BaseModel):
    skills_count: int = Field(default=0, ge=0)
    assessments_count: int = Field(default=0, ge=0)
    projects_count: int = Field(default=0, ge=0)
    pending_reviews_count: int = Field(default=0, ge=0)


def partition_reviews(reviews: list[PeerReview], user_id: str) -> ReviewBuckets:
    """Split *reviews* into the user's buckets, newest first."""
    newest_first = sorted(reviews, key=lambda r: r.created_at, reverse=True)
    return ReviewBuckets(
        pending=[
            r for r in newest_first
            if r.reviewer_id == user_id and r.status in ("pending", "in_progress")
        ],
        completed=[
            r for r in newest_first
            if r.reviewer_id == user_id and r.status in ("completed", "validated")
        ],
        received=[r for r in newest_first if r.reviewee_id == user_id],
    )


def team_review_stats(buckets: ReviewBuckets, active_users: int) -> TeamReviewStats:
    """Dashboard counters; scores of 0 or missing are left out of the average."""
    completed = len(buckets.completed)
    pending = len(buckets.pending)
    total = completed + pending

    scores = [r.overall_score for r in buckets.completed if r.overall_score]
    average = sum(scores) / len(scores) if scores else 0.0

    return TeamReviewStats(
        total_reviews=total,
        completed_reviews=completed,
        pending_reviews=pending,
        average_score=average,
        completion_rate=(completed / total * 100) if total else 0.0,
        active_users=active_users,
    )


def user_statistics(
    user_id: str,
    skill_count: int,
    assessment_statuses: list[str],
    project_count: int,
    reviews: list[PeerReview],
) -> UserStatistics:
    """Counters for the personal dashboard."""
    return UserStatistics(
        skills_count=skill_count,
        assessments_count=sum(1 for s in assessment_statuses if s == "completed"),
        projects_count=project_count,
        pending_reviews_count=sum(
            1 for r in reviews
            if r.reviewer_id == user_id and r.status in ("pending", "in_progress")
        ),
    )


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
NotificationType = Literal["review_assigned", "review_received"]

RECENT_RECEIVED_LIMIT = 3


class Notification(BaseModel):
    """A review event shown to a user; derived from the reviews, never stored."""

    id: str
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    read: bool = False


def notifications_for(
    user_id: str,
    reviews: list[PeerReview],
    user_names: Mapping[str, str] | None = None,
    project_names: Mapping[str, str] | None = None,
    read_ids: Collection[str] = (),
) -> list[Notification]:
    """Notifications for the reviews assigned to and received by *user_id*.

    One ``review_assigned`` per open review the user has to write, and one
    ``review_received`` for each of the latest completed reviews about the
    user. Ids are stable, so read state survives a rebuild. Newest first.
    """
    users = user_names or {}
    projects = project_names or {}
    buckets = partition_reviews(reviews, user_id)

    notes = [
        Notification(
            id=f"pending-{r.id}",
            type="review_assigned",
            title="New Peer Review Assigned",
            message=(
                f"You have been assigned to review {users.get(r.reviewee_id, r.reviewee_id)} "
                f"for the {projects.get(r.project_id, r.project_id)} project"
            ),
            timestamp=r.created_at,
        )
        for r in buckets.pending
    ]
    received = [r for r in buckets.received if r.status == "completed"][:RECENT_RECEIVED_LIMIT]
    notes.extend(
        Notification(
            id=f"received-{r.id}",
            type="review_received",
            title="Peer Review Received",
            message=(
                f"{users.get(r.reviewer_id, r.reviewer_id)} has completed your peer review "
                f"for {projects.get(r.project_id, r.project_id)}"
            ),
            timestamp=r.completed_at or r.created_at,
        )
        for r in received
    )
    read = set(read_ids)
    notes = [n.model_copy(update={"read": n.id in read}) for n in notes]
    return sorted(notes, key=lambda n: n.timestamp, reverse=True)


def unread_count(notifications: list[Notification]) -> int:
    return sum(1 for n in notifications if not n.read)


def mark_read(notifications: list[Notification], notification_id: str) -> list[Notification]:
    """Copy of *notifications* with one of them marked read."""
    return [
        n.model_copy(update={"read": True}) if n.id == notification_id else n
        for n in notifications
    ]


def mark_all_read(notifications: list[Notification]) -> list[Notification]:
    return [n.model_copy(update={"read": True}) for n in notifications]


def read_notification_ids(notifications: list[Notification]) -> set[str]:
    """Ids to carry over to the next ``notifications_for`` call."""
    return {n.id for n in notifications if n.read}
