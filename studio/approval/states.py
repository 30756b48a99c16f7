"""Review states and verdicts of a post."""

from enum import Enum
from typing import Any

from studio.db.models import ApprovalStatus, PostStatus


class ApprovalVerdict(str, Enum):
    """Outcome of a client review."""

    approved = "approved"
    changes_requested = "changes_requested"

    @property
    def approval_status(self) -> ApprovalStatus:
        return ApprovalStatus(self.value)


class ReviewState(str, Enum):
    """Where a post stands in its review cycle."""

    awaiting_review = "awaiting_review"
    approved = "approved"
    changes_requested = "changes_requested"
    not_in_review = "not_in_review"


def _value(raw: Any) -> str:
    return raw.value if hasattr(raw, "value") else str(raw)


def review_state(post: Any) -> ReviewState:
    """Derive the review state of a post.

    A recorded verdict wins over production status, so a post that was
    approved and then scheduled still reads as approved.
    """
    approval = _value(getattr(post, "approval_status", None) or ApprovalStatus.none)
    if approval == ApprovalStatus.approved.value:
        return ReviewState.approved
    if approval == ApprovalStatus.changes_requested.value:
        return ReviewState.changes_requested
    if _value(post.status) == PostStatus.sent_to_client.value:
        return ReviewState.awaiting_review
    return ReviewState.not_in_review
