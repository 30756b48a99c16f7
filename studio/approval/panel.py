"""What a viewer sees of a post's review: a verdict, the controls, or nothing.

This mirrors the state machine's preconditions so the UI never offers an
action that would be rejected.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from studio.access.roles import Capabilities
from studio.approval.states import ReviewState, review_state
from studio.db.models import PostStatus


class PanelKind(str, Enum):
    verdict = "verdict"
    controls = "controls"
    hidden = "hidden"


@dataclass(frozen=True)
class ReviewPanel:
    kind: PanelKind
    state: ReviewState
    title: Optional[str] = None
    message: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    can_reopen: bool = False


def review_panel(post: Any, capabilities: Capabilities) -> ReviewPanel:
    """Pick the review panel for a post and viewer."""
    state = review_state(post)
    if not capabilities.has_access_to_workspace(post.workspace_id):
        return ReviewPanel(kind=PanelKind.hidden, state=state)

    # Reopening requires the post to still be with the client
    can_reopen = (
        capabilities.can_manage(post.workspace_id)
        and post.status == PostStatus.sent_to_client
    )

    if state == ReviewState.approved:
        approved_at = getattr(post, "approved_at", None)
        message = f"by {post.approved_by}"
        if approved_at is not None:
            message += f" on {approved_at:%b %d, %Y}"
        return ReviewPanel(
            kind=PanelKind.verdict,
            state=state,
            title="Approved",
            message=message,
            approved_by=post.approved_by,
            approved_at=approved_at,
            can_reopen=can_reopen,
        )

    if state == ReviewState.changes_requested:
        return ReviewPanel(
            kind=PanelKind.verdict,
            state=state,
            title="Changes Requested",
            message="Please review the comments and update the post",
            can_reopen=can_reopen,
        )

    if state == ReviewState.awaiting_review and capabilities.can_approve(post.workspace_id):
        return ReviewPanel(
            kind=PanelKind.controls,
            state=state,
            title="Awaiting Your Approval",
            message="Review this post and approve or request changes",
        )

    return ReviewPanel(kind=PanelKind.hidden, state=state)
