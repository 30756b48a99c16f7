"""Review decision routes.

Provides endpoints for:
- POST /v1/posts/{post_id}/approve
- POST /v1/posts/{post_id}/request-changes
- POST /v1/posts/{post_id}/reopen

Bodies may carry `expected_version`, the review_version the caller saw; if
the post moved on since, the call fails with 409 instead of overwriting
someone else's decision.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from api.auth.dependencies import get_studio_client
from studio import StudioClient
from studio.approval import ApprovalOutcome
from studio.db.models import AuditLogRead, CommentRead, PostRead

router = APIRouter(prefix="/v1/posts/{post_id}", tags=["approvals"])


# =============================================================================
# Request/Response Models
# =============================================================================


class ReviewActionRequest(BaseModel):
    """Optional body for approve and reopen."""

    expected_version: Optional[int] = Field(default=None, ge=0)


class RequestChangesRequest(ReviewActionRequest):
    """Body for request-changes."""

    reason: Optional[str] = Field(default=None, max_length=5000)


class ApprovalResponse(BaseModel):
    """Committed review transition.

    `comment_error` is set when the verdict was saved but the reason
    comment could not be written.
    """

    post: PostRead
    verdict: Optional[str] = None
    changed: bool
    audit_entry: AuditLogRead
    comment: Optional[CommentRead] = None
    comment_error: Optional[str] = None


def _to_response(outcome: ApprovalOutcome) -> ApprovalResponse:
    return ApprovalResponse(
        post=PostRead.model_validate(outcome.post),
        verdict=outcome.verdict.value if outcome.verdict else None,
        changed=outcome.changed,
        audit_entry=AuditLogRead.model_validate(outcome.audit_entry),
        comment=CommentRead.model_validate(outcome.comment) if outcome.comment else None,
        comment_error=outcome.comment_error.message if outcome.comment_error else None,
    )


# =============================================================================
# Routes
# =============================================================================


@router.post("/approve", response_model=ApprovalResponse)
def approve_post(
    post_id: UUID,
    client: Annotated[StudioClient, Depends(get_studio_client)],
    data: Annotated[Optional[ReviewActionRequest], Body()] = None,
) -> ApprovalResponse:
    """Approve a post that is awaiting client review."""
    expected_version = data.expected_version if data else None
    return _to_response(client.approve(post_id, expected_version=expected_version))


@router.post("/request-changes", response_model=ApprovalResponse)
def request_changes(
    post_id: UUID,
    client: Annotated[StudioClient, Depends(get_studio_client)],
    data: Annotated[Optional[RequestChangesRequest], Body()] = None,
) -> ApprovalResponse:
    """Request changes, optionally explaining what should change."""
    data = data or RequestChangesRequest()
    outcome = client.request_changes(
        post_id, reason=data.reason, expected_version=data.expected_version
    )
    return _to_response(outcome)


@router.post("/reopen", response_model=ApprovalResponse)
def reopen_review(
    post_id: UUID,
    client: Annotated[StudioClient, Depends(get_studio_client)],
    data: Annotated[Optional[ReviewActionRequest], Body()] = None,
) -> ApprovalResponse:
    """Clear a verdict so the client can review the post again."""
    expected_version = data.expected_version if data else None
    return _to_response(client.reopen_for_review(post_id, expected_version=expected_version))
