"""Scoped content routes.

Provides endpoints for:
- GET /v1/social-accounts - social accounts, oldest first
- GET /v1/posts - posts by scheduled date, then order index
- GET /v1/posts/{post_id}/review - the review panel for one post

Lists accept workspace_id, platform and social_account_id filters. Filters
only narrow what the caller may already see. A failed read returns an empty
list with a banner instead of an error.
"""

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.auth.dependencies import get_studio_client
from api.routes.v1.dependencies import get_selector, load_visible_post
from studio import StudioClient
from studio.access import Selector
from studio.db.models import PostRead, SocialAccountRead

router = APIRouter(prefix="/v1", tags=["content"])


# =============================================================================
# Response Models
# =============================================================================


class SocialAccountListResponse(BaseModel):
    items: list[SocialAccountRead]
    banner: Optional[str] = None


class PostListResponse(BaseModel):
    items: list[PostRead]
    banner: Optional[str] = None


class ReviewPanelResponse(BaseModel):
    """What the caller sees of a post's review."""

    kind: str  # verdict | controls | hidden
    state: str
    title: Optional[str] = None
    message: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    can_reopen: bool = False
    post: PostRead


# =============================================================================
# Routes
# =============================================================================


@router.get("/social-accounts", response_model=SocialAccountListResponse)
def list_social_accounts(
    client: Annotated[StudioClient, Depends(get_studio_client)],
    selector: Annotated[Selector, Depends(get_selector)],
) -> SocialAccountListResponse:
    accounts = client.visible_social_accounts(selector)
    return SocialAccountListResponse(
        items=[SocialAccountRead.model_validate(a) for a in accounts],
        banner=client.banner,
    )


@router.get("/posts", response_model=PostListResponse)
def list_posts(
    client: Annotated[StudioClient, Depends(get_studio_client)],
    selector: Annotated[Selector, Depends(get_selector)],
) -> PostListResponse:
    posts = client.visible_posts(selector)
    return PostListResponse(
        items=[PostRead.model_validate(p) for p in posts],
        banner=client.banner,
    )


@router.get("/posts/{post_id}/review", response_model=ReviewPanelResponse)
def get_review_panel(
    post_id: UUID,
    client: Annotated[StudioClient, Depends(get_studio_client)],
) -> ReviewPanelResponse:
    post = load_visible_post(client, post_id)
    panel = client.review_panel(post)
    return ReviewPanelResponse(
        kind=panel.kind.value,
        state=panel.state.value,
        title=panel.title,
        message=panel.message,
        approved_by=panel.approved_by,
        approved_at=panel.approved_at,
        can_reopen=panel.can_reopen,
        post=PostRead.model_validate(post),
    )
