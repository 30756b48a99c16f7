"""Shared dependencies for v1 routes.

Provides:
- get_selector: build a Selector from query parameters
- load_visible_post: load a post the caller can see, or 404
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import Query

from studio import StudioClient
from studio.access import Selector
from studio.db.models import Post
from studio.errors import NotFoundError


def get_selector(
    workspace_id: Annotated[Optional[UUID], Query(description="Workspace UUID")] = None,
    platform: Annotated[Optional[str], Query(max_length=50)] = None,
    social_account_id: Annotated[Optional[UUID], Query(description="Social account UUID")] = None,
) -> Selector:
    return Selector(
        workspace_id=workspace_id,
        platform=platform,
        social_account_id=social_account_id,
    )


def load_visible_post(client: StudioClient, post_id: UUID) -> Post:
    """Load a post, treating posts outside the caller's workspaces as missing."""
    post = client.store.load_post(post_id)
    if not client.capabilities().has_access_to_workspace(post.workspace_id):
        raise NotFoundError("Post not found", details={"post_id": str(post_id)})
    return post
