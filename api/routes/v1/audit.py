"""Audit log route.

Provides:
- GET /v1/posts/{post_id}/audit - review history of a post, oldest first
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from api.auth.dependencies import get_studio_client
from api.routes.v1.dependencies import load_visible_post
from studio import StudioClient
from studio.db.models import AuditLogRead

router = APIRouter(prefix="/v1", tags=["audit"])


@router.get("/posts/{post_id}/audit", response_model=list[AuditLogRead])
def get_post_audit(
    post_id: UUID,
    client: Annotated[StudioClient, Depends(get_studio_client)],
) -> list[AuditLogRead]:
    post = load_visible_post(client, post_id)
    return [AuditLogRead.model_validate(entry) for entry in client.post_history(post)]
