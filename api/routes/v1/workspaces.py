"""Workspace listing route.

Provides:
- GET /v1/workspaces - workspaces visible to the caller, newest first
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.auth.dependencies import get_studio_client
from api.routes.v1.dependencies import get_selector
from studio import StudioClient
from studio.access import Selector
from studio.db.models import WorkspaceRead

router = APIRouter(prefix="/v1", tags=["workspaces"])


class WorkspaceListResponse(BaseModel):
    items: list[WorkspaceRead]
    banner: Optional[str] = None


@router.get("/workspaces", response_model=WorkspaceListResponse)
def list_workspaces(
    client: Annotated[StudioClient, Depends(get_studio_client)],
    selector: Annotated[Selector, Depends(get_selector)],
) -> WorkspaceListResponse:
    workspaces = client.visible_workspaces(selector)
    return WorkspaceListResponse(
        items=[WorkspaceRead.model_validate(w) for w in workspaces],
        banner=client.banner,
    )
