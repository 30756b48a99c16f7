"""Current account route.

Provides:
- GET /v1/me - account, global role, memberships and navigation flags
"""

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.auth.dependencies import get_studio_client
from studio import StudioClient

router = APIRouter(prefix="/v1", tags=["me"])


class MembershipResponse(BaseModel):
    workspace_id: UUID
    role: str
    created_at: Optional[datetime] = None


class AccountResponse(BaseModel):
    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None


class MeResponse(BaseModel):
    """Who the caller is and which UI sections exist for them.

    `navigation` is coarse UI gating; actions are authorized per workspace.
    """

    account: AccountResponse
    global_role: str
    memberships: list[MembershipResponse]
    primary_client_workspace_id: Optional[UUID] = None
    navigation: dict[str, bool]
    degraded: bool = False
    banner: Optional[str] = None


@router.get("/me", response_model=MeResponse)
def get_me(client: Annotated[StudioClient, Depends(get_studio_client)]) -> MeResponse:
    snapshot = client.directory.snapshot()
    caps = snapshot.capabilities()
    return MeResponse(
        account=AccountResponse(
            id=snapshot.account.id,
            email=snapshot.account.email,
            full_name=snapshot.account.full_name,
        ),
        global_role=snapshot.global_role.value,
        memberships=[
            MembershipResponse(
                workspace_id=grant.workspace_id,
                role=grant.role,
                created_at=grant.created_at,
            )
            for grant in snapshot.memberships
        ],
        primary_client_workspace_id=caps.primary_client_workspace(),
        navigation=dict(client.navigation()),
        degraded=snapshot.degraded,
        banner=client.banner,
    )
