"""Workspace membership model.

Links an account to a workspace with exactly one workspace-scoped role.
An account may hold memberships in several workspaces, at most one each.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from studio.db.models.base import UUIDModel, TimestampMixin


class WorkspaceRole(str, Enum):
    """Role enum for workspace memberships.

    - account_manager: agency staff running the workspace's calendar
    - client_viewer: client who can see posts but not decide on them
    - client_approver: client who approves posts or requests changes
    """

    account_manager = "account_manager"
    client_viewer = "client_viewer"
    client_approver = "client_approver"


CLIENT_ROLES = frozenset({WorkspaceRole.client_viewer, WorkspaceRole.client_approver})


class WorkspaceMembershipBase(SQLModel):
    """Base membership fields shared across Create/Read."""

    role: WorkspaceRole = Field(default=WorkspaceRole.client_viewer)


class WorkspaceMembership(
    UUIDModel, WorkspaceMembershipBase, TimestampMixin, table=True
):
    """Membership table: one row per (account, workspace)."""

    __tablename__ = "workspace_members"
    __table_args__ = (
        UniqueConstraint(
            "account_id", "workspace_id", name="uq_workspace_members_account_workspace"
        ),
    )

    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    account_id: UUID = Field(foreign_key="profiles.id", index=True)


class WorkspaceMembershipRead(WorkspaceMembershipBase):
    """Schema for reading membership data."""

    workspace_id: UUID
    account_id: UUID
    created_at: datetime
