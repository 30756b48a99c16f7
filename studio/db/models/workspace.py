"""Workspace model: one agency client.

Workspaces are the boundary of data isolation. Posts, social accounts,
comments and audit entries all belong to exactly one workspace.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from studio.db.models.base import UUIDModel, TimestampMixin


class WorkspaceBase(SQLModel):
    """Base workspace fields shared across Create/Read."""

    name: str = Field(index=True)
    description: Optional[str] = None


class Workspace(UUIDModel, WorkspaceBase, TimestampMixin, table=True):
    """Workspace table."""

    __tablename__ = "workspaces"


class WorkspaceRead(WorkspaceBase):
    """Schema for reading workspace data."""

    id: UUID
    created_at: datetime
