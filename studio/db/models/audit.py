"""Audit log model for review transitions and other privileged actions.

Rows are immutable and append-only. The integer primary key grows with
every insert, so ordering by id is ordering by append time.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, event
from sqlmodel import Field, SQLModel, Column

from studio.errors import ImmutabilityViolationError


class AuditAction(str, Enum):
    """Types of auditable actions."""

    # Review verdicts
    approved = "approved"
    changes_requested = "changes_requested"

    # Review cycle
    review_reopened = "review_reopened"

    # Other privileged actions
    comment_added = "comment_added"


class AuditLogBase(SQLModel):
    """Base audit log fields shared across Create/Read."""

    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    entity_type: str = Field(max_length=100, index=True)
    entity_id: UUID = Field(index=True)
    action: AuditAction = Field(index=True)
    account_id: Optional[UUID] = Field(default=None, foreign_key="profiles.id", index=True)


class AuditLog(AuditLogBase, table=True):
    """Audit log table.

    Every entry records:
    - In what context (workspace_id)
    - On what entity (entity_type, entity_id)
    - What happened (action, details)
    - Who did it (account_id)
    """

    __tablename__ = "audit_logs"

    id: Optional[int] = Field(default=None, primary_key=True)

    details: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )

    # Timestamp only (no updated_at since audit logs are immutable)
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        nullable=False,
        index=True,
    )


class AuditLogCreate(AuditLogBase):
    """Schema for a new audit entry, before it is appended."""

    details: dict[str, Any] = Field(default_factory=dict)


class AuditLogRead(AuditLogBase):
    """Schema for reading audit log data."""

    id: int
    details: dict[str, Any]
    created_at: datetime


@event.listens_for(AuditLog, "before_update")
def prevent_audit_update(mapper, connection, target):
    """Prevent updates to audit entries."""
    raise ImmutabilityViolationError(
        details={"entity_type": "audit_log", "entity_id": str(target.id), "operation": "update"},
    )


@event.listens_for(AuditLog, "before_delete")
def prevent_audit_delete(mapper, connection, target):
    """Prevent deletion of audit entries."""
    raise ImmutabilityViolationError(
        details={"entity_type": "audit_log", "entity_id": str(target.id), "operation": "delete"},
    )
