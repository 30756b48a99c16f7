"""Audit trail for review transitions and other privileged actions.

Entries are append-only: once written they are never updated or removed,
and they are always read back in append order. An entry about an entity
must carry the entity's own workspace.
"""

from typing import Any, Optional
from uuid import UUID

from studio.access.roles import workspace_key
from studio.db.models import AuditAction, AuditLog, AuditLogCreate
from studio.errors import InvalidStateError
from studio.logging import get_logger
from studio.store.base import ReviewStore

logger = get_logger(__name__)


class AuditTrail:
    """Builds, appends and reads audit entries through the store."""

    def __init__(self, store: ReviewStore):
        self.store = store

    @staticmethod
    def build_entry(
        workspace_id: UUID,
        entity_type: str,
        entity_id: UUID,
        action: AuditAction,
        details: Optional[dict[str, Any]] = None,
        acting_account_id: Optional[UUID] = None,
        entity_workspace_id: Optional[UUID] = None,
    ) -> AuditLogCreate:
        """Build an entry without writing it.

        Args:
            workspace_id: Workspace the entry is recorded in
            entity_type: Kind of entity (e.g. "post")
            entity_id: Id of the entity
            action: What happened
            details: Action-specific payload
            acting_account_id: Who did it
            entity_workspace_id: The entity's own workspace, when known

        Raises:
            InvalidStateError: If the entry's workspace differs from the
                entity's workspace
        """
        if entity_workspace_id is not None and workspace_key(entity_workspace_id) != workspace_key(
            workspace_id
        ):
            raise InvalidStateError(
                "Audit workspace does not match the entity",
                details={
                    "workspace_id": str(workspace_id),
                    "entity_workspace_id": str(entity_workspace_id),
                },
            )
        return AuditLogCreate(
            workspace_id=workspace_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=AuditAction(action),
            details=dict(details or {}),
            account_id=acting_account_id,
        )

    def append(
        self,
        workspace_id: UUID,
        entity_type: str,
        entity_id: UUID,
        action: AuditAction,
        details: Optional[dict[str, Any]] = None,
        acting_account_id: Optional[UUID] = None,
    ) -> AuditLog:
        """Append one entry. Raises WriteError if the store rejects it."""
        entry = self.build_entry(
            workspace_id, entity_type, entity_id, action, details, acting_account_id
        )
        audit = self.store.append_audit_log(entry)
        self.log_appended(audit)
        return audit

    @staticmethod
    def log_appended(audit: AuditLog) -> None:
        logger.info(
            "audit_entry_appended",
            audit_id=audit.id,
            workspace_id=str(audit.workspace_id),
            entity_type=audit.entity_type,
            entity_id=str(audit.entity_id),
            action=AuditAction(audit.action).value,
            account_id=str(audit.account_id) if audit.account_id else None,
        )

    def history(self, workspace_id: UUID, entity_type: str, entity_id: UUID) -> list[AuditLog]:
        """All entries about one entity, oldest first."""
        return self.store.list_audit_log(
            workspace_id, entity_type=entity_type, entity_id=entity_id
        )

    def workspace_log(self, workspace_id: UUID, limit: Optional[int] = None) -> list[AuditLog]:
        """All entries in a workspace, oldest first."""
        return self.store.list_audit_log(workspace_id, limit=limit)
