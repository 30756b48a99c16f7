"""Role resolution: effective capabilities from global role + memberships.

Two kinds of answers live here and must not be conflated:

- Coarse booleans (is_account_manager, is_client, navigation_flags) answer
  "can this UI section exist at all". They are for navigation gating only.
- Workspace-parameterized checks (can_approve, has_access_to_workspace,
  has_scope, can_manage) answer "can this action on this workspace succeed".
  These are the only checks authorization decisions may use.

Everything here is a pure function of the loaded snapshot.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, FrozenSet, Iterable, Optional, TypedDict, Union
from uuid import UUID

from studio.access.scopes import ADMIN_SCOPES, Scope, get_scopes_for_role, parse_role
from studio.db.models import CLIENT_ROLES, GlobalRole, WorkspaceRole

WorkspaceId = Union[UUID, str]


def workspace_key(workspace_id: Any) -> str:
    """Normalize a workspace id so UUIDs and their strings compare equal."""
    return str(workspace_id)


@dataclass(frozen=True)
class MembershipGrant:
    """A workspace-scoped role binding, detached from any database session."""

    workspace_id: WorkspaceId
    role: str
    created_at: Optional[datetime] = None

    @property
    def workspace_role(self) -> Optional[WorkspaceRole]:
        return parse_role(self.role)

    @classmethod
    def from_row(cls, row: Any) -> "MembershipGrant":
        """Build from a membership row, a mapping, or another grant."""
        if isinstance(row, MembershipGrant):
            return row
        if isinstance(row, dict):
            workspace_id = row["workspace_id"]
            role = row["role"]
            created_at = row.get("created_at")
        else:
            workspace_id = row.workspace_id
            role = row.role
            created_at = getattr(row, "created_at", None)
        role_value = role.value if hasattr(role, "value") else str(role)
        return cls(workspace_id=workspace_id, role=role_value, created_at=created_at)


def _parse_global_role(value: Union[GlobalRole, str, None]) -> GlobalRole:
    if isinstance(value, GlobalRole):
        return value
    try:
        return GlobalRole(value)
    except ValueError:
        return GlobalRole.user


@dataclass(frozen=True)
class Capabilities:
    """Effective capabilities of one account.

    Build with Capabilities.resolve(); recompute whenever the membership
    directory loads a new snapshot.
    """

    global_role: GlobalRole = GlobalRole.user
    memberships: tuple[MembershipGrant, ...] = ()
    account_id: Optional[UUID] = None
    _by_workspace: dict = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        index: dict[str, MembershipGrant] = {}
        for grant in self.memberships:
            if grant.workspace_role is None:
                # Unknown roles grant nothing, not even visibility
                continue
            # At most one role per workspace; the first row wins if a store
            # ever returns duplicates.
            index.setdefault(workspace_key(grant.workspace_id), grant)
        object.__setattr__(self, "_by_workspace", index)

    @classmethod
    def resolve(
        cls,
        global_role: Union[GlobalRole, str, None],
        memberships: Iterable[Any] = (),
        account_id: Optional[UUID] = None,
    ) -> "Capabilities":
        """Compute capabilities from a global role and membership rows."""
        return cls(
            global_role=_parse_global_role(global_role),
            memberships=tuple(MembershipGrant.from_row(m) for m in memberships),
            account_id=account_id,
        )

    # ==========================================================================
    # Coarse booleans (navigation gating only)
    # ==========================================================================

    def is_admin(self) -> bool:
        return self.global_role == GlobalRole.admin

    def is_account_manager(self) -> bool:
        return self.is_admin() or any(
            g.workspace_role == WorkspaceRole.account_manager for g in self.memberships
        )

    def is_client(self) -> bool:
        return any(g.workspace_role in CLIENT_ROLES for g in self.memberships)

    def primary_client_workspace(self) -> Optional[WorkspaceId]:
        """First client workspace, for UI defaults only.

        A client may belong to several workspaces; never authorize with this.
        """
        if self.is_admin():
            return None
        for grant in self.memberships:
            if grant.workspace_role in CLIENT_ROLES:
                return grant.workspace_id
        return None

    # ==========================================================================
    # Workspace-parameterized checks (authorization)
    # ==========================================================================

    def role_in(self, workspace_id: WorkspaceId) -> Optional[WorkspaceRole]:
        grant = self._by_workspace.get(workspace_key(workspace_id))
        return grant.workspace_role if grant else None

    def scopes_in(self, workspace_id: WorkspaceId) -> FrozenSet[Scope]:
        if self.is_admin():
            return ADMIN_SCOPES
        grant = self._by_workspace.get(workspace_key(workspace_id))
        if grant is None:
            return frozenset()
        return get_scopes_for_role(grant.role)

    def has_scope(self, workspace_id: WorkspaceId, scope: Scope) -> bool:
        return scope in self.scopes_in(workspace_id)

    def can_approve(self, workspace_id: WorkspaceId) -> bool:
        return self.has_scope(workspace_id, Scope.CONTENT_APPROVE)

    def can_manage(self, workspace_id: WorkspaceId) -> bool:
        """Admin, or account manager of this workspace."""
        return self.has_scope(workspace_id, Scope.REVIEW_REOPEN)

    def has_access_to_workspace(self, workspace_id: WorkspaceId) -> bool:
        return self.is_admin() or workspace_key(workspace_id) in self._by_workspace

    @property
    def workspace_ids(self) -> FrozenSet[str]:
        """Normalized ids of every workspace the account is a member of."""
        return frozenset(self._by_workspace)

    def managed_workspace_ids(self) -> FrozenSet[str]:
        """Workspaces where the account is an account manager."""
        return frozenset(
            key
            for key, grant in self._by_workspace.items()
            if grant.workspace_role == WorkspaceRole.account_manager
        )


class NavigationFlags(TypedDict):
    """Which sections of the UI exist for an account.

    Coarse gating only; every action inside a section is still checked
    against the specific workspace.
    """

    show_workspaces: bool  # Workspace directory (all clients)
    show_team: bool  # Team page, manager assignments
    show_calendar: bool  # Calendar and grid views
    show_feed_preview: bool  # Per-platform feed preview
    show_approvals: bool  # Approval inbox
    show_brand_guidelines: bool  # Brand guideline editor
    show_internal_comments: bool  # Agency-only comment threads


def navigation_flags(capabilities: Capabilities) -> NavigationFlags:
    """Compute UI section flags from coarse capabilities."""
    is_admin = capabilities.is_admin()
    has_any_workspace = is_admin or bool(capabilities.workspace_ids)
    return {
        "show_workspaces": is_admin,
        "show_team": is_admin,
        "show_calendar": has_any_workspace,
        "show_feed_preview": has_any_workspace,
        "show_approvals": is_admin or capabilities.is_client(),
        "show_brand_guidelines": capabilities.is_account_manager(),
        "show_internal_comments": capabilities.is_account_manager(),
    }
