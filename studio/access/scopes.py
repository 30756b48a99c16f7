"""Workspace scopes and role-to-scope mappings.

Scopes follow the pattern resource:action and are always evaluated for one
specific workspace. Global admins hold every scope in every workspace.
"""

from enum import Enum
from typing import FrozenSet, Optional, Union

from studio.db.models import WorkspaceRole


class Scope(str, Enum):
    """Permission scopes for workspace-level checks."""

    # Content permissions
    CONTENT_READ = "content:read"
    CONTENT_WRITE = "content:write"
    CONTENT_APPROVE = "content:approve"

    # Review cycle permissions
    REVIEW_REOPEN = "review:reopen"

    # Comment permissions
    COMMENT_WRITE = "comment:write"
    COMMENT_INTERNAL = "comment:internal"


ADMIN_SCOPES: FrozenSet[Scope] = frozenset(Scope)

_ACCOUNT_MANAGER_SCOPES: FrozenSet[Scope] = frozenset(
    [
        Scope.CONTENT_READ,
        Scope.CONTENT_WRITE,
        Scope.REVIEW_REOPEN,
        Scope.COMMENT_WRITE,
        Scope.COMMENT_INTERNAL,
        # Note: account managers prepare posts, clients decide on them
    ]
)

_CLIENT_APPROVER_SCOPES: FrozenSet[Scope] = frozenset(
    [
        Scope.CONTENT_READ,
        Scope.CONTENT_APPROVE,
        Scope.COMMENT_WRITE,
    ]
)

_CLIENT_VIEWER_SCOPES: FrozenSet[Scope] = frozenset(
    [
        Scope.CONTENT_READ,
        Scope.COMMENT_WRITE,
    ]
)


ROLE_SCOPES: dict[WorkspaceRole, FrozenSet[Scope]] = {
    WorkspaceRole.account_manager: _ACCOUNT_MANAGER_SCOPES,
    WorkspaceRole.client_approver: _CLIENT_APPROVER_SCOPES,
    WorkspaceRole.client_viewer: _CLIENT_VIEWER_SCOPES,
}


def parse_role(value: Union[WorkspaceRole, str, None]) -> Optional[WorkspaceRole]:
    """Map a stored role value to WorkspaceRole; unknown values map to None."""
    if isinstance(value, WorkspaceRole):
        return value
    try:
        return WorkspaceRole(value)
    except ValueError:
        return None


def has_scope(role: Union[WorkspaceRole, str, None], scope: Scope) -> bool:
    """Check if a role has a specific scope."""
    return scope in get_scopes_for_role(role)


def get_scopes_for_role(role: Union[WorkspaceRole, str, None]) -> FrozenSet[Scope]:
    """Get all scopes granted to a role. Unknown roles grant nothing."""
    parsed = parse_role(role)
    if parsed is None:
        return frozenset()
    return ROLE_SCOPES.get(parsed, frozenset())
