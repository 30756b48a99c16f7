"""Access control: scopes, role resolution, scoping and the membership directory."""

from studio.access.scopes import Scope, ADMIN_SCOPES, ROLE_SCOPES, has_scope, get_scopes_for_role
from studio.access.roles import (
    Capabilities,
    MembershipGrant,
    NavigationFlags,
    navigation_flags,
    workspace_key,
)
from studio.access.scoping import (
    Selector,
    scope,
    scope_posts,
    scope_social_accounts,
    scope_workspaces,
)
from studio.access.directory import AccessContext, DirectorySnapshot, MembershipDirectory

__all__ = [
    "Scope",
    "ADMIN_SCOPES",
    "ROLE_SCOPES",
    "has_scope",
    "get_scopes_for_role",
    "Capabilities",
    "MembershipGrant",
    "NavigationFlags",
    "navigation_flags",
    "workspace_key",
    "Selector",
    "scope",
    "scope_posts",
    "scope_social_accounts",
    "scope_workspaces",
    "AccessContext",
    "DirectorySnapshot",
    "MembershipDirectory",
]
