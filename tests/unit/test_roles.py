"""Unit tests for role resolution and scopes.

Tests:
- Admin capabilities regardless of memberships
- Workspace-parameterized checks
- Coarse booleans and navigation flags
- Unknown roles grant nothing
"""

from uuid import uuid4

import pytest

from studio.access import Capabilities, MembershipGrant, Scope, navigation_flags
from studio.access.scopes import get_scopes_for_role, has_scope, parse_role
from studio.db.models import GlobalRole, WorkspaceRole


def grant(workspace_id, role):
    return {"workspace_id": workspace_id, "role": role}


class TestScopes:
    """Tests for the role-to-scope table."""

    def test_only_client_approver_can_approve(self):
        assert has_scope(WorkspaceRole.client_approver, Scope.CONTENT_APPROVE) is True
        assert has_scope(WorkspaceRole.client_viewer, Scope.CONTENT_APPROVE) is False
        assert has_scope(WorkspaceRole.account_manager, Scope.CONTENT_APPROVE) is False

    def test_account_manager_can_reopen(self):
        assert has_scope("account_manager", Scope.REVIEW_REOPEN) is True
        assert has_scope("client_approver", Scope.REVIEW_REOPEN) is False

    def test_unknown_role_has_no_scopes(self):
        assert parse_role("owner") is None
        assert get_scopes_for_role("owner") == frozenset()
        assert get_scopes_for_role(None) == frozenset()


class TestAdmin:
    """Global admins hold every capability in every workspace."""

    def test_admin_can_approve_everywhere(self):
        caps = Capabilities.resolve(GlobalRole.admin, [])
        for workspace_id in (uuid4(), "w1", "anything"):
            assert caps.can_approve(workspace_id) is True
            assert caps.can_manage(workspace_id) is True
            assert caps.has_access_to_workspace(workspace_id) is True

    def test_admin_with_viewer_membership_still_admin(self):
        w1 = uuid4()
        caps = Capabilities.resolve("admin", [grant(w1, "client_viewer")])
        assert caps.can_approve(w1) is True
        assert caps.is_account_manager() is True

    def test_admin_has_no_primary_client_workspace(self):
        caps = Capabilities.resolve("admin", [grant(uuid4(), "client_approver")])
        assert caps.primary_client_workspace() is None


class TestWorkspaceChecks:
    """Workspace-parameterized checks used for authorization."""

    def test_no_memberships_no_access(self):
        caps = Capabilities.resolve(GlobalRole.user, [])
        assert caps.has_access_to_workspace("w1") is False
        assert caps.can_approve("w1") is False
        assert caps.workspace_ids == frozenset()

    def test_approver_in_one_workspace_only(self):
        w1, w2 = uuid4(), uuid4()
        caps = Capabilities.resolve("user", [grant(w1, "client_approver")])
        assert caps.can_approve(w1) is True
        assert caps.can_approve(w2) is False
        assert caps.has_access_to_workspace(w2) is False

    def test_uuid_and_string_ids_compare_equal(self):
        w1 = uuid4()
        caps = Capabilities.resolve("user", [grant(str(w1), "client_approver")])
        assert caps.can_approve(w1) is True
        assert caps.role_in(w1) == WorkspaceRole.client_approver

    def test_viewer_cannot_approve_own_workspace(self):
        caps = Capabilities.resolve("user", [grant("w1", "client_viewer")])
        assert caps.has_access_to_workspace("w1") is True
        assert caps.can_approve("w1") is False
        assert caps.has_scope("w1", Scope.CONTENT_READ) is True

    def test_account_manager_manages_but_does_not_approve(self):
        caps = Capabilities.resolve("user", [grant("w1", "account_manager")])
        assert caps.can_manage("w1") is True
        assert caps.can_approve("w1") is False
        assert caps.can_manage("w2") is False

    def test_unknown_role_grants_nothing(self):
        caps = Capabilities.resolve("user", [grant("w1", "owner")])
        assert caps.has_access_to_workspace("w1") is False
        assert caps.workspace_ids == frozenset()
        assert caps.scopes_in("w1") == frozenset()
        assert caps.can_approve("w1") is False

    def test_first_grant_wins_for_duplicates(self):
        caps = Capabilities.resolve(
            "user",
            [grant("w1", "client_viewer"), grant("w1", "client_approver")],
        )
        assert caps.role_in("w1") == WorkspaceRole.client_viewer
        assert caps.can_approve("w1") is False

    def test_unknown_global_role_is_user(self):
        caps = Capabilities.resolve("superuser", [])
        assert caps.global_role == GlobalRole.user
        assert caps.is_admin() is False

    def test_managed_workspace_ids(self):
        caps = Capabilities.resolve(
            "user",
            [
                grant("w1", "account_manager"),
                grant("w2", "client_viewer"),
                grant("w3", "account_manager"),
            ],
        )
        assert caps.managed_workspace_ids() == frozenset({"w1", "w3"})
        assert caps.workspace_ids == frozenset({"w1", "w2", "w3"})


class TestCoarseBooleans:
    """Coarse booleans gate navigation only."""

    def test_primary_client_workspace_is_first_client_membership(self):
        caps = Capabilities.resolve(
            "user",
            [
                grant("w0", "account_manager"),
                grant("w1", "client_viewer"),
                grant("w2", "client_approver"),
            ],
        )
        assert caps.is_client() is True
        assert caps.is_account_manager() is True
        assert caps.primary_client_workspace() == "w1"

    def test_membership_grant_from_row_object(self):
        class Row:
            workspace_id = "w1"
            role = WorkspaceRole.client_approver

        g = MembershipGrant.from_row(Row())
        assert g.role == "client_approver"
        assert g.workspace_role == WorkspaceRole.client_approver
        assert g.created_at is None

    @pytest.mark.parametrize(
        "global_role,memberships,expected",
        [
            (
                "admin",
                [],
                {
                    "show_workspaces": True,
                    "show_team": True,
                    "show_calendar": True,
                    "show_feed_preview": True,
                    "show_approvals": True,
                    "show_brand_guidelines": True,
                    "show_internal_comments": True,
                },
            ),
            (
                "user",
                [grant("w1", "client_approver")],
                {
                    "show_workspaces": False,
                    "show_team": False,
                    "show_calendar": True,
                    "show_feed_preview": True,
                    "show_approvals": True,
                    "show_brand_guidelines": False,
                    "show_internal_comments": False,
                },
            ),
            (
                "user",
                [grant("w1", "account_manager")],
                {
                    "show_workspaces": False,
                    "show_team": False,
                    "show_calendar": True,
                    "show_feed_preview": True,
                    "show_approvals": False,
                    "show_brand_guidelines": True,
                    "show_internal_comments": True,
                },
            ),
            (
                "user",
                [],
                {
                    "show_workspaces": False,
                    "show_team": False,
                    "show_calendar": False,
                    "show_feed_preview": False,
                    "show_approvals": False,
                    "show_brand_guidelines": False,
                    "show_internal_comments": False,
                },
            ),
        ],
    )
    def test_navigation_flags(self, global_role, memberships, expected):
        caps = Capabilities.resolve(global_role, memberships)
        assert navigation_flags(caps) == expected
