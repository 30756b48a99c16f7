"""Unit tests for the membership directory.

Tests:
- Loading profile and memberships into a snapshot
- Missing profile means plain user
- Degraded loads keep cached data for the same account only
- Generation ordering: stale reloads never overwrite newer state
- Stale contexts are rejected
"""

from datetime import datetime
from uuid import uuid4
from unittest.mock import MagicMock

import pytest

from studio.access import MembershipDirectory
from studio.db.models import GlobalRole, Profile, WorkspaceMembership, WorkspaceRole
from studio.errors import (
    DirectoryNotLoadedError,
    LoadError,
    NotFoundError,
    StaleContextError,
)
from studio.identity import Account


def make_account(email="someone@example.test"):
    return Account(id=uuid4(), email=email)


def make_store(role=GlobalRole.user, memberships=()):
    store = MagicMock()
    store.load_profile.return_value = Profile(email="someone@example.test", role=role)
    store.load_memberships.return_value = list(memberships)
    return store


def membership(workspace_id, role):
    return WorkspaceMembership(
        workspace_id=workspace_id,
        account_id=uuid4(),
        role=role,
        created_at=datetime(2026, 1, 1),
    )


class TestReload:

    def test_reload_builds_snapshot(self):
        w1 = uuid4()
        store = make_store(memberships=[membership(w1, WorkspaceRole.client_approver)])
        directory = MembershipDirectory(store)
        account = make_account()

        snapshot = directory.reload(account)

        assert snapshot.account == account
        assert snapshot.global_role == GlobalRole.user
        assert snapshot.degraded is False
        assert [g.workspace_id for g in snapshot.memberships] == [w1]
        assert directory.capabilities().can_approve(w1) is True
        store.load_profile.assert_called_once_with(account.id)
        store.load_memberships.assert_called_once_with(account.id)

    def test_missing_profile_is_plain_user(self):
        store = make_store()
        store.load_profile.side_effect = NotFoundError("Profile not found")
        directory = MembershipDirectory(store)

        snapshot = directory.reload(make_account())

        assert snapshot.global_role == GlobalRole.user
        assert snapshot.degraded is False

    def test_admin_profile(self):
        directory = MembershipDirectory(make_store(role=GlobalRole.admin))
        directory.reload(make_account())
        assert directory.capabilities().is_admin() is True

    def test_reload_none_clears(self):
        directory = MembershipDirectory(make_store())
        directory.reload(make_account())
        assert directory.reload(None) is None
        with pytest.raises(DirectoryNotLoadedError):
            directory.capabilities()


class TestDegradedLoads:

    def test_load_error_without_cache_degrades_to_empty(self):
        store = make_store(role=GlobalRole.admin)
        store.load_profile.side_effect = LoadError()
        store.load_memberships.side_effect = LoadError()
        directory = MembershipDirectory(store)

        snapshot = directory.reload(make_account())

        assert snapshot.degraded is True
        assert snapshot.global_role == GlobalRole.user
        assert snapshot.memberships == ()
        assert len(snapshot.load_errors) == 2

    def test_load_error_keeps_cache_for_same_account(self):
        w1 = uuid4()
        store = make_store(
            role=GlobalRole.admin,
            memberships=[membership(w1, WorkspaceRole.account_manager)],
        )
        directory = MembershipDirectory(store)
        account = make_account()
        directory.reload(account)

        store.load_profile.side_effect = LoadError()
        store.load_memberships.side_effect = LoadError()
        snapshot = directory.reload(account)

        assert snapshot.degraded is True
        assert snapshot.global_role == GlobalRole.admin
        assert [g.workspace_id for g in snapshot.memberships] == [w1]

    def test_load_error_never_reuses_another_accounts_cache(self):
        w1 = uuid4()
        store = make_store(
            role=GlobalRole.admin,
            memberships=[membership(w1, WorkspaceRole.account_manager)],
        )
        directory = MembershipDirectory(store)
        directory.reload(make_account("first@example.test"))

        store.load_profile.side_effect = LoadError()
        store.load_memberships.side_effect = LoadError()
        snapshot = directory.reload(make_account("second@example.test"))

        assert snapshot.global_role == GlobalRole.user
        assert snapshot.memberships == ()


class TestGenerations:

    def test_reload_superseded_by_invalidate_is_discarded(self):
        store = make_store(role=GlobalRole.admin)
        directory = MembershipDirectory(store)

        def invalidate_midway(account_id):
            # A sign-out lands while this reload is still loading
            directory.invalidate()
            return []

        store.load_memberships.side_effect = invalidate_midway

        assert directory.reload(make_account()) is None
        with pytest.raises(DirectoryNotLoadedError):
            directory.snapshot()

    def test_reload_superseded_by_newer_reload_keeps_newer(self):
        store = make_store()
        directory = MembershipDirectory(store)
        old_account = make_account("old@example.test")
        new_account = make_account("new@example.test")
        w_new = uuid4()
        calls = []

        def memberships_for(account_id):
            calls.append(account_id)
            if account_id == old_account.id:
                # The newer identity finishes loading first
                directory.reload(new_account)
                return [membership(uuid4(), WorkspaceRole.account_manager)]
            return [membership(w_new, WorkspaceRole.client_viewer)]

        store.load_memberships.side_effect = memberships_for

        result = directory.reload(old_account)

        assert calls == [old_account.id, new_account.id]
        assert result.account == new_account
        assert directory.snapshot().account == new_account
        assert directory.capabilities().workspace_ids == frozenset({str(w_new)})

    def test_generation_increases(self):
        directory = MembershipDirectory(make_store())
        start = directory.generation
        directory.reload(make_account())
        directory.invalidate()
        assert directory.generation == start + 2


class TestContexts:

    def test_context_matches_snapshot(self):
        directory = MembershipDirectory(make_store())
        account = make_account()
        snapshot = directory.reload(account)
        ctx = directory.context()
        assert ctx.account == account
        assert ctx.generation == snapshot.generation
        directory.ensure_current(ctx)

    def test_context_before_identity_change_is_stale(self):
        directory = MembershipDirectory(make_store())
        directory.reload(make_account())
        ctx = directory.context()

        directory.handle_identity_change(make_account("next@example.test"))

        with pytest.raises(StaleContextError):
            directory.ensure_current(ctx)

    def test_context_after_sign_out_is_stale(self):
        directory = MembershipDirectory(make_store())
        directory.reload(make_account())
        ctx = directory.context()

        directory.handle_identity_change(None)

        with pytest.raises(StaleContextError):
            directory.ensure_current(ctx)
        with pytest.raises(DirectoryNotLoadedError):
            directory.context()

    def test_not_loaded_is_a_load_error(self):
        directory = MembershipDirectory(make_store())
        with pytest.raises(LoadError):
            directory.capabilities()
