"""StudioClient: the review core wired together for a single caller.

Identity changes flow one way:

    IdentitySession --change--> MembershipDirectory.reload
                                   |
                                   v
                 AccessContext (capabilities + generation)
                                   |
              scoping (visible_*)  |  ApprovalStateMachine

Every read and action takes a fresh AccessContext from the directory, so a
context computed before a sign-out or sign-in is never used afterwards.
"""

from typing import Optional
from uuid import UUID

from studio.access import (
    AccessContext,
    Capabilities,
    MembershipDirectory,
    NavigationFlags,
    Selector,
    navigation_flags,
    scope_posts,
    scope_social_accounts,
    scope_workspaces,
)
from studio.approval import ApprovalOutcome, ApprovalStateMachine, ReviewPanel, review_panel
from studio.approval.machine import ENTITY_TYPE as POST_ENTITY
from studio.audit import AuditTrail
from studio.db.models import AuditLog, Post, SocialAccount, Workspace
from studio.errors import LoadError
from studio.identity import Account, BaseIdentityProvider, IdentitySession, get_provider
from studio.logging import get_logger
from studio.resilience import NO_RETRY, RetryPolicy
from studio.store.base import ReviewStore

logger = get_logger(__name__)


class StudioClient:
    """Authorization and approval pipeline for one logical caller.

    Args:
        store: The review store
        provider: Identity provider (default: from IDENTITY_PROVIDER)
        retry_policy: Whole-operation retry for review actions
    """

    def __init__(
        self,
        store: ReviewStore,
        provider: Optional[BaseIdentityProvider] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.store = store
        self.identity = IdentitySession(provider or get_provider())
        self.directory = MembershipDirectory(store)
        self.audit_trail = AuditTrail(store)
        self.approvals = ApprovalStateMachine(store, self.audit_trail, self.directory)
        self.retry_policy = retry_policy or NO_RETRY
        self.banner: Optional[str] = None
        self._unsubscribe = self.identity.on_identity_change(self.directory.handle_identity_change)

    def close(self) -> None:
        """Detach the directory from the identity session."""
        self._unsubscribe()

    # ==========================================================================
    # Identity
    # ==========================================================================

    async def sign_in(self, token: str) -> Account:
        self.banner = None
        account = await self.identity.sign_in(token)
        self._note_degraded()
        return account

    async def sign_out(self) -> None:
        self.banner = None
        await self.identity.sign_out()

    def refresh(self) -> None:
        """Reload memberships for the current account (manual retry)."""
        self.banner = None
        self.directory.refresh()
        self._note_degraded()

    def _note_degraded(self) -> None:
        snapshot = self.directory.current()
        if snapshot is not None and snapshot.degraded:
            self.banner = LoadError.default_message

    # ==========================================================================
    # Capabilities
    # ==========================================================================

    def context(self) -> AccessContext:
        return self.directory.context()

    def capabilities(self) -> Capabilities:
        return self.directory.capabilities()

    def navigation(self) -> NavigationFlags:
        return navigation_flags(self.capabilities())

    # ==========================================================================
    # Scoped reads
    # ==========================================================================

    def visible_workspaces(self, selector: Optional[Selector] = None) -> list[Workspace]:
        try:
            ctx = self.context()
            rows = self.store.load_workspaces(selector, visible_to=ctx.account.id)
        except LoadError as e:
            return self._degraded_read("workspaces", e)
        return scope_workspaces(rows, ctx.capabilities, selector)

    def visible_social_accounts(
        self, selector: Optional[Selector] = None
    ) -> list[SocialAccount]:
        try:
            ctx = self.context()
            rows = self.store.load_social_accounts(selector, visible_to=ctx.account.id)
        except LoadError as e:
            return self._degraded_read("social_accounts", e)
        return scope_social_accounts(rows, ctx.capabilities, selector)

    def visible_posts(self, selector: Optional[Selector] = None) -> list[Post]:
        try:
            ctx = self.context()
            rows = self.store.load_posts(selector, visible_to=ctx.account.id)
        except LoadError as e:
            return self._degraded_read("posts", e)
        return scope_posts(rows, ctx.capabilities, selector)

    def _degraded_read(self, collection: str, error: LoadError) -> list:
        self.banner = error.message
        logger.warning("scoped_read_degraded", collection=collection, error_code=error.error_code)
        return []

    # ==========================================================================
    # Review
    # ==========================================================================

    def review_panel(self, post: Post) -> ReviewPanel:
        return review_panel(post, self.capabilities())

    def approve(self, post_id: UUID, expected_version: Optional[int] = None) -> ApprovalOutcome:
        return self.retry_policy.call(self._approve, post_id, expected_version)

    def request_changes(
        self,
        post_id: UUID,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> ApprovalOutcome:
        return self.retry_policy.call(self._request_changes, post_id, reason, expected_version)

    def reopen_for_review(
        self, post_id: UUID, expected_version: Optional[int] = None
    ) -> ApprovalOutcome:
        return self.retry_policy.call(self._reopen_for_review, post_id, expected_version)

    def post_history(self, post: Post) -> list[AuditLog]:
        """Audit entries for a post the caller can see, oldest first."""
        caps = self.capabilities()
        if not caps.has_access_to_workspace(post.workspace_id):
            return []
        return self.audit_trail.history(post.workspace_id, POST_ENTITY, post.id)

    # Each attempt takes a fresh context so a retry never reuses a stale one

    def _approve(self, post_id, expected_version):
        return self.approvals.approve(self.context(), post_id, expected_version)

    def _request_changes(self, post_id, reason, expected_version):
        return self.approvals.request_changes(self.context(), post_id, reason, expected_version)

    def _reopen_for_review(self, post_id, expected_version):
        return self.approvals.reopen_for_review(self.context(), post_id, expected_version)
