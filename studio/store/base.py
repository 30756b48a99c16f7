"""Store boundary: the durable store the review core sits on.

The store owns persistence and its own row-level authorization. The core
only ever talks to it through this interface. Every mutating call is a
single atomic operation; in particular submit_approval commits the verdict
and its audit entry together or not at all.

Failure contract:
- NotFoundError: referenced row does not exist
- InvalidStateError: a conditional write found the row in another state
- LoadError: a read failed (transport/storage)
- WriteError: a write failed (transport/storage); nothing was committed
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from studio.access.scoping import Selector
from studio.db.models import (
    ApprovalStatus,
    AuditLog,
    AuditLogCreate,
    Comment,
    Post,
    Profile,
    SocialAccount,
    Workspace,
    WorkspaceMembership,
)


@dataclass
class TransitionResult:
    """Outcome of an atomic review transition."""

    post: Post
    audit_entry: AuditLog


class ReviewStore(ABC):
    """Abstract store used by the directory, scoping and approval components."""

    # ==========================================================================
    # Reads
    # ==========================================================================

    @abstractmethod
    def load_profile(self, account_id: UUID) -> Profile:
        """Load the profile row for an account. Raises NotFoundError if absent."""
        ...

    @abstractmethod
    def load_memberships(self, account_id: UUID) -> list[WorkspaceMembership]:
        """Load an account's memberships, oldest first."""
        ...

    @abstractmethod
    def load_workspaces(
        self,
        selector: Optional[Selector] = None,
        visible_to: Optional[UUID] = None,
    ) -> list[Workspace]:
        """Load workspaces, newest first.

        When `visible_to` is given, the store applies its own row-level
        policy for that account.
        """
        ...

    @abstractmethod
    def load_social_accounts(
        self,
        selector: Optional[Selector] = None,
        visible_to: Optional[UUID] = None,
    ) -> list[SocialAccount]:
        """Load social accounts, oldest first."""
        ...

    @abstractmethod
    def load_posts(
        self,
        selector: Optional[Selector] = None,
        visible_to: Optional[UUID] = None,
    ) -> list[Post]:
        """Load posts ordered by scheduled date, then order index."""
        ...

    @abstractmethod
    def load_post(self, post_id: UUID) -> Post:
        """Load one post. Raises NotFoundError if absent."""
        ...

    @abstractmethod
    def list_comments(self, post_id: UUID, include_internal: bool = True) -> list[Comment]:
        """List comments on a post in append order."""
        ...

    @abstractmethod
    def list_audit_log(
        self,
        workspace_id: UUID,
        entity_type: Optional[str] = None,
        entity_id: Optional[UUID] = None,
        limit: Optional[int] = None,
    ) -> list[AuditLog]:
        """List audit entries for a workspace in append order."""
        ...

    # ==========================================================================
    # Writes
    # ==========================================================================

    @abstractmethod
    def submit_approval(
        self,
        post_id: UUID,
        verdict: ApprovalStatus,
        reason: Optional[str],
        expected_version: int,
        approver_email: Optional[str],
        audit_entry: AuditLogCreate,
    ) -> TransitionResult:
        """Atomically record a verdict and its audit entry.

        The write applies only if the post is still sent_to_client, still at
        `expected_version`, and has no verdict or already has this verdict.
        """
        ...

    @abstractmethod
    def reopen_review(
        self,
        post_id: UUID,
        expected_version: int,
        audit_entry: AuditLogCreate,
    ) -> TransitionResult:
        """Atomically clear a verdict (new review round) and audit it."""
        ...

    @abstractmethod
    def append_comment(
        self,
        post_id: UUID,
        workspace_id: UUID,
        content: str,
        is_internal: bool,
        author_id: Optional[UUID] = None,
    ) -> Comment:
        """Append a comment to a post in the post's own workspace."""
        ...

    @abstractmethod
    def append_audit_log(self, entry: AuditLogCreate) -> AuditLog:
        """Append one audit entry."""
        ...
