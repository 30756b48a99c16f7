"""Approval state machine.

Transitions per post:

    awaiting_review --approve--------> approved
    awaiting_review --request_changes-> changes_requested
    approved | changes_requested --reopen_for_review--> awaiting_review

Approve and request-changes require `can_approve` in the post's workspace;
reopening requires `can_manage` there. Each transition is one atomic
conditional write in the store that also appends its audit entry. Repeating
the verdict a post already has succeeds and is audited again.

Checks run in a fixed order: stale context, post exists and is visible,
capability, precondition. Posts outside the caller's workspaces read as
missing. A failed check never writes anything.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from studio.access.directory import AccessContext
from studio.approval.states import ApprovalVerdict, ReviewState, review_state
from studio.audit import AuditTrail
from studio.db.models import ApprovalStatus, AuditAction, AuditLog, Comment, Post, PostStatus
from studio.errors import InvalidStateError, NotFoundError, UnauthorizedError, WriteError
from studio.logging import get_logger
from studio.store.base import ReviewStore, TransitionResult

if TYPE_CHECKING:
    from studio.access.directory import MembershipDirectory

logger = get_logger(__name__)

ENTITY_TYPE = "post"
CHANGES_REQUESTED_PREFIX = "Changes requested: "


@dataclass
class ApprovalOutcome:
    """Result of a committed review transition.

    Attributes:
        post: The post as committed
        verdict: Verdict recorded, None for a reopen
        audit_entry: The audit entry committed with the transition
        comment: Client-visible comment carrying the reason, if one was written
        comment_error: Why the comment could not be written, if it failed
        changed: False when the post already had this verdict
    """

    post: Post
    verdict: Optional[ApprovalVerdict]
    audit_entry: AuditLog
    comment: Optional[Comment] = None
    comment_error: Optional[WriteError] = None
    changed: bool = True


def _clean_reason(reason: Optional[str]) -> Optional[str]:
    if reason is None:
        return None
    reason = reason.strip()
    return reason or None


class ApprovalStateMachine:
    """Runs review transitions for one caller context at a time."""

    def __init__(
        self,
        store: ReviewStore,
        audit_trail: Optional[AuditTrail] = None,
        directory: Optional["MembershipDirectory"] = None,
    ):
        self.store = store
        self.audit_trail = audit_trail or AuditTrail(store)
        self.directory = directory

    # ==========================================================================
    # Transitions
    # ==========================================================================

    def approve(
        self,
        ctx: AccessContext,
        post_id: UUID,
        expected_version: Optional[int] = None,
    ) -> ApprovalOutcome:
        """Approve a post that is out with the client."""
        return self._submit(ctx, post_id, ApprovalVerdict.approved, None, expected_version)

    def request_changes(
        self,
        ctx: AccessContext,
        post_id: UUID,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> ApprovalOutcome:
        """Request changes on a post, optionally with a reason.

        A reason is also posted as a client-visible comment once the verdict
        is committed. That comment is best-effort: if it fails the verdict
        stands and the failure is reported on the outcome.
        """
        return self._submit(
            ctx, post_id, ApprovalVerdict.changes_requested, _clean_reason(reason), expected_version
        )

    def reopen_for_review(
        self,
        ctx: AccessContext,
        post_id: UUID,
        expected_version: Optional[int] = None,
    ) -> ApprovalOutcome:
        """Clear the verdict so the post can be reviewed again."""
        self._ensure_current(ctx)
        post = self.store.load_post(post_id)
        self._hide_foreign(ctx, post, "reopen")

        if not ctx.capabilities.can_manage(post.workspace_id):
            self._reject_unauthorized(ctx, post, "reopen")

        state = review_state(post)
        if post.status != PostStatus.sent_to_client or state not in (
            ReviewState.approved,
            ReviewState.changes_requested,
        ):
            self._reject_invalid(ctx, post, "reopen", "Only a reviewed post can be reopened")
        self._check_version(ctx, post, "reopen", expected_version)

        entry = self.audit_trail.build_entry(
            workspace_id=post.workspace_id,
            entity_type=ENTITY_TYPE,
            entity_id=post.id,
            action=AuditAction.review_reopened,
            details={
                "action": "Review reopened",
                "previous_status": post.approval_status.value,
                "reopened_by": self._actor(ctx),
            },
            acting_account_id=ctx.account.id,
            entity_workspace_id=post.workspace_id,
        )
        result = self.store.reopen_review(post.id, post.review_version, entry)
        self._committed(ctx, result, "reopen")
        return ApprovalOutcome(post=result.post, verdict=None, audit_entry=result.audit_entry)

    # ==========================================================================
    # Internals
    # ==========================================================================

    def _submit(
        self,
        ctx: AccessContext,
        post_id: UUID,
        verdict: ApprovalVerdict,
        reason: Optional[str],
        expected_version: Optional[int],
    ) -> ApprovalOutcome:
        self._ensure_current(ctx)
        post = self.store.load_post(post_id)
        self._hide_foreign(ctx, post, verdict.value)

        if not ctx.capabilities.can_approve(post.workspace_id):
            self._reject_unauthorized(ctx, post, verdict.value)

        if post.status != PostStatus.sent_to_client:
            self._reject_invalid(ctx, post, verdict.value)
        if post.approval_status not in (ApprovalStatus.none, verdict.approval_status):
            self._reject_invalid(ctx, post, verdict.value)
        self._check_version(ctx, post, verdict.value, expected_version)

        actor = self._actor(ctx)
        if verdict == ApprovalVerdict.approved:
            action = AuditAction.approved
            details = {"action": "Post approved", "approved_by": actor}
        else:
            action = AuditAction.changes_requested
            details = {"action": "Changes requested", "reason": reason, "requested_by": actor}

        entry = self.audit_trail.build_entry(
            workspace_id=post.workspace_id,
            entity_type=ENTITY_TYPE,
            entity_id=post.id,
            action=action,
            details=details,
            acting_account_id=ctx.account.id,
            entity_workspace_id=post.workspace_id,
        )
        result = self.store.submit_approval(
            post.id,
            verdict.approval_status,
            reason,
            post.review_version,
            actor,
            entry,
        )
        self._committed(ctx, result, verdict.value)

        outcome = ApprovalOutcome(
            post=result.post,
            verdict=verdict,
            audit_entry=result.audit_entry,
            changed=post.approval_status != verdict.approval_status,
        )
        if verdict == ApprovalVerdict.changes_requested and reason:
            self._append_reason_comment(ctx, result.post, reason, outcome)
        return outcome

    def _append_reason_comment(
        self,
        ctx: AccessContext,
        post: Post,
        reason: str,
        outcome: ApprovalOutcome,
    ) -> None:
        try:
            outcome.comment = self.store.append_comment(
                post.id,
                post.workspace_id,
                f"{CHANGES_REQUESTED_PREFIX}{reason}",
                is_internal=False,
                author_id=ctx.account.id,
            )
        except WriteError as e:
            # Verdict is already committed and stays
            outcome.comment_error = e
            logger.warning(
                "approval_comment_failed",
                post_id=str(post.id),
                workspace_id=str(post.workspace_id),
                error=e.message,
            )

    def _ensure_current(self, ctx: AccessContext) -> None:
        if self.directory is not None:
            self.directory.ensure_current(ctx)

    @staticmethod
    def _actor(ctx: AccessContext) -> str:
        return ctx.account.email or ctx.account.display_name

    @staticmethod
    def _check_version(
        ctx: AccessContext, post: Post, transition: str, expected_version: Optional[int]
    ) -> None:
        if expected_version is not None and expected_version != post.review_version:
            ApprovalStateMachine._reject_invalid(ctx, post, transition)

    @staticmethod
    def _hide_foreign(ctx: AccessContext, post: Post, transition: str) -> None:
        """Posts outside the caller's workspaces read as missing."""
        if ctx.capabilities.has_access_to_workspace(post.workspace_id):
            return
        logger.warning(
            "approval_rejected_unauthorized",
            transition=transition,
            post_id=str(post.id),
            account_id=str(ctx.account.id),
            foreign_workspace=True,
        )
        raise NotFoundError("Post not found", details={"post_id": str(post.id)})

    @staticmethod
    def _reject_unauthorized(ctx: AccessContext, post: Post, transition: str) -> None:
        logger.warning(
            "approval_rejected_unauthorized",
            transition=transition,
            post_id=str(post.id),
            workspace_id=str(post.workspace_id),
            account_id=str(ctx.account.id),
        )
        raise UnauthorizedError(details={"post_id": str(post.id)})

    @staticmethod
    def _reject_invalid(
        ctx: AccessContext, post: Post, transition: str, message: Optional[str] = None
    ) -> None:
        logger.info(
            "approval_rejected_invalid_state",
            transition=transition,
            post_id=str(post.id),
            status=post.status.value,
            approval_status=post.approval_status.value,
            review_version=post.review_version,
            account_id=str(ctx.account.id),
        )
        raise InvalidStateError(
            message,
            details={
                "post_id": str(post.id),
                "status": post.status.value,
                "approval_status": post.approval_status.value,
            },
        )

    def _committed(self, ctx: AccessContext, result: TransitionResult, transition: str) -> None:
        logger.info(
            "approval_committed",
            transition=transition,
            post_id=str(result.post.id),
            workspace_id=str(result.post.workspace_id),
            approval_status=result.post.approval_status.value,
            review_version=result.post.review_version,
            account_id=str(ctx.account.id),
        )
        self.audit_trail.log_appended(result.audit_entry)
