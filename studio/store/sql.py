"""SQLModel implementation of the review store.

Every public method opens its own session. Mutating calls are one
transaction each; storage exceptions are translated at this boundary
(LoadError on reads, WriteError on writes) so callers never see SQLAlchemy
types.

Row-level policy: when a read is given `visible_to`, the store itself
restricts rows to the workspaces that account is a member of (admins see
everything). This is the authoritative boundary; application-side scoping is
a second layer on top.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import case, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from studio.access.scoping import Selector
from studio.db.engine import get_engine, get_session
from studio.db.models import (
    ApprovalStatus,
    AuditLog,
    AuditLogCreate,
    Comment,
    GlobalRole,
    Post,
    PostStatus,
    Profile,
    SocialAccount,
    Workspace,
    WorkspaceMembership,
)
from studio.errors import (
    InvalidStateError,
    LoadError,
    NotFoundError,
    StudioError,
    WriteError,
)
from studio.logging import get_logger
from studio.store.base import ReviewStore, TransitionResult

logger = get_logger(__name__)


def _as_uuid(value: Any, what: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFoundError(f"{what} not found", details={"id": str(value)})


class SQLReviewStore(ReviewStore):
    """Review store backed by a SQLAlchemy engine."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _load_failed(self, operation: str, exc: Exception) -> LoadError:
        logger.warning("store_load_failed", operation=operation, error=str(exc))
        return LoadError(details={"operation": operation})

    def _write_failed(self, operation: str, exc: Exception) -> WriteError:
        logger.warning("store_write_failed", operation=operation, error=str(exc))
        return WriteError(details={"operation": operation})

    def _visible_workspace_ids(self, session: Session, account_id: UUID) -> Optional[list[UUID]]:
        """Workspace ids an account may read, or None for unrestricted."""
        profile = session.get(Profile, account_id)
        if profile is not None and profile.role == GlobalRole.admin:
            return None
        statement = select(WorkspaceMembership.workspace_id).where(
            WorkspaceMembership.account_id == account_id
        )
        return list(session.exec(statement).all())

    @staticmethod
    def _apply_selector(statement, model, selector: Optional[Selector], workspace_column):
        if selector is None:
            return statement
        if selector.workspace_id is not None:
            statement = statement.where(
                workspace_column == _as_uuid(selector.workspace_id, "Workspace")
            )
        if selector.platform is not None and hasattr(model, "platform"):
            statement = statement.where(model.platform == selector.platform)
        if selector.social_account_id is not None:
            account_id = _as_uuid(selector.social_account_id, "Social account")
            if model is SocialAccount:
                statement = statement.where(SocialAccount.id == account_id)
            elif hasattr(model, "social_account_id"):
                statement = statement.where(model.social_account_id == account_id)
        return statement

    def _select_visible(
        self,
        operation: str,
        model,
        workspace_column,
        order_by: tuple,
        selector: Optional[Selector],
        visible_to: Optional[UUID],
    ) -> list:
        try:
            with get_session(self.engine) as session:
                statement = select(model)
                if visible_to is not None:
                    allowed = self._visible_workspace_ids(session, _as_uuid(visible_to, "Account"))
                    if allowed is not None:
                        if not allowed:
                            return []
                        statement = statement.where(col(workspace_column).in_(allowed))
                statement = self._apply_selector(statement, model, selector, workspace_column)
                statement = statement.order_by(*order_by)
                return list(session.exec(statement).all())
        except NotFoundError:
            # Malformed selector ids match nothing
            return []
        except SQLAlchemyError as e:
            raise self._load_failed(operation, e)

    # ==========================================================================
    # Reads
    # ==========================================================================

    def load_profile(self, account_id: UUID) -> Profile:
        account_id = _as_uuid(account_id, "Profile")
        try:
            with get_session(self.engine) as session:
                profile = session.get(Profile, account_id)
        except SQLAlchemyError as e:
            raise self._load_failed("load_profile", e)
        if profile is None:
            raise NotFoundError("Profile not found", details={"account_id": str(account_id)})
        return profile

    def load_memberships(self, account_id: UUID) -> list[WorkspaceMembership]:
        account_id = _as_uuid(account_id, "Account")
        try:
            with get_session(self.engine) as session:
                statement = (
                    select(WorkspaceMembership)
                    .where(WorkspaceMembership.account_id == account_id)
                    .order_by(col(WorkspaceMembership.created_at), col(WorkspaceMembership.id))
                )
                return list(session.exec(statement).all())
        except SQLAlchemyError as e:
            raise self._load_failed("load_memberships", e)

    def load_workspaces(
        self,
        selector: Optional[Selector] = None,
        visible_to: Optional[UUID] = None,
    ) -> list[Workspace]:
        return self._select_visible(
            "load_workspaces",
            Workspace,
            Workspace.id,
            (col(Workspace.created_at).desc(),),
            selector,
            visible_to,
        )

    def load_social_accounts(
        self,
        selector: Optional[Selector] = None,
        visible_to: Optional[UUID] = None,
    ) -> list[SocialAccount]:
        return self._select_visible(
            "load_social_accounts",
            SocialAccount,
            SocialAccount.workspace_id,
            (col(SocialAccount.created_at),),
            selector,
            visible_to,
        )

    def load_posts(
        self,
        selector: Optional[Selector] = None,
        visible_to: Optional[UUID] = None,
    ) -> list[Post]:
        return self._select_visible(
            "load_posts",
            Post,
            Post.workspace_id,
            (col(Post.scheduled_date), col(Post.order_index), col(Post.created_at)),
            selector,
            visible_to,
        )

    def load_post(self, post_id: UUID) -> Post:
        post_id = _as_uuid(post_id, "Post")
        try:
            with get_session(self.engine) as session:
                post = session.get(Post, post_id)
        except SQLAlchemyError as e:
            raise self._load_failed("load_post", e)
        if post is None:
            raise NotFoundError("Post not found", details={"post_id": str(post_id)})
        return post

    def list_comments(self, post_id: UUID, include_internal: bool = True) -> list[Comment]:
        post_id = _as_uuid(post_id, "Post")
        try:
            with get_session(self.engine) as session:
                statement = select(Comment).where(Comment.post_id == post_id)
                if not include_internal:
                    statement = statement.where(Comment.is_internal == False)  # noqa: E712
                statement = statement.order_by(col(Comment.created_at))
                return list(session.exec(statement).all())
        except SQLAlchemyError as e:
            raise self._load_failed("list_comments", e)

    def list_audit_log(
        self,
        workspace_id: UUID,
        entity_type: Optional[str] = None,
        entity_id: Optional[UUID] = None,
        limit: Optional[int] = None,
    ) -> list[AuditLog]:
        workspace_id = _as_uuid(workspace_id, "Workspace")
        try:
            with get_session(self.engine) as session:
                statement = select(AuditLog).where(AuditLog.workspace_id == workspace_id)
                if entity_type is not None:
                    statement = statement.where(AuditLog.entity_type == entity_type)
                if entity_id is not None:
                    statement = statement.where(
                        AuditLog.entity_id == _as_uuid(entity_id, "Entity")
                    )
                statement = statement.order_by(col(AuditLog.id))
                if limit is not None:
                    statement = statement.limit(limit)
                return list(session.exec(statement).all())
        except SQLAlchemyError as e:
            raise self._load_failed("list_audit_log", e)

    # ==========================================================================
    # Writes
    # ==========================================================================

    def _transition(
        self,
        operation: str,
        post_id: UUID,
        conditions: list,
        values: dict[str, Any],
        audit_entry: AuditLogCreate,
    ) -> TransitionResult:
        """Conditional post update plus audit insert in one transaction."""
        try:
            with get_session(self.engine) as session:
                statement = (
                    update(Post)
                    .where(Post.id == post_id, *conditions)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                result = session.execute(statement)
                if result.rowcount == 0:
                    session.rollback()
                    current = session.get(Post, post_id)
                    if current is None:
                        raise NotFoundError(
                            "Post not found", details={"post_id": str(post_id)}
                        )
                    raise InvalidStateError(
                        details={
                            "post_id": str(post_id),
                            "status": current.status.value,
                            "approval_status": current.approval_status.value,
                            "review_version": current.review_version,
                        }
                    )

                audit = AuditLog.model_validate(audit_entry)
                session.add(audit)
                session.commit()

                post = session.get(Post, post_id)
                session.refresh(post)
                session.refresh(audit)
                return TransitionResult(post=post, audit_entry=audit)
        except StudioError:
            raise
        except SQLAlchemyError as e:
            raise self._write_failed(operation, e)

    def submit_approval(
        self,
        post_id: UUID,
        verdict: ApprovalStatus,
        reason: Optional[str],
        expected_version: int,
        approver_email: Optional[str],
        audit_entry: AuditLogCreate,
    ) -> TransitionResult:
        post_id = _as_uuid(post_id, "Post")
        verdict = ApprovalStatus(verdict)
        if verdict == ApprovalStatus.none:
            raise InvalidStateError("A verdict is required", details={"verdict": verdict.value})

        if verdict == ApprovalStatus.approved:
            fields = {
                "approved_by": approver_email,
                "approved_at": datetime.utcnow(),
                "change_reason": None,
            }
        else:
            fields = {"approved_by": None, "approved_at": None, "change_reason": reason}

        # Repeating the current verdict keeps who decided and when
        is_repeat = Post.approval_status == verdict
        values: dict[str, Any] = {
            name: case((is_repeat, getattr(Post, name)), else_=value)
            for name, value in fields.items()
        }
        values["approval_status"] = verdict
        values["review_version"] = Post.review_version + 1

        conditions = [
            Post.status == PostStatus.sent_to_client,
            Post.review_version == expected_version,
            col(Post.approval_status).in_([ApprovalStatus.none, verdict]),
        ]
        return self._transition("submit_approval", post_id, conditions, values, audit_entry)

    def reopen_review(
        self,
        post_id: UUID,
        expected_version: int,
        audit_entry: AuditLogCreate,
    ) -> TransitionResult:
        post_id = _as_uuid(post_id, "Post")
        values = {
            "approval_status": ApprovalStatus.none,
            "approved_by": None,
            "approved_at": None,
            "change_reason": None,
            "review_version": Post.review_version + 1,
        }
        conditions = [
            Post.status == PostStatus.sent_to_client,
            Post.review_version == expected_version,
            col(Post.approval_status) != ApprovalStatus.none,
        ]
        return self._transition("reopen_review", post_id, conditions, values, audit_entry)

    def append_comment(
        self,
        post_id: UUID,
        workspace_id: UUID,
        content: str,
        is_internal: bool,
        author_id: Optional[UUID] = None,
    ) -> Comment:
        post_id = _as_uuid(post_id, "Post")
        workspace_id = _as_uuid(workspace_id, "Workspace")
        try:
            with get_session(self.engine) as session:
                post = session.get(Post, post_id)
                if post is None:
                    raise NotFoundError("Post not found", details={"post_id": str(post_id)})
                if post.workspace_id != workspace_id:
                    raise InvalidStateError(
                        "Comment workspace does not match the post",
                        details={
                            "post_id": str(post_id),
                            "workspace_id": str(workspace_id),
                        },
                    )
                comment = Comment(
                    post_id=post_id,
                    workspace_id=workspace_id,
                    content=content,
                    is_internal=is_internal,
                    author_id=author_id,
                )
                session.add(comment)
                session.commit()
                session.refresh(comment)
                return comment
        except StudioError:
            raise
        except SQLAlchemyError as e:
            raise self._write_failed("append_comment", e)

    def append_audit_log(self, entry: AuditLogCreate) -> AuditLog:
        try:
            with get_session(self.engine) as session:
                if entry.entity_type == "post":
                    post = session.get(Post, entry.entity_id)
                    if post is not None and post.workspace_id != entry.workspace_id:
                        raise InvalidStateError(
                            "Audit workspace does not match the post",
                            details={
                                "entity_id": str(entry.entity_id),
                                "workspace_id": str(entry.workspace_id),
                            },
                        )
                audit = AuditLog.model_validate(entry)
                session.add(audit)
                session.commit()
                session.refresh(audit)
                return audit
        except StudioError:
            raise
        except SQLAlchemyError as e:
            raise self._write_failed("append_audit_log", e)
