"""Comment model. Comments are appended, never edited or removed."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import event
from sqlmodel import Field, SQLModel

from studio.db.models.base import UUIDModel, CreatedAtMixin
from studio.errors import ImmutabilityViolationError


class CommentBase(SQLModel):
    """Base comment fields."""

    content: str
    is_internal: bool = Field(default=False)  # Internal notes vs client-visible


class Comment(UUIDModel, CommentBase, CreatedAtMixin, table=True):
    """Comment attached to a post, always in the post's workspace."""

    __tablename__ = "comments"

    post_id: UUID = Field(foreign_key="posts.id", index=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    author_id: Optional[UUID] = Field(default=None, foreign_key="profiles.id")


class CommentRead(CommentBase):
    """Schema for reading comment data."""

    id: UUID
    post_id: UUID
    workspace_id: UUID
    author_id: Optional[UUID]
    created_at: datetime


@event.listens_for(Comment, "before_update")
def prevent_comment_update(mapper, connection, target):
    """Prevent updates to comments."""
    raise ImmutabilityViolationError(
        details={"entity_type": "comment", "entity_id": str(target.id), "operation": "update"},
    )


@event.listens_for(Comment, "before_delete")
def prevent_comment_delete(mapper, connection, target):
    """Prevent deletion of comments."""
    raise ImmutabilityViolationError(
        details={"entity_type": "comment", "entity_id": str(target.id), "operation": "delete"},
    )
