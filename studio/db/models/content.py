"""Content models: social accounts and scheduled posts.

The post payload (caption, hashtags, assets) is opaque to the review core
and is stored as JSON. Approval fields are written only by the approval
state machine through the store's atomic transition calls.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from sqlmodel import Field, SQLModel, Column
from sqlalchemy import JSON

from studio.db.models.base import UUIDModel, TimestampMixin


class PostStatus(str, Enum):
    """Production status of a post, owned by account managers."""

    draft = "draft"
    sent_to_client = "sent_to_client"
    scheduled = "scheduled"
    posted = "posted"


class ApprovalStatus(str, Enum):
    """Client review verdict recorded on a post."""

    none = "none"
    approved = "approved"
    changes_requested = "changes_requested"


# =============================================================================
# Social Account
# =============================================================================


class SocialAccountBase(SQLModel):
    """Base social account fields."""

    platform: str = Field(index=True)  # instagram, facebook, tiktok, linkedin, ...
    handle: str


class SocialAccount(UUIDModel, SocialAccountBase, TimestampMixin, table=True):
    """A client's account on one social platform."""

    __tablename__ = "social_accounts"

    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)


class SocialAccountRead(SocialAccountBase):
    """Schema for reading social account data."""

    id: UUID
    workspace_id: UUID
    created_at: datetime


# =============================================================================
# Post
# =============================================================================


class PostBase(SQLModel):
    """Base post fields shared across Create/Read."""

    platform: Optional[str] = Field(default=None, index=True)
    status: PostStatus = Field(default=PostStatus.draft, index=True)
    scheduled_date: Optional[date] = Field(default=None, index=True)
    order_index: int = Field(default=0)


class Post(UUIDModel, PostBase, TimestampMixin, table=True):
    """Post table.

    `review_version` increases on every accepted review transition and is
    the optimistic-concurrency token for those transitions.
    """

    __tablename__ = "posts"

    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    social_account_id: Optional[UUID] = Field(
        default=None,
        foreign_key="social_accounts.id",
        index=True,
    )

    # Review fields (approval state machine only)
    approval_status: ApprovalStatus = Field(default=ApprovalStatus.none, index=True)
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    change_reason: Optional[str] = None
    review_version: int = Field(default=0, nullable=False)

    content: Optional[dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )


class PostRead(PostBase):
    """Schema for reading post data."""

    id: UUID
    workspace_id: UUID
    social_account_id: Optional[UUID]
    approval_status: ApprovalStatus
    approved_by: Optional[str]
    approved_at: Optional[datetime]
    change_reason: Optional[str]
    review_version: int
    content: Optional[dict[str, Any]] = None
