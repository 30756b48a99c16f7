"""Base models for SQLModel tables.

Tables use UUID primary keys (anti-ID guessing, distributed friendly).
The audit log is the exception: its integer key is the append order.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class UUIDModel(SQLModel):
    """Base model with UUID primary key."""

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        index=True,
        nullable=False,
    )


class TimestampMixin(SQLModel):
    """Mixin for created_at and updated_at timestamps.

    Use with UUIDModel:
        class Workspace(UUIDModel, TimestampMixin, table=True):
            name: str
    """

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        nullable=False,
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column_kwargs={"onupdate": datetime.utcnow},
    )


class CreatedAtMixin(SQLModel):
    """Creation timestamp only, for rows that are never updated."""

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        nullable=False,
        index=True,
    )
