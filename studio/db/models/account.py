"""Profile model: the store-side record of an identity.

The identity provider owns accounts (id, email, display name). The profile
row carries the global role, which is independent of workspace memberships.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from studio.db.models.base import UUIDModel, TimestampMixin


class GlobalRole(str, Enum):
    """Account-wide role.

    - admin: agency administrator, sees and may act on every workspace
    - user: everything else; access comes from workspace memberships
    """

    admin = "admin"
    user = "user"


class ProfileBase(SQLModel):
    """Base profile fields shared across Create/Read."""

    email: Optional[str] = Field(default=None, index=True)
    full_name: Optional[str] = Field(default=None)
    role: GlobalRole = Field(default=GlobalRole.user)


class Profile(UUIDModel, ProfileBase, TimestampMixin, table=True):
    """Profile table. `id` equals the identity provider's account id."""

    __tablename__ = "profiles"


class ProfileRead(ProfileBase):
    """Schema for reading profile data."""

    id: UUID
    created_at: datetime
