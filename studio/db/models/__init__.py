"""SQLModel table definitions.

This module exports all SQLModel table classes and their Create/Read variants.

Model Categories:
- Identity: Profile
- Multi-tenancy: Workspace, WorkspaceMembership
- Content: SocialAccount, Post
- Review: Comment, AuditLog
"""

# Base classes
from studio.db.models.base import UUIDModel, TimestampMixin, CreatedAtMixin

# Identity
from studio.db.models.account import GlobalRole, Profile, ProfileRead

# Multi-tenancy models
from studio.db.models.workspace import Workspace, WorkspaceRead
from studio.db.models.membership import (
    WorkspaceMembership, WorkspaceMembershipRead,
    WorkspaceRole, CLIENT_ROLES,
)

# Content models
from studio.db.models.content import (
    PostStatus, ApprovalStatus,
    SocialAccount, SocialAccountRead,
    Post, PostRead,
)

# Review models
from studio.db.models.comment import Comment, CommentRead
from studio.db.models.audit import (
    AuditAction,
    AuditLog, AuditLogCreate, AuditLogRead,
)

__all__ = [
    # Base
    "UUIDModel",
    "TimestampMixin",
    "CreatedAtMixin",
    # Identity
    "GlobalRole", "Profile", "ProfileRead",
    # Multi-tenancy
    "Workspace", "WorkspaceRead",
    "WorkspaceMembership", "WorkspaceMembershipRead",
    "WorkspaceRole", "CLIENT_ROLES",
    # Content
    "PostStatus", "ApprovalStatus",
    "SocialAccount", "SocialAccountRead",
    "Post", "PostRead",
    # Review
    "Comment", "CommentRead",
    "AuditAction",
    "AuditLog", "AuditLogCreate", "AuditLogRead",
]
