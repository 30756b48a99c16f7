"""Shared fixtures: in-memory database, row factory and a standard scenario."""

import os

# Set test environment variables before any studio imports
os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional
from uuid import UUID

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from studio.db import build_engine, init_db
from studio.db.models import (
    GlobalRole,
    Post,
    PostStatus,
    Profile,
    SocialAccount,
    Workspace,
    WorkspaceMembership,
    WorkspaceRole,
)
from studio.identity import Account
from studio.identity.jwt import create_access_token
from studio.store import SQLReviewStore


class RowFactory:
    """Inserts rows and returns them detached with their state loaded."""

    def __init__(self, engine):
        self.engine = engine
        self._clock = datetime(2026, 1, 1, 9, 0, 0)

    def _tick(self) -> datetime:
        # Distinct, increasing created_at values keep ordering deterministic
        self._clock += timedelta(minutes=1)
        return self._clock

    def _save(self, row):
        with Session(self.engine, expire_on_commit=False) as session:
            session.add(row)
            session.commit()
            session.refresh(row)
        return row

    def profile(
        self,
        email: str,
        role: GlobalRole = GlobalRole.user,
        full_name: Optional[str] = None,
    ) -> Profile:
        return self._save(
            Profile(email=email, full_name=full_name, role=role, created_at=self._tick())
        )

    def workspace(self, name: str) -> Workspace:
        return self._save(Workspace(name=name, created_at=self._tick()))

    def membership(
        self, profile: Profile, workspace: Workspace, role: WorkspaceRole
    ) -> WorkspaceMembership:
        return self._save(
            WorkspaceMembership(
                account_id=profile.id,
                workspace_id=workspace.id,
                role=role,
                created_at=self._tick(),
            )
        )

    def social_account(
        self, workspace: Workspace, platform: str = "instagram", handle: str = "@brand"
    ) -> SocialAccount:
        return self._save(
            SocialAccount(
                workspace_id=workspace.id,
                platform=platform,
                handle=handle,
                created_at=self._tick(),
            )
        )

    def post(
        self,
        workspace: Workspace,
        status: PostStatus = PostStatus.sent_to_client,
        platform: str = "instagram",
        social_account: Optional[SocialAccount] = None,
        scheduled_date: Optional[date] = None,
        order_index: int = 0,
        **fields,
    ) -> Post:
        return self._save(
            Post(
                workspace_id=workspace.id,
                status=status,
                platform=platform,
                social_account_id=social_account.id if social_account else None,
                scheduled_date=scheduled_date or date(2026, 2, 1),
                order_index=order_index,
                created_at=self._tick(),
                **fields,
            )
        )

    def reload_post(self, post_id: UUID) -> Post:
        with Session(self.engine) as session:
            return session.get(Post, post_id)


def _account_for(profile: Profile) -> Account:
    return Account(id=profile.id, email=profile.email, full_name=profile.full_name)


def _token_for(profile: Profile) -> str:
    return create_access_token(
        {"sub": str(profile.id), "email": profile.email, "name": profile.full_name}
    )


@pytest.fixture
def account_for():
    """Build the identity-provider Account for a profile."""
    return _account_for


@pytest.fixture
def token_for():
    """Issue a local access token for a profile."""
    return _token_for


@dataclass
class Scenario:
    """Two client workspaces and one account per role.

    w1 has an account manager, a client approver and a client viewer;
    w2 only has its own approver. The outsider has a profile and nothing else.
    """

    w1: Workspace
    w2: Workspace
    admin: Profile
    manager: Profile
    approver: Profile
    viewer: Profile
    other_approver: Profile
    outsider: Profile
    p1: Post
    p2: Post


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return SQLReviewStore(engine)


@pytest.fixture
def factory(engine):
    return RowFactory(engine)


@pytest.fixture
def scenario(factory) -> Scenario:
    w1 = factory.workspace("Acme Coffee")
    w2 = factory.workspace("Birch Outdoors")

    admin = factory.profile("admin@agency.test", GlobalRole.admin, "Ada Admin")
    manager = factory.profile("manager@agency.test", full_name="Max Manager")
    approver = factory.profile("approver@acme.test", full_name="Alice Approver")
    viewer = factory.profile("viewer@acme.test", full_name="Vic Viewer")
    other_approver = factory.profile("approver@birch.test", full_name="Bo Birch")
    outsider = factory.profile("outsider@example.test")

    factory.membership(manager, w1, WorkspaceRole.account_manager)
    factory.membership(approver, w1, WorkspaceRole.client_approver)
    factory.membership(viewer, w1, WorkspaceRole.client_viewer)
    factory.membership(other_approver, w2, WorkspaceRole.client_approver)

    p1 = factory.post(w1, content={"caption": "New seasonal blend"})
    p2 = factory.post(w2, content={"caption": "Trail season"})

    return Scenario(
        w1=w1,
        w2=w2,
        admin=admin,
        manager=manager,
        approver=approver,
        viewer=viewer,
        other_approver=other_approver,
        outsider=outsider,
        p1=p1,
        p2=p2,
    )
