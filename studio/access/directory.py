"""Membership directory: loads and caches an account's role and memberships.

Reloads are ordered by a generation counter. Every reload or invalidation
takes a new generation; a reload only publishes its snapshot if no newer
generation started while it was loading, so a slow stale reload can never
overwrite newer state.

Load failures degrade instead of failing the caller: the previous values are
kept when the snapshot belongs to the same account, otherwise the account is
treated as a plain user with no memberships. Degraded snapshots carry the
error messages so the UI can show a non-fatal banner.
"""

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from studio.access.roles import Capabilities, MembershipGrant
from studio.db.models import GlobalRole
from studio.errors import DirectoryNotLoadedError, LoadError, NotFoundError, StaleContextError
from studio.identity.providers import Account
from studio.logging import get_logger

if TYPE_CHECKING:
    from studio.store.base import ReviewStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class DirectorySnapshot:
    """Everything loaded for one account at one generation."""

    account: Account
    global_role: GlobalRole
    memberships: tuple[MembershipGrant, ...]
    generation: int
    degraded: bool = False
    load_errors: tuple[str, ...] = ()

    def capabilities(self) -> Capabilities:
        return Capabilities(
            global_role=self.global_role,
            memberships=self.memberships,
            account_id=self.account.id,
        )


@dataclass(frozen=True)
class AccessContext:
    """Explicit caller context passed into scoping and approval calls."""

    account: Account
    capabilities: Capabilities
    generation: int


class MembershipDirectory:
    """Cache of the current account's global role and memberships."""

    def __init__(self, store: "ReviewStore"):
        self.store = store
        self._lock = threading.Lock()
        self._generation = 0
        self._snapshot: Optional[DirectorySnapshot] = None

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        """Drop cached state; nothing is trusted until the next reload."""
        with self._lock:
            self._generation += 1
            self._snapshot = None
        logger.info("directory_invalidated", generation=self._generation)

    def handle_identity_change(self, account: Optional[Account]) -> None:
        """Identity session subscriber: invalidate, then reload for the new account."""
        self.invalidate()
        if account is not None:
            self.reload(account)

    def reload(self, account: Optional[Account]) -> Optional[DirectorySnapshot]:
        """Load profile and memberships for an account and publish the snapshot.

        Returns:
            The published snapshot, or the current one if this reload was
            superseded while loading. None when `account` is None.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            previous = self._snapshot
            if account is None:
                self._snapshot = None
                return None

        cached = previous if previous and previous.account.id == account.id else None
        errors: list[str] = []

        global_role = GlobalRole.user
        try:
            profile = self.store.load_profile(account.id)
            global_role = profile.role
        except NotFoundError:
            # Profile row not provisioned yet: plain user
            logger.info("directory_profile_missing", account_id=str(account.id))
        except LoadError as exc:
            errors.append(exc.message)
            if cached is not None:
                global_role = cached.global_role
            logger.warning(
                "directory_profile_load_failed",
                account_id=str(account.id),
                error=exc.message,
                used_cache=cached is not None,
            )

        memberships: tuple[MembershipGrant, ...] = ()
        try:
            rows = self.store.load_memberships(account.id)
            memberships = tuple(MembershipGrant.from_row(row) for row in rows)
            for grant in memberships:
                if grant.workspace_role is None:
                    logger.warning(
                        "directory_unknown_role",
                        account_id=str(account.id),
                        workspace_id=str(grant.workspace_id),
                        role=grant.role,
                    )
        except LoadError as exc:
            errors.append(exc.message)
            if cached is not None:
                memberships = cached.memberships
            logger.warning(
                "directory_memberships_load_failed",
                account_id=str(account.id),
                error=exc.message,
                used_cache=cached is not None,
            )

        snapshot = DirectorySnapshot(
            account=account,
            global_role=GlobalRole(global_role),
            memberships=memberships,
            generation=generation,
            degraded=bool(errors),
            load_errors=tuple(errors),
        )

        with self._lock:
            if generation != self._generation:
                logger.info(
                    "directory_reload_discarded",
                    account_id=str(account.id),
                    generation=generation,
                    current_generation=self._generation,
                )
                return self._snapshot
            self._snapshot = snapshot

        logger.info(
            "directory_reloaded",
            account_id=str(account.id),
            generation=generation,
            global_role=snapshot.global_role.value,
            membership_count=len(memberships),
            degraded=snapshot.degraded,
        )
        return snapshot

    def refresh(self) -> Optional[DirectorySnapshot]:
        """Reload for the account of the current snapshot, if any."""
        snapshot = self._snapshot
        if snapshot is None:
            return None
        return self.reload(snapshot.account)

    def current(self) -> Optional[DirectorySnapshot]:
        """The loaded snapshot, or None."""
        return self._snapshot

    def snapshot(self) -> DirectorySnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise DirectoryNotLoadedError()
        return snapshot

    def capabilities(self) -> Capabilities:
        return self.snapshot().capabilities()

    def context(self) -> AccessContext:
        snapshot = self.snapshot()
        return AccessContext(
            account=snapshot.account,
            capabilities=snapshot.capabilities(),
            generation=snapshot.generation,
        )

    def ensure_current(self, ctx: AccessContext) -> None:
        """Reject contexts computed before the latest reload or invalidation."""
        current = self._snapshot
        if current is None or current.generation != ctx.generation:
            raise StaleContextError(
                details={
                    "context_generation": ctx.generation,
                    "current_generation": current.generation if current else None,
                }
            )
