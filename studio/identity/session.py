"""Identity session: the currently authenticated account for one caller.

The session is the single source of identity change events. Subscribers
(the membership directory in particular) react to every change; nothing
downstream reads the current identity from ambient global state.
"""

from typing import Callable, Optional

from studio.errors import UnauthorizedError
from studio.identity.providers import Account, BaseIdentityProvider
from studio.logging import get_logger

logger = get_logger(__name__)

IdentityListener = Callable[[Optional[Account]], None]


class IdentitySession:
    """Holds the current account and notifies listeners when it changes."""

    def __init__(self, provider: BaseIdentityProvider):
        self.provider = provider
        self._account: Optional[Account] = None
        self._listeners: list[IdentityListener] = []

    def get_current_identity(self) -> Optional[Account]:
        return self._account

    def on_identity_change(self, callback: IdentityListener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def sign_in(self, token: str) -> Account:
        """Verify a token with the provider and make its account current.

        Raises:
            UnauthorizedError: If the token is invalid. Any previous identity
                is signed out, so stale capabilities cannot survive a failed
                sign-in.
        """
        result = await self.provider.verify_token(token)
        account = result.to_account()
        if account is None:
            logger.warning("identity_sign_in_rejected", provider=result.provider, error=result.error)
            self.set_identity(None)
            raise UnauthorizedError(
                "Invalid or expired credentials",
                error_code="AUTHENTICATION_FAILED",
                details={"provider": result.provider},
            )

        self.set_identity(account)
        return account

    async def sign_out(self) -> None:
        account = self._account
        if account is None:
            return
        self.set_identity(None)
        await self.provider.sign_out(account)

    def set_identity(self, account: Optional[Account]) -> None:
        """Replace the current identity, emitting a change if it differs."""
        previous = self._account
        if _same_identity(previous, account):
            self._account = account
            return

        self._account = account
        logger.info(
            "identity_changed",
            previous_account_id=str(previous.id) if previous else None,
            account_id=str(account.id) if account else None,
        )
        self._emit(account)

    def _emit(self, account: Optional[Account]) -> None:
        for listener in list(self._listeners):
            try:
                listener(account)
            except Exception:
                # Remaining listeners still run
                logger.exception("identity_listener_failed", listener=repr(listener))


def _same_identity(a: Optional[Account], b: Optional[Account]) -> bool:
    if a is None or b is None:
        return a is b
    return a.id == b.id
