"""Authentication session and transition events."""

import logging
from collections.abc import Awaitable, Callable

from pantry_sync.domain.auth import AuthEvent, AuthUser, LoggedIn, LoggedOut

_logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthEvent], Awaitable[object]]


class AuthService:
    """Holds the current user and reports login/logout transitions.

    Only one listener is supported; it is awaited for every transition.
    """

    def __init__(self, current_user: AuthUser | None = None) -> None:
        self._current_user = current_user
        self._listener: AuthListener | None = None

    @property
    def current_user(self) -> AuthUser | None:
        return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    def subscribe(self, listener: AuthListener) -> None:
        """Set the transition listener, replacing any previous one."""
        if self._listener is not None and self._listener is not listener:
            _logger.warning("Replacing existing auth listener")
        self._listener = listener

    async def sign_in(self, user: AuthUser) -> None:
        """Sign a user in; switching accounts logs the previous one out."""
        previous = self._current_user
        if previous == user:
            return
        if previous is not None:
            await self.sign_out()
        self._current_user = user
        _logger.info("User signed in: user_id=%s", user.id)
        await self._emit(LoggedIn(user))

    async def sign_out(self) -> None:
        """Sign the current user out; no-op when already anonymous."""
        previous = self._current_user
        if previous is None:
            return
        self._current_user = None
        _logger.info("User signed out: user_id=%s", previous.id)
        await self._emit(LoggedOut(previous))

    async def _emit(self, event: AuthEvent) -> None:
        if self._listener is None:
            _logger.warning("Auth transition without listener: %s", event)
            return
        await self._listener(event)
