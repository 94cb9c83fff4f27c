"""Domain models for authentication state."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthUser:
    """A signed-in user."""

    id: str
    email: str | None = None
    display_name: str | None = None


@dataclass(frozen=True)
class LoggedIn:
    """Transition from anonymous to authenticated."""

    user: AuthUser


@dataclass(frozen=True)
class LoggedOut:
    """Transition from authenticated to anonymous."""

    user: AuthUser


AuthEvent = LoggedIn | LoggedOut
