"""Error taxonomy for storage and sync operations."""


class SyncError(Exception):
    """Base class for sync subsystem errors."""


class Unauthenticated(SyncError):
    """A remote operation was attempted without a signed-in user."""

    def __init__(self, message: str = "User is not signed in") -> None:
        super().__init__(message)


class RemoteUnavailable(SyncError):
    """The remote store failed to complete a request."""


class PersistenceUnavailable(SyncError):
    """Local storage could not be read or written."""


class ProgrammingError(SyncError):
    """The coordinator was used incorrectly, e.g. before store injection."""


class SyncInProgress(SyncError):
    """Another sync round trip is already running."""

    def __init__(self, message: str = "A sync is already in progress") -> None:
        super().__init__(message)
