"""Domain models for the sync state machine."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pantry_sync.domain.errors import SyncError


class SyncState(StrEnum):
    """Coarse coordinator state exposed to the UI."""

    IDLE = "idle"
    PROMPTING = "prompting"
    SYNCING = "syncing"


class PromptKind(StrEnum):
    """Confirmation the user must answer before a bulk operation."""

    UPLOAD_LOCAL_DATA = "upload_local_data"
    DELETE_LOCAL_DATA = "delete_local_data"


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a sync workflow."""

    success: bool
    error: SyncError | None = None
    affected: int = 0

    @classmethod
    def ok(cls, affected: int = 0) -> "SyncResult":
        return cls(success=True, affected=affected)

    @classmethod
    def failed(cls, error: SyncError) -> "SyncResult":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class SyncStatus:
    """Snapshot of the coordinator for UI binding."""

    state: SyncState
    is_syncing: bool
    pending_prompt: PromptKind | None
    last_synced_at: datetime | None
