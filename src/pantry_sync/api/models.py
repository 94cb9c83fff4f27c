"""Pydantic models for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, Field

from pantry_sync.domain.inventory import Category, InventoryRecord, Tag
from pantry_sync.domain.sync import PromptKind, SyncResult, SyncState, SyncStatus


class ItemPayload(BaseModel):
    """Fields a client may set on an inventory item."""

    name: str = Field(min_length=1)
    category: Category
    expiration_date: AwareDatetime
    tags: list[Tag] = Field(default_factory=list)
    notes: str | None = None


class ItemResponse(BaseModel):
    """Inventory item as returned to clients."""

    id: UUID
    name: str
    category: Category
    tags: list[Tag]
    expiration_date: datetime
    added_date: datetime
    notes: str | None
    days_remaining: int
    is_expiring_soon: bool
    is_expired: bool

    @classmethod
    def from_record(cls, record: InventoryRecord) -> "ItemResponse":
        return cls(
            id=record.id,
            name=record.name,
            category=record.category,
            tags=list(record.tags),
            expiration_date=record.expiration_date,
            added_date=record.added_date,
            notes=record.notes,
            days_remaining=record.days_remaining(),
            is_expiring_soon=record.is_expiring_soon(),
            is_expired=record.is_expired(),
        )


class LoginPayload(BaseModel):
    """User identity supplied by the sign-in provider."""

    user_id: str = Field(min_length=1)
    email: str | None = None
    display_name: str | None = None


class SyncStatusResponse(BaseModel):
    """Coordinator state for UI binding."""

    state: SyncState
    is_syncing: bool
    pending_prompt: PromptKind | None
    last_synced_at: datetime | None

    @classmethod
    def from_status(cls, status: SyncStatus) -> "SyncStatusResponse":
        return cls(
            state=status.state,
            is_syncing=status.is_syncing,
            pending_prompt=status.pending_prompt,
            last_synced_at=status.last_synced_at,
        )


class SyncResultResponse(BaseModel):
    """Outcome of a sync request."""

    success: bool
    error: str | None = None
    error_type: str | None = None
    affected: int = 0

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResultResponse":
        return cls(
            success=result.success,
            error=str(result.error) if result.error else None,
            error_type=type(result.error).__name__ if result.error else None,
            affected=result.affected,
        )
