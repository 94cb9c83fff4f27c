"""Local inventory store: in-memory collection with durable persistence."""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Protocol
from uuid import UUID

from pantry_sync.domain.errors import PersistenceUnavailable
from pantry_sync.domain.inventory import (
    Category,
    InventoryRecord,
    Tag,
    sample_records,
)
from pantry_sync.services.background import BackgroundTasks
from pantry_sync.services.reminders import ReminderScheduler
from pantry_sync.services.signals import Signal

_logger = logging.getLogger(__name__)


class RecordPersistence(Protocol):
    """Durable storage for the local record collection."""

    def load_records(self) -> list[InventoryRecord] | None:
        """Return persisted records, or None when nothing was saved yet."""

    def save_records(self, records: list[InventoryRecord]) -> None:
        """Replace the persisted records."""


class ChangeKind(StrEnum):
    """Kind of mutation applied to the store."""

    ADDED = "added"
    UPDATED = "updated"
    REMOVED = "removed"
    REPLACED = "replaced"
    CLEARED = "cleared"


@dataclass(frozen=True)
class StoreChange:
    """Notification emitted after every mutation."""

    kind: ChangeKind
    record: InventoryRecord | None = None


class InventoryStore:
    """Authoritative, always-available copy of the inventory.

    All mutations happen on the event loop; persistence runs in a worker
    thread. Saves are serialized and each one writes the collection as it is
    when the save starts, so the file always converges on the latest state.
    """

    def __init__(
        self,
        persistence: RecordPersistence,
        reminders: ReminderScheduler,
        seed_on_first_run: bool = False,
    ) -> None:
        self.persistence = persistence
        self.reminders = reminders
        self.seed_on_first_run = seed_on_first_run
        self.changes: Signal[StoreChange] = Signal("store.changes")
        self._records: list[InventoryRecord] = []
        self._save_lock = asyncio.Lock()
        self._reminder_lock = asyncio.Lock()
        self._side_effects = BackgroundTasks()

    async def load(self) -> None:
        """Load persisted records, degrading to an empty or seed collection."""
        try:
            loaded = await asyncio.to_thread(self.persistence.load_records)
        except PersistenceUnavailable as exc:
            _logger.error("Could not load inventory, starting empty: %s", exc)
            loaded = []
        if loaded is None:
            loaded = sample_records() if self.seed_on_first_run else []
            _logger.info(
                "No saved inventory found, starting with %s items", len(loaded)
            )
        self._records = list(loaded)
        self.changes.emit(StoreChange(ChangeKind.REPLACED))

    async def save(self) -> bool:
        """Persist the current collection; returns False if the write failed."""
        async with self._save_lock:
            snapshot = list(self._records)
            try:
                await asyncio.to_thread(self.persistence.save_records, snapshot)
            except PersistenceUnavailable as exc:
                _logger.error("Could not save inventory: %s", exc)
                return False
        return True

    async def add(self, record: InventoryRecord) -> None:
        """Append a record and persist; a known id is treated as an update."""
        if self.get(record.id) is not None:
            _logger.info("Record %s already present, updating instead", record.id)
            await self.update(record)
            return
        self._records.append(record)
        self._remind(self.reminders.schedule(record), "reminder schedule")
        self.changes.emit(StoreChange(ChangeKind.ADDED, record))
        await self.save()

    async def update(self, record: InventoryRecord) -> bool:
        """Replace the record with the same id; no-op if it is unknown."""
        for index, existing in enumerate(self._records):
            if existing.id == record.id:
                self._records[index] = record
                break
        else:
            return False
        self._remind(self.reminders.schedule(record), "reminder schedule")
        self.changes.emit(StoreChange(ChangeKind.UPDATED, record))
        await self.save()
        return True

    async def remove(self, record: InventoryRecord | UUID) -> bool:
        """Remove a record by value or id; removing twice is harmless."""
        record_id = record if isinstance(record, UUID) else record.id
        existing = self.get(record_id)
        if existing is None:
            return False
        self._records = [item for item in self._records if item.id != record_id]
        self._remind(self.reminders.cancel(record_id), "reminder cancel")
        self.changes.emit(StoreChange(ChangeKind.REMOVED, existing))
        await self.save()
        return True

    async def replace_all(self, records: list[InventoryRecord]) -> None:
        """Overwrite the collection, e.g. with a merged snapshot."""
        known = self.identifiers()
        self._records = list(records)
        for record in self._records:
            if record.id not in known:
                self._remind(self.reminders.schedule(record), "reminder schedule")
        self.changes.emit(StoreChange(ChangeKind.REPLACED))
        await self.save()

    async def clear(self) -> None:
        """Drop every local record and pending reminder."""
        self._records = []
        self._remind(self.reminders.cancel_all(), "reminder cancel_all")
        self.changes.emit(StoreChange(ChangeKind.CLEARED))
        await self.save()

    async def wait_for_side_effects(self) -> None:
        """Wait for outstanding reminder calls."""
        await self._side_effects.drain()

    def _remind(self, call: Coroutine[object, object, None], action: str) -> None:
        """Run reminder calls one at a time, in the order they were issued."""

        async def in_order() -> None:
            async with self._reminder_lock:
                await call

        self._side_effects.spawn(in_order(), action)

    @property
    def records(self) -> tuple[InventoryRecord, ...]:
        return tuple(self._records)

    @property
    def count(self) -> int:
        return len(self._records)

    @property
    def is_empty(self) -> bool:
        return not self._records

    def get(self, record_id: UUID) -> InventoryRecord | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def identifiers(self) -> set[UUID]:
        return {record.id for record in self._records}

    def by_category(self, category: Category) -> list[InventoryRecord]:
        return [record for record in self._records if record.category == category]

    def with_tag(self, tag: Tag) -> list[InventoryRecord]:
        return [record for record in self._records if tag in record.tags]

    def sorted_by_expiration(self) -> list[InventoryRecord]:
        return sorted(self._records, key=lambda record: record.expiration_date)

    def expiring_soon(self, now: datetime | None = None) -> list[InventoryRecord]:
        """Items expiring within the next three days, soonest first."""
        return [
            record
            for record in self.sorted_by_expiration()
            if record.is_expiring_soon(now)
        ]

    def expired(self, now: datetime | None = None) -> list[InventoryRecord]:
        """Items past their expiration date, oldest first."""
        return [
            record for record in self.sorted_by_expiration() if record.is_expired(now)
        ]

    def expiring_within(
        self, window: timedelta, now: datetime | None = None
    ) -> list[InventoryRecord]:
        """Unexpired items whose expiration falls inside the window."""
        current = now or datetime.now(tz=UTC)
        return [
            record
            for record in self.sorted_by_expiration()
            if current <= record.expiration_date <= current + window
        ]
