"""Expiration reminder scheduling."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol
from uuid import UUID

from pantry_sync.domain.inventory import InventoryRecord

_logger = logging.getLogger(__name__)


class ReminderScheduler(Protocol):
    """Interface for scheduling expiration reminders."""

    async def schedule(self, record: InventoryRecord) -> None:
        """Schedule (or reschedule) the reminder for a record."""

    async def cancel(self, record_id: UUID) -> None:
        """Cancel the pending reminder for a record."""

    async def cancel_all(self) -> None:
        """Cancel every pending reminder."""


def reminder_time(record: InventoryRecord, lead_days: int = 1) -> datetime:
    """Return when the reminder for a record should fire."""
    return record.expiration_date - timedelta(days=lead_days)


def reminder_message(record: InventoryRecord) -> tuple[str, str]:
    """Return the reminder title and body for a record."""
    return (
        "Food expiring soon!",
        f"Your {record.name} is about to expire. Use it soon.",
    )


@dataclass
class InMemoryReminderScheduler(ReminderScheduler):
    """Keeps pending reminders in memory, keyed by record id."""

    lead_days: int = 1
    pending: dict[UUID, datetime] = field(default_factory=dict)

    async def schedule(self, record: InventoryRecord) -> None:
        """Replace any existing reminder for the record."""
        fire_at = reminder_time(record, self.lead_days)
        self.pending[record.id] = fire_at
        _logger.debug("Reminder scheduled: id=%s at=%s", record.id, fire_at)

    async def cancel(self, record_id: UUID) -> None:
        """Drop the reminder for a record, if any."""
        self.pending.pop(record_id, None)

    async def cancel_all(self) -> None:
        """Drop every reminder."""
        self.pending.clear()
