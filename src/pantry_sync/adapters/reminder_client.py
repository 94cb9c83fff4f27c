"""Push-reminder service client."""

from dataclasses import dataclass
from uuid import UUID

import httpx

from pantry_sync.domain.inventory import InventoryRecord
from pantry_sync.services.reminders import (
    ReminderScheduler,
    reminder_message,
    reminder_time,
)


@dataclass
class HttpxReminderClient(ReminderScheduler):
    """Reminder scheduler backed by an HTTP push service."""

    base_url: str
    http_client: httpx.AsyncClient
    lead_days: int = 1

    @classmethod
    def create(
        cls, base_url: str, token: str | None = None, lead_days: int = 1
    ) -> "HttpxReminderClient":
        """Create a reminder client with a managed httpx session."""
        headers = {"Authorization": f"Bearer {token}"} if token else None
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(headers=headers),
            lead_days=lead_days,
        )

    async def schedule(self, record: InventoryRecord) -> None:
        """Create or replace the reminder for a record."""
        title, body = reminder_message(record)
        url = f"{self.base_url}/reminders/{record.id}"
        payload = {
            "fire_at": reminder_time(record, self.lead_days).isoformat(),
            "title": title,
            "body": body,
        }
        response = await self.http_client.put(url, json=payload, timeout=10)
        response.raise_for_status()

    async def cancel(self, record_id: UUID) -> None:
        """Cancel the reminder for a record."""
        url = f"{self.base_url}/reminders/{record_id}"
        response = await self.http_client.delete(url, timeout=10)
        if response.status_code != httpx.codes.NOT_FOUND:
            response.raise_for_status()

    async def cancel_all(self) -> None:
        """Cancel every pending reminder."""
        url = f"{self.base_url}/reminders"
        response = await self.http_client.delete(url, timeout=10)
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
