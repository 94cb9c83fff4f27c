"""Supabase-backed remote inventory repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from pantry_sync.services.remote import RemoteInventoryRepository

_PAGE_SIZE = 1000


@dataclass
class SupabaseInventoryRepository(RemoteInventoryRepository):
    """Supabase implementation for per-user inventory rows.

    Rows are keyed by ``(user_id, id)`` so one user's upload can never
    claim another user's row. ``synced_at`` is filled in by the database on
    every write.
    """

    client: Client
    table_name: str = "inventory_items"
    sync_state_table: str = "user_sync_state"

    def upsert_items(self, user_id: str, rows: list[dict[str, object]]) -> None:
        """Create or overwrite the user's rows keyed by item id."""
        payload = [{**row, "user_id": user_id} for row in rows]
        self.client.table(self.table_name).upsert(
            payload, on_conflict="user_id,id"
        ).execute()

    def list_items(self, user_id: str) -> list[dict[str, object]]:
        """Return every row stored for the user."""
        return self._select_all(user_id, "*")

    def list_item_ids(self, user_id: str) -> list[str]:
        """Return the ids of every row stored for the user."""
        return [str(row["id"]) for row in self._select_all(user_id, "id")]

    def delete_items(self, user_id: str, item_ids: list[str]) -> int:
        """Delete the given rows and return how many were removed."""
        if not item_ids:
            return 0
        response = (
            self.client.table(self.table_name)
            .delete()
            .eq("user_id", user_id)
            .in_("id", item_ids)
            .execute()
        )
        return len(response.data or [])

    def delete_all_items(self, user_id: str) -> int:
        """Delete every row for the user and return how many were removed."""
        response = (
            self.client.table(self.table_name)
            .delete()
            .eq("user_id", user_id)
            .execute()
        )
        return len(response.data or [])

    def touch_last_sync(self, user_id: str) -> None:
        """Stamp the user's last inventory sync time."""
        self.client.table(self.sync_state_table).upsert(
            {
                "user_id": user_id,
                "last_inventory_sync_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()

    def _select_all(self, user_id: str, columns: str) -> list[dict[str, object]]:
        """Page through every row for the user."""
        rows: list[dict[str, object]] = []
        offset = 0
        while True:
            response = (
                self.client.table(self.table_name)
                .select(columns)
                .eq("user_id", user_id)
                .order("id")
                .range(offset, offset + _PAGE_SIZE - 1)
                .execute()
            )
            page = response.data or []
            rows.extend(page)
            if len(page) < _PAGE_SIZE:
                return rows
            offset += _PAGE_SIZE
