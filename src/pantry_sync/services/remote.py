"""Client for the per-user remote inventory collection."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol, TypeVar
from uuid import UUID

from pantry_sync.domain.errors import RemoteUnavailable, Unauthenticated
from pantry_sync.domain.inventory import (
    InventoryRecord,
    RemoteRecord,
    record_from_payload,
    record_to_payload,
)
from pantry_sync.services.auth import AuthService

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class RemoteInventoryRepository(Protocol):
    """Persistence interface for remote inventory rows, scoped by user."""

    def upsert_items(self, user_id: str, rows: list[dict[str, object]]) -> None:
        """Create or overwrite rows keyed by item id."""

    def list_items(self, user_id: str) -> list[dict[str, object]]:
        """Return every row stored for the user."""

    def list_item_ids(self, user_id: str) -> list[str]:
        """Return the ids of every row stored for the user."""

    def delete_items(self, user_id: str, item_ids: list[str]) -> int:
        """Delete the given rows and return how many were removed."""

    def delete_all_items(self, user_id: str) -> int:
        """Delete every row for the user and return how many were removed."""

    def touch_last_sync(self, user_id: str) -> None:
        """Record that the user's inventory was just written."""


@dataclass
class RemoteStoreClient:
    """Moves records to and from the signed-in user's remote collection.

    Every call requires a signed-in user and fails as a whole; retries are
    left to the caller.
    """

    repository: RemoteInventoryRepository
    auth: AuthService
    last_synced_at: datetime | None = None

    async def upload(self, records: Iterable[InventoryRecord]) -> None:
        """Upsert records by id; a repeated id keeps its last occurrence."""
        user_id = self._require_user("upload")
        rows = list(
            {str(record.id): record_to_payload(record) for record in records}.values()
        )
        if not rows:
            return
        await self._call("upload", self.repository.upsert_items, user_id, rows)
        await self._call("touch_last_sync", self.repository.touch_last_sync, user_id)
        self.last_synced_at = datetime.now(tz=UTC)
        _logger.info("Uploaded %s items for user_id=%s", len(rows), user_id)

    async def fetch(self) -> list[RemoteRecord]:
        """Return every remote record for the user."""
        user_id = self._require_user("fetch")
        rows = await self._call("fetch", self.repository.list_items, user_id)
        records = []
        for row in rows:
            try:
                record = record_from_payload(row)
            except (KeyError, TypeError, ValueError) as exc:
                _logger.warning(
                    "Skipping unreadable remote row %s: %s", row.get("id"), exc
                )
                continue
            records.append(RemoteRecord(record=record, synced_at=_synced_at(row)))
        self.last_synced_at = datetime.now(tz=UTC)
        _logger.info("Fetched %s/%s remote items", len(records), len(rows))
        return records

    async def delete(self, record_id: UUID) -> None:
        """Delete one remote record; absent ids are ignored."""
        user_id = self._require_user("delete")
        await self._call(
            "delete", self.repository.delete_items, user_id, [str(record_id)]
        )

    async def sync_deletions(self, local_ids: Iterable[UUID]) -> int:
        """Delete remote records that no longer exist locally."""
        user_id = self._require_user("sync_deletions")
        keep = {str(record_id) for record_id in local_ids}
        remote_ids = await self._call(
            "list_ids", self.repository.list_item_ids, user_id
        )
        stale = []
        for remote_id in dict.fromkeys(remote_ids):
            normalized = _normalized_id(remote_id)
            if normalized is not None and normalized not in keep:
                stale.append(remote_id)
        if not stale:
            _logger.info("No remote deletions to sync")
            return 0
        await self._call(
            "sync_deletions", self.repository.delete_items, user_id, stale
        )
        _logger.info("Deleted %s stale remote items", len(stale))
        return len(stale)

    async def delete_all(self) -> int:
        """Wipe the user's remote collection."""
        user_id = self._require_user("delete_all")
        removed = await self._call(
            "delete_all", self.repository.delete_all_items, user_id
        )
        _logger.info("Deleted all %s remote items for user_id=%s", removed, user_id)
        return removed

    def _require_user(self, action: str) -> str:
        user = self.auth.current_user
        if user is None:
            _logger.warning("Remote %s refused: user is not signed in", action)
            raise Unauthenticated()
        return user.id

    async def _call(self, action: str, func: Callable[..., T], *args: object) -> T:
        """Run a blocking repository call off the event loop."""
        try:
            return await asyncio.to_thread(func, *args)
        except Exception as exc:
            _logger.warning("Remote %s failed: %s", action, exc)
            raise RemoteUnavailable(f"Remote {action} failed: {exc}") from exc


def _normalized_id(raw: object) -> str | None:
    try:
        return str(UUID(str(raw)))
    except ValueError:
        return None


def _synced_at(row: dict[str, object]) -> datetime | None:
    raw = row.get("synced_at")
    if isinstance(raw, str) and raw:
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None
    return None
