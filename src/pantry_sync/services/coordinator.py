"""Sync coordinator: reacts to auth transitions and user sync requests."""

import logging
from collections.abc import Callable
from uuid import UUID

from pantry_sync.domain.auth import AuthEvent, LoggedIn, LoggedOut
from pantry_sync.domain.errors import ProgrammingError, SyncError, SyncInProgress
from pantry_sync.domain.sync import PromptKind, SyncResult, SyncState, SyncStatus
from pantry_sync.services.auth import AuthService
from pantry_sync.services.background import BackgroundTasks
from pantry_sync.services.merge import merge_records
from pantry_sync.services.remote import RemoteStoreClient
from pantry_sync.services.signals import Signal
from pantry_sync.services.store import ChangeKind, InventoryStore, StoreChange

_logger = logging.getLogger(__name__)


class SyncCoordinator:
    """State machine over idle, prompting and syncing.

    Login with local data asks before uploading; login without local data
    pulls the remote copy straight away. Logout with local data asks before
    clearing it and never touches the remote copy. Only one sync round trip
    runs at a time: requests made while one is in flight are rejected, not
    queued.
    """

    def __init__(self, auth: AuthService, remote: RemoteStoreClient) -> None:
        self.auth = auth
        self.remote = remote
        self.changes: Signal[SyncStatus] = Signal("sync.changes")
        self._store: InventoryStore | None = None
        self._is_syncing = False
        self._pending_prompt: PromptKind | None = None
        self._pushes = BackgroundTasks()
        self._changed_while_syncing: set[UUID] = set()
        self._unsubscribe_store: Callable[[], None] | None = None

    def inject_store(self, store: InventoryStore) -> None:
        """Attach the store shared with the UI and start listening for logins."""
        if self._unsubscribe_store is not None:
            self._unsubscribe_store()
        self._store = store
        self._unsubscribe_store = store.changes.subscribe(self._on_store_change)
        self.auth.subscribe(self.handle_auth_event)
        _logger.info("Store injected with %s items", store.count)

    @property
    def store(self) -> InventoryStore | None:
        return self._store

    @property
    def is_syncing(self) -> bool:
        return self._is_syncing

    @property
    def pending_prompt(self) -> PromptKind | None:
        return self._pending_prompt

    @property
    def state(self) -> SyncState:
        if self._is_syncing:
            return SyncState.SYNCING
        if self._pending_prompt is not None:
            return SyncState.PROMPTING
        return SyncState.IDLE

    @property
    def status(self) -> SyncStatus:
        return SyncStatus(
            state=self.state,
            is_syncing=self._is_syncing,
            pending_prompt=self._pending_prompt,
            last_synced_at=self.remote.last_synced_at,
        )

    async def handle_auth_event(self, event: AuthEvent) -> SyncResult:
        """React to a login or logout transition."""
        store = self._store
        if store is None:
            return self._not_ready("auth event")

        if isinstance(event, LoggedIn):
            _logger.info(
                "Handling login: user_id=%s local_items=%s",
                event.user.id,
                store.count,
            )
            if store.count > 0:
                self._set_prompt(PromptKind.UPLOAD_LOCAL_DATA)
                return SyncResult.ok()
            self._set_prompt(None)
            return await self._fetch_cloud_data(store)

        if isinstance(event, LoggedOut):
            _logger.info(
                "Handling logout: user_id=%s local_items=%s",
                event.user.id,
                store.count,
            )
            self._set_prompt(PromptKind.DELETE_LOCAL_DATA if store.count > 0 else None)
            return SyncResult.ok()

        return SyncResult.failed(ProgrammingError(f"Unknown auth event: {event!r}"))

    async def confirm_pending_prompt(self) -> SyncResult:
        """Carry out the action the pending prompt asked about."""
        store = self._store
        if store is None:
            return self._not_ready("confirm prompt")
        prompt = self._pending_prompt
        if prompt is None:
            _logger.warning("Confirm requested with no pending prompt")
            return SyncResult.failed(ProgrammingError("No prompt is pending"))
        if self._is_syncing:
            _logger.info("Confirm of %s rejected: sync in progress", prompt)
            return SyncResult.failed(SyncInProgress())

        self._set_prompt(None)
        if prompt is PromptKind.DELETE_LOCAL_DATA:
            removed = store.count
            await store.clear()
            _logger.info("Cleared %s local items after logout", removed)
            return SyncResult.ok(removed)
        return await self._sync_on_login(store)

    def cancel_pending_prompt(self) -> None:
        """Discard the pending prompt without acting on it."""
        if self._pending_prompt is not None:
            _logger.info("Prompt %s cancelled", self._pending_prompt)
        self._set_prompt(None)

    async def request_manual_sync(self) -> SyncResult:
        """Push the local snapshot and delete remote records removed locally."""
        store = self._store
        if store is None:
            return self._not_ready("manual sync")
        if not self._begin_sync("manual sync"):
            return SyncResult.failed(SyncInProgress())
        try:
            await self.remote.upload(store.records)
            deleted = await self.remote.sync_deletions(store.identifiers())
        except SyncError as exc:
            _logger.warning("Manual sync failed: %s", exc)
            return SyncResult.failed(exc)
        finally:
            self._end_sync()
        return SyncResult.ok(deleted)

    async def delete_remote_data(self) -> SyncResult:
        """Wipe the signed-in user's remote records; local data is kept."""
        if self._store is None:
            return self._not_ready("remote wipe")
        if not self._begin_sync("remote wipe"):
            return SyncResult.failed(SyncInProgress())
        try:
            removed = await self.remote.delete_all()
        except SyncError as exc:
            _logger.warning("Remote wipe failed: %s", exc)
            return SyncResult.failed(exc)
        finally:
            self._end_sync()
        return SyncResult.ok(removed)

    async def wait_for_pushes(self) -> None:
        """Wait for outstanding per-change uploads and deletes."""
        await self._pushes.drain()

    async def _fetch_cloud_data(self, store: InventoryStore) -> SyncResult:
        if not self._begin_sync("login fetch"):
            return SyncResult.failed(SyncInProgress())
        try:
            remote = await self.remote.fetch()
            merged = merge_records(store.records, [item.record for item in remote])
            await store.replace_all(merged)
        except SyncError as exc:
            _logger.warning("Fetching cloud data failed: %s", exc)
            return SyncResult.failed(exc)
        finally:
            self._end_sync()
        return SyncResult.ok(len(remote))

    async def _sync_on_login(self, store: InventoryStore) -> SyncResult:
        # Upload only; remote records absent locally belong to other devices.
        if not self._begin_sync("login sync"):
            return SyncResult.failed(SyncInProgress())
        try:
            remote = await self.remote.fetch()
            merged = merge_records(store.records, [item.record for item in remote])
            await store.replace_all(merged)
            await self.remote.upload(merged)
        except SyncError as exc:
            _logger.warning("Login sync failed: %s", exc)
            return SyncResult.failed(exc)
        finally:
            self._end_sync()
        return SyncResult.ok(len(merged))

    def _on_store_change(self, change: StoreChange) -> None:
        record = change.record
        if record is None or not self.auth.is_authenticated:
            return
        if self._is_syncing:
            # The running workflow works from an older snapshot.
            self._changed_while_syncing.add(record.id)
            return
        if change.kind in {ChangeKind.ADDED, ChangeKind.UPDATED}:
            self._pushes.spawn(self.remote.upload([record]), "push upload")
        elif change.kind is ChangeKind.REMOVED:
            self._pushes.spawn(self.remote.delete(record.id), "push delete")

    def _begin_sync(self, action: str) -> bool:
        if self._is_syncing:
            _logger.info("%s rejected: sync in progress", action)
            return False
        self._is_syncing = True
        self._publish()
        return True

    def _end_sync(self) -> None:
        self._is_syncing = False
        self._replay_changes()
        self._publish()

    def _replay_changes(self) -> None:
        """Push records touched while a sync was running."""
        changed, self._changed_while_syncing = self._changed_while_syncing, set()
        store = self._store
        if not changed or store is None or not self.auth.is_authenticated:
            return
        present = [record for record in store.records if record.id in changed]
        if present:
            self._pushes.spawn(self.remote.upload(present), "replay upload")
        for record_id in changed - {record.id for record in present}:
            self._pushes.spawn(self.remote.delete(record_id), "replay delete")
        _logger.info("Replaying %s changes made during sync", len(changed))

    def _set_prompt(self, prompt: PromptKind | None) -> None:
        if prompt == self._pending_prompt:
            return
        self._pending_prompt = prompt
        self._publish()

    def _publish(self) -> None:
        self.changes.emit(self.status)

    @staticmethod
    def _not_ready(action: str) -> SyncResult:
        _logger.error("Coordinator used before a store was injected: %s", action)
        return SyncResult.failed(ProgrammingError("No store has been injected"))
