"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from pantry_sync.adapters.json_file_persistence import JsonFilePersistence
from pantry_sync.adapters.reminder_client import HttpxReminderClient
from pantry_sync.adapters.supabase_inventory_repository import (
    SupabaseInventoryRepository,
)
from pantry_sync.config import Settings
from pantry_sync.services.auth import AuthService
from pantry_sync.services.coordinator import SyncCoordinator
from pantry_sync.services.reminders import InMemoryReminderScheduler, ReminderScheduler
from pantry_sync.services.remote import RemoteStoreClient
from pantry_sync.services.store import InventoryStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: InventoryStore
    auth_service: AuthService
    remote_client: RemoteStoreClient
    sync_coordinator: SyncCoordinator
    reminders: ReminderScheduler
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    repository = SupabaseInventoryRepository(
        supabase_client,
        table_name=resolved_settings.inventory_table,
        sync_state_table=resolved_settings.sync_state_table,
    )
    reminder_client: HttpxReminderClient | None = None
    reminders: ReminderScheduler
    if resolved_settings.reminder_service_url:
        reminder_client = HttpxReminderClient.create(
            base_url=resolved_settings.reminder_service_url,
            token=resolved_settings.reminder_service_token,
            lead_days=resolved_settings.reminder_lead_days,
        )
        reminders = reminder_client
    else:
        reminders = InMemoryReminderScheduler(
            lead_days=resolved_settings.reminder_lead_days
        )
    store = InventoryStore(
        persistence=JsonFilePersistence(resolved_settings.local_store_path),
        reminders=reminders,
        seed_on_first_run=resolved_settings.seed_on_first_run,
    )
    auth_service = AuthService()
    remote_client = RemoteStoreClient(repository=repository, auth=auth_service)
    coordinator = SyncCoordinator(auth=auth_service, remote=remote_client)
    coordinator.inject_store(store)

    async def close_resources() -> None:
        await coordinator.wait_for_pushes()
        await store.wait_for_side_effects()
        if reminder_client is not None:
            await reminder_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        auth_service=auth_service,
        remote_client=remote_client,
        sync_coordinator=coordinator,
        reminders=reminders,
        close_resources=close_resources,
    )
