"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import timedelta
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, Response, status

from pantry_sync.api.models import (
    ItemPayload,
    ItemResponse,
    LoginPayload,
    SyncResultResponse,
    SyncStatusResponse,
)
from pantry_sync.app_logging import configure_logging
from pantry_sync.containers import AppContainer
from pantry_sync.domain.auth import AuthUser
from pantry_sync.domain.errors import SyncInProgress, Unauthenticated
from pantry_sync.domain.inventory import Category, InventoryRecord, Tag
from pantry_sync.domain.sync import SyncResult


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await app.state.container.store.load()
        logger.info("Inventory loaded: %s items", app.state.container.store.count)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/items")
    async def list_items(
        request: Request, category: Category | None = None, tag: Tag | None = None
    ) -> list[ItemResponse]:
        """List items soonest-expiring first, optionally filtered."""
        store = _container(request).store
        items = store.sorted_by_expiration()
        if category is not None:
            items = [item for item in items if item.category == category]
        if tag is not None:
            items = [item for item in items if tag in item.tags]
        return [ItemResponse.from_record(item) for item in items]

    @app.get("/items/expiring")
    async def expiring_items(request: Request, days: int = 3) -> list[ItemResponse]:
        """List unexpired items expiring within the given number of days."""
        store = _container(request).store
        items = store.expiring_within(timedelta(days=max(days, 0)))
        return [ItemResponse.from_record(item) for item in items]

    @app.get("/items/expired")
    async def expired_items(request: Request) -> list[ItemResponse]:
        """List expired items."""
        store = _container(request).store
        return [ItemResponse.from_record(item) for item in store.expired()]

    @app.post("/items", status_code=status.HTTP_201_CREATED)
    async def create_item(payload: ItemPayload, request: Request) -> ItemResponse:
        """Add a new item to the local inventory."""
        record = InventoryRecord.create(
            name=payload.name,
            category=payload.category,
            expiration_date=payload.expiration_date,
            tags=payload.tags,
            notes=payload.notes,
        )
        await _container(request).store.add(record)
        return ItemResponse.from_record(record)

    @app.put("/items/{item_id}")
    async def update_item(
        item_id: UUID, payload: ItemPayload, request: Request
    ) -> ItemResponse:
        """Replace the editable fields of an item."""
        store = _container(request).store
        existing = store.get(item_id)
        if existing is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        updated = replace(
            existing,
            name=payload.name,
            category=payload.category,
            expiration_date=payload.expiration_date,
            tags=tuple(dict.fromkeys(payload.tags)),
            notes=payload.notes,
        )
        await store.update(updated)
        return ItemResponse.from_record(updated)

    @app.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_item(item_id: UUID, request: Request) -> Response:
        """Remove an item; unknown ids are ignored."""
        await _container(request).store.remove(item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/auth/login")
    async def login(payload: LoginPayload, request: Request) -> SyncStatusResponse:
        """Record a sign-in and let the coordinator react to it."""
        state_container = _container(request)
        await state_container.auth_service.sign_in(
            AuthUser(
                id=payload.user_id,
                email=payload.email,
                display_name=payload.display_name,
            )
        )
        return SyncStatusResponse.from_status(state_container.sync_coordinator.status)

    @app.post("/auth/logout")
    async def logout(request: Request) -> SyncStatusResponse:
        """Record a sign-out and let the coordinator react to it."""
        state_container = _container(request)
        await state_container.auth_service.sign_out()
        return SyncStatusResponse.from_status(state_container.sync_coordinator.status)

    @app.get("/sync/status")
    async def sync_status(request: Request) -> SyncStatusResponse:
        """Return the coordinator state."""
        coordinator = _container(request).sync_coordinator
        return SyncStatusResponse.from_status(coordinator.status)

    @app.post("/sync/prompt/confirm")
    async def confirm_prompt(
        request: Request, response: Response
    ) -> SyncResultResponse:
        """Confirm the pending upload or delete prompt."""
        coordinator = _container(request).sync_coordinator
        result = await coordinator.confirm_pending_prompt()
        return _result_response(result, response)

    @app.post("/sync/prompt/cancel")
    async def cancel_prompt(request: Request) -> SyncStatusResponse:
        """Dismiss the pending prompt."""
        coordinator = _container(request).sync_coordinator
        coordinator.cancel_pending_prompt()
        return SyncStatusResponse.from_status(coordinator.status)

    @app.post("/sync/manual")
    async def manual_sync(request: Request, response: Response) -> SyncResultResponse:
        """Upload local data and propagate local deletions."""
        coordinator = _container(request).sync_coordinator
        result = await coordinator.request_manual_sync()
        if not result.success:
            logger.warning("Manual sync did not complete: %s", result.error)
        return _result_response(result, response)

    @app.delete("/sync/remote")
    async def wipe_remote(request: Request, response: Response) -> SyncResultResponse:
        """Delete every remote record for the signed-in user."""
        coordinator = _container(request).sync_coordinator
        result = await coordinator.delete_remote_data()
        return _result_response(result, response)

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _result_response(result: SyncResult, response: Response) -> SyncResultResponse:
    """Map a sync result to a body, using 409/401 for rejections."""
    if isinstance(result.error, SyncInProgress):
        response.status_code = status.HTTP_409_CONFLICT
    elif isinstance(result.error, Unauthenticated):
        response.status_code = status.HTTP_401_UNAUTHORIZED
    return SyncResultResponse.from_result(result)
