"""Tests for the HTTP API."""

from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient

from pantry_sync.api.app import create_app
from pantry_sync.domain.auth import AuthUser
from tests.conftest import InMemoryPersistence, InMemoryRemoteRepository, make_record


def _item(name: str, days: float, **extra: object) -> dict[str, object]:
    expires = datetime.now(tz=UTC) + timedelta(days=days)
    return {
        "name": name,
        "category": "dairy",
        "expiration_date": expires.isoformat(),
        **extra,
    }


def test_health(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.get("/health")

    assert response.json() == {"status": "ok"}


def test_item_lifecycle(container, persistence: InMemoryPersistence) -> None:
    with TestClient(create_app(container)) as client:
        created = client.post(
            "/items", json=_item("Milk", 2.5, tags=["refrigerated", "refrigerated"])
        )
        item_id = created.json()["id"]
        updated = client.put(
            f"/items/{item_id}", json=_item("Oat milk", 10, notes="barista")
        )
        listed = client.get("/items")
        deleted = client.delete(f"/items/{item_id}")
        deleted_again = client.delete(f"/items/{item_id}")

    assert created.status_code == 201
    assert created.json()["tags"] == ["refrigerated"]
    assert created.json()["is_expiring_soon"] is True
    assert updated.json()["name"] == "Oat milk"
    assert updated.json()["id"] == item_id
    assert [item["name"] for item in listed.json()] == ["Oat milk"]
    assert deleted.status_code == 204
    assert deleted_again.status_code == 204
    assert persistence.records == []


def test_update_unknown_item_returns_404(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.put(
            "/items/00000000-0000-0000-0000-000000000000", json=_item("Milk", 1)
        )

    assert response.status_code == 404


def test_invalid_item_is_rejected(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/items", json=_item("", 1, category="spices"))

    assert response.status_code == 422


def test_expiration_views_and_filters(container) -> None:
    with TestClient(create_app(container)) as client:
        client.post("/items", json=_item("Yogurt", 1.5))
        client.post("/items", json=_item("Cream", -2))
        client.post("/items", json=_item("Rice", 40, category="grain"))

        expiring = client.get("/items/expiring", params={"days": 3})
        expired = client.get("/items/expired")
        grains = client.get("/items", params={"category": "grain"})

    assert [item["name"] for item in expiring.json()] == ["Yogurt"]
    assert [item["name"] for item in expired.json()] == ["Cream"]
    assert expired.json()[0]["is_expired"] is True
    assert [item["name"] for item in grains.json()] == ["Rice"]


def test_login_prompt_confirm_flow(
    container,
    persistence: InMemoryPersistence,
    repository: InMemoryRemoteRepository,
    user: AuthUser,
) -> None:
    persistence.records = [make_record("Milk")]
    repository.seed(user.id, [make_record("Bread")])

    with TestClient(create_app(container)) as client:
        login = client.post("/auth/login", json={"user_id": user.id})
        confirm = client.post("/sync/prompt/confirm")
        status = client.get("/sync/status")
        names = [item["name"] for item in client.get("/items").json()]

    assert login.json()["state"] == "prompting"
    assert login.json()["pending_prompt"] == "upload_local_data"
    assert confirm.json() == {
        "success": True,
        "error": None,
        "error_type": None,
        "affected": 2,
    }
    assert status.json()["state"] == "idle"
    assert status.json()["last_synced_at"] is not None
    assert sorted(names) == ["Bread", "Milk"]
    assert repository.names(user.id) == {"Bread", "Milk"}


def test_logout_prompt_can_be_cancelled(
    container, persistence: InMemoryPersistence, user: AuthUser
) -> None:
    persistence.records = [make_record("Milk")]

    with TestClient(create_app(container)) as client:
        client.post("/auth/login", json={"user_id": user.id})
        client.post("/sync/prompt/cancel")
        logout = client.post("/auth/logout")
        cancel = client.post("/sync/prompt/cancel")
        remaining = client.get("/items").json()

    assert logout.json()["pending_prompt"] == "delete_local_data"
    assert cancel.json()["state"] == "idle"
    assert len(remaining) == 1


def test_manual_sync_requires_login(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/sync/manual")

    assert response.status_code == 401
    assert response.json()["error_type"] == "Unauthenticated"


def test_confirm_without_prompt_reports_error(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/sync/prompt/confirm")

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["error_type"] == "ProgrammingError"


def test_manual_sync_and_remote_wipe(
    container, repository: InMemoryRemoteRepository, user: AuthUser
) -> None:
    repository.seed(user.id, [make_record("Bread")])

    with TestClient(create_app(container)) as client:
        client.post("/auth/login", json={"user_id": user.id})
        bread_id = client.get("/items").json()[0]["id"]
        client.delete(f"/items/{bread_id}")
        manual = client.post("/sync/manual")
        wipe = client.delete("/sync/remote")

    assert manual.json()["success"] is True
    assert wipe.json()["success"] is True
    assert user.id not in repository.rows


def test_naive_expiration_is_rejected_without_storing(
    container, persistence: InMemoryPersistence
) -> None:
    with TestClient(create_app(container)) as client:
        rejected = client.post(
            "/items",
            json={
                "name": "Milk",
                "category": "dairy",
                "expiration_date": "2030-01-02T00:00:00",
            },
        )
        accepted = client.post("/items", json=_item("Cream", 2))
        listed = client.get("/items")

    assert rejected.status_code == 422
    assert accepted.status_code == 201
    assert [item["name"] for item in listed.json()] == ["Cream"]
    assert persistence.records is not None
    assert len(persistence.records) == 1
