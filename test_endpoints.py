#!/usr/bin/env python3
"""
HTTP surface: status codes and response envelopes for every route.
"""
import uuid

import pytest

MISSING_ID = "00000000-0000-4000-8000-000000000000"


def create_item(client, name="Widget", quantity=10):
    response = client.post("/v1/items", json={"name": name, "initial_quantity": quantity})
    assert response.status_code == 201
    return response.json()["data"]


def reserve(client, item_id, quantity, customer_id="customer_1", **extra):
    body = {"item_id": item_id, "customer_id": customer_id, "quantity": quantity}
    body.update(extra)
    return client.post("/v1/reservations", json=body)


def availability(client, item_id):
    response = client.get(f"/v1/items/{item_id}")
    assert response.status_code == 200
    return response.json()["data"]


# --- Items ---

def test_create_item(client, clock):
    response = client.post("/v1/items", json={"name": "Widget", "initial_quantity": 10})

    assert response.status_code == 201
    data = response.json()["data"]
    assert uuid.UUID(data["id"])
    assert data["name"] == "Widget"
    assert data["total_quantity"] == 10
    assert data["created_at"].startswith("2026-01-15T12:00:00")


@pytest.mark.parametrize("body", [
    {"name": "", "initial_quantity": 10},
    {"name": "Widget", "initial_quantity": 0},
    {"name": "Widget", "initial_quantity": -1},
    {"name": "Widget", "initial_quantity": "10"},
    {"name": "Widget"},
    {"initial_quantity": 10},
])
def test_create_item_validation(client, body):
    response = client.post("/v1/items", json=body)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"]["errors"]


def test_get_item_with_availability(client):
    item = create_item(client, quantity=10)

    data = availability(client, item["id"])

    assert data["id"] == item["id"]
    assert data["total_quantity"] == 10
    assert data["reserved_quantity"] == 0
    assert data["confirmed_quantity"] == 0
    assert data["available_quantity"] == 10


def test_get_unknown_item(client):
    response = client.get(f"/v1/items/{MISSING_ID}")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ITEM_NOT_FOUND"


def test_get_item_with_malformed_id(client):
    response = client.get("/v1/items/not-a-uuid")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


# --- Reservations ---

def test_reservation_scenario(client):
    item = create_item(client, quantity=10)

    response = reserve(client, item["id"], 3)
    assert response.status_code == 201
    reservation = response.json()["data"]
    assert reservation["status"] == "PENDING"
    assert reservation["quantity"] == 3
    assert availability(client, item["id"])["available_quantity"] == 7

    response = client.post(f"/v1/reservations/{reservation['id']}/confirm")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "CONFIRMED"
    assert response.json()["data"]["confirmed_at"] is not None
    data = availability(client, item["id"])
    assert (data["available_quantity"], data["reserved_quantity"], data["confirmed_quantity"]) == (7, 0, 3)

    second = reserve(client, item["id"], 2).json()["data"]
    assert availability(client, item["id"])["available_quantity"] == 5

    response = client.post(f"/v1/reservations/{second['id']}/cancel")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "CANCELLED"
    assert availability(client, item["id"])["available_quantity"] == 7


def test_reservation_custom_expiry(client, clock):
    item = create_item(client)

    data = reserve(client, item["id"], 1, expires_in_seconds=90).json()["data"]

    assert data["expires_at"].startswith("2026-01-15T12:01:30")


def test_reservation_insufficient_quantity(client):
    item = create_item(client, quantity=5)
    reserve(client, item["id"], 4)

    response = reserve(client, item["id"], 2, customer_id="customer_2")

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "INSUFFICIENT_QUANTITY"
    assert error["details"] == {"requested": 2, "available": 1}


def test_reservation_for_unknown_item(client):
    response = reserve(client, MISSING_ID, 1)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ITEM_NOT_FOUND"


@pytest.mark.parametrize("override", [
    {"quantity": 0},
    {"quantity": -2},
    {"quantity": 1.5},
    {"customer_id": ""},
    {"item_id": "not-a-uuid"},
    {"expires_in_seconds": 0},
])
def test_reservation_validation(client, override):
    item = create_item(client)
    body = {"item_id": item["id"], "customer_id": "customer_1", "quantity": 1}
    body.update(override)

    response = client.post("/v1/reservations", json=body)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_reservation_malformed_json(client):
    response = client.post(
        "/v1/reservations", content="{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_get_reservation(client):
    item = create_item(client)
    created = reserve(client, item["id"], 2).json()["data"]

    response = client.get(f"/v1/reservations/{created['id']}")

    assert response.status_code == 200
    assert response.json()["data"] == created


def test_get_unknown_reservation(client):
    response = client.get(f"/v1/reservations/{MISSING_ID}")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RESERVATION_NOT_FOUND"


def test_list_reservations_with_filters(client):
    first = create_item(client, name="First")
    second = create_item(client, name="Second")
    a = reserve(client, first["id"], 1, customer_id="alice").json()["data"]
    reserve(client, first["id"], 1, customer_id="bob")
    reserve(client, second["id"], 1, customer_id="alice")
    client.post(f"/v1/reservations/{a['id']}/confirm")

    by_item = client.get("/v1/reservations", params={"item_id": first["id"]}).json()
    assert by_item["pagination"]["total"] == 2

    by_customer = client.get("/v1/reservations", params={"customer_id": "alice"}).json()
    assert {r["item_id"] for r in by_customer["data"]} == {first["id"], second["id"]}

    confirmed = client.get("/v1/reservations", params={"status": "CONFIRMED"}).json()
    assert [r["id"] for r in confirmed["data"]] == [a["id"]]

    page = client.get("/v1/reservations", params={"limit": 1, "offset": 1}).json()
    assert len(page["data"]) == 1
    assert page["pagination"] == {"limit": 1, "offset": 1, "total": 3}


def test_list_reservations_rejects_bad_status(client):
    response = client.get("/v1/reservations", params={"status": "UNKNOWN"})

    assert response.status_code == 400


# --- Confirm / cancel ---

def test_confirm_is_idempotent(client):
    item = create_item(client, quantity=10)
    reservation = reserve(client, item["id"], 3).json()["data"]

    first = client.post(f"/v1/reservations/{reservation['id']}/confirm")
    second = client.post(f"/v1/reservations/{reservation['id']}/confirm")

    assert first.status_code == second.status_code == 200
    assert first.json()["data"]["confirmed_at"] == second.json()["data"]["confirmed_at"]
    assert availability(client, item["id"])["confirmed_quantity"] == 3


def test_confirm_expired_reservation(client, clock):
    item = create_item(client)
    reservation = reserve(client, item["id"], 1, expires_in_seconds=60).json()["data"]
    clock.advance(minutes=2)

    response = client.post(f"/v1/reservations/{reservation['id']}/confirm")

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "RESERVATION_EXPIRED"
    assert error["details"]["expired_at"].startswith("2026-01-15T12:01:00")


def test_confirm_cancelled_reservation(client):
    item = create_item(client)
    reservation = reserve(client, item["id"], 1).json()["data"]
    client.post(f"/v1/reservations/{reservation['id']}/cancel")

    response = client.post(f"/v1/reservations/{reservation['id']}/confirm")

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "INVALID_STATUS_TRANSITION"
    assert error["details"] == {"current_status": "CANCELLED"}


def test_cancel_confirmed_reservation(client):
    item = create_item(client)
    reservation = reserve(client, item["id"], 1).json()["data"]
    client.post(f"/v1/reservations/{reservation['id']}/confirm")

    response = client.post(f"/v1/reservations/{reservation['id']}/cancel")

    assert response.status_code == 409
    assert response.json()["error"]["details"] == {"current_status": "CONFIRMED"}


def test_cancel_is_idempotent(client):
    item = create_item(client)
    reservation = reserve(client, item["id"], 1).json()["data"]

    first = client.post(f"/v1/reservations/{reservation['id']}/cancel")
    second = client.post(f"/v1/reservations/{reservation['id']}/cancel")

    assert first.status_code == second.status_code == 200
    assert second.json()["data"]["status"] == "CANCELLED"


@pytest.mark.parametrize("action", ["confirm", "cancel"])
def test_transition_unknown_reservation(client, action):
    response = client.post(f"/v1/reservations/{MISSING_ID}/{action}")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RESERVATION_NOT_FOUND"


@pytest.mark.parametrize("action", ["confirm", "cancel"])
def test_transition_malformed_id(client, action):
    response = client.post(f"/v1/reservations/12345/{action}")

    assert response.status_code == 400


# --- Maintenance ---

def test_expire_with_nothing_due(client):
    response = client.post("/v1/maintenance/expire-reservations")

    assert response.status_code == 200
    body = response.json()
    assert body["data"] == {"expired_count": 0, "expired_ids": []}
    assert body["message"] == "Successfully expired 0 reservations"


def test_expire_releases_units(client, clock):
    item = create_item(client, quantity=4)
    reservation = reserve(client, item["id"], 4, expires_in_seconds=60).json()["data"]
    clock.advance(minutes=1)

    response = client.post("/v1/maintenance/expire-reservations")

    assert response.json()["data"] == {"expired_count": 1, "expired_ids": [reservation["id"]]}
    expired = client.get(f"/v1/reservations/{reservation['id']}").json()["data"]
    assert expired["status"] == "EXPIRED"
    assert expired["expired_at"] is not None
    assert availability(client, item["id"])["available_quantity"] == 4

    # Cancelling an already expired hold is a no-op
    response = client.post(f"/v1/reservations/{reservation['id']}/cancel")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "EXPIRED"


# --- Logs ---

def test_operation_logs(client):
    item = create_item(client, quantity=1)
    reserve(client, item["id"], 1)
    reserve(client, item["id"], 1, customer_id="customer_2")

    response = client.get("/v1/logs", params={"item_id": item["id"]})

    assert response.status_code == 200
    body = response.json()
    types = {entry["operation_type"] for entry in body["data"]}
    assert types == {"ITEM_CREATED", "RESERVATION_CREATED", "RESERVATION_REJECTED"}
    assert body["pagination"]["total"] == 3

    warnings = client.get("/v1/logs", params={"status": "WARNING"}).json()
    assert [entry["operation_type"] for entry in warnings["data"]] == ["RESERVATION_REJECTED"]


# --- Service endpoints ---

def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


def test_api_info(client):
    response = client.get("/v1")

    assert response.status_code == 200
    assert response.json()["version"] == "1.0.0"


def test_unknown_route(client):
    response = client.get("/v1/unknown")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_request_id_is_echoed(client):
    response = client.get("/v1", headers={"X-Request-Id": "req-123"})
    assert response.headers["X-Request-Id"] == "req-123"

    generated = client.get("/v1").headers["X-Request-Id"]
    assert uuid.UUID(generated)
