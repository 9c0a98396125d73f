from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app import create_app


def _headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


OWNER = _headers("owner-token")
ALICE = _headers("alice-token")
BOB = _headers("bob-token")


@pytest.fixture
def api(settings, clock):
    app = create_app(settings=settings, clock=clock)
    with TestClient(app) as client:
        yield client, clock


def _init_lot(client: TestClient) -> None:
    response = client.post("/owner", json={"name": "Lot A"}, headers=OWNER)
    assert response.status_code == 201


def _add_slot(client: TestClient, label: str = "A1", price: str | int = "10") -> str:
    response = client.post("/slots", json={"parking_slot": label, "price": price}, headers=OWNER)
    assert response.status_code == 201
    return response.json()["id"]


def test_full_reservation_and_pickup_scenario(api) -> None:
    client, clock = api
    _init_lot(client)
    slot_id = _add_slot(client)

    reserve = client.post(
        "/allocations",
        json={"parking_id": slot_id, "car_model": "Tesla"},
        headers=ALICE,
    )
    assert reserve.status_code == 201
    allocation_id = reserve.json()["allocation_id"]
    assert reserve.json()["message"] == f"Your Parking ID: {allocation_id} your Slot: A1"

    unavailable = client.get("/slots/available")
    assert unavailable.status_code == 404
    assert unavailable.json()["detail"] == "No available parking slots currently"

    clock.advance(1)
    pickup = client.post(f"/allocations/{allocation_id}/pickup", headers=ALICE)
    assert pickup.status_code == 200
    assert pickup.json()["price"] == 10.0
    assert pickup.json()["duration_hours"] == 1.0

    slot = client.get(f"/slots/{slot_id}").json()
    assert slot["is_occupied"] is False
    available = client.get("/slots/available").json()
    assert [item["id"] for item in available] == [slot_id]


def test_second_owner_initialization_conflicts(api) -> None:
    client, _ = api
    _init_lot(client)

    response = client.post("/owner", json={"name": "Lot B"}, headers=BOB)

    assert response.status_code == 409
    assert response.json()["detail"] == "Owner has already been initialized"
    assert client.get("/owner").json()["name"] == "Lot A"


def test_requests_without_bearer_token_are_rejected(api) -> None:
    client, _ = api

    response = client.post("/owner", json={"name": "Lot A"})

    assert response.status_code == 401


def test_slot_mutations_before_owner_exists(api) -> None:
    client, _ = api

    response = client.post("/slots", json={"parking_slot": "A1", "price": "10"}, headers=OWNER)

    assert response.status_code == 409
    assert response.json()["detail"] == "Owner has not been initialized"


def test_owner_only_operations_reject_other_callers(api) -> None:
    client, clock = api
    _init_lot(client)
    slot_id = _add_slot(client)
    reserve = client.post(
        "/allocations",
        json={"parking_id": slot_id, "car_model": "Tesla"},
        headers=BOB,
    )
    clock.advance(1)
    client.post(f"/allocations/{reserve.json()['allocation_id']}/pickup", headers=BOB)

    add = client.post("/slots", json={"parking_slot": "A2", "price": "10"}, headers=BOB)
    update = client.put(f"/slots/{slot_id}", json={"parking_slot": "Z", "price": "1"}, headers=BOB)
    delete = client.delete(f"/slots/{slot_id}", headers=BOB)
    listing = client.get("/slots", headers=BOB)

    assert [add.status_code, update.status_code, delete.status_code, listing.status_code] == [
        403,
        403,
        403,
        403,
    ]
    assert client.get(f"/slots/{slot_id}").json()["parking_slot"] == "A1"


def test_owner_can_update_and_delete_slot(api) -> None:
    client, _ = api
    _init_lot(client)
    slot_id = _add_slot(client)

    update = client.put(
        f"/slots/{slot_id}",
        json={"parking_slot": "B1", "price": 12.5},
        headers=OWNER,
    )
    assert update.status_code == 200
    assert update.json() == {"id": slot_id}
    assert client.get(f"/slots/{slot_id}").json()["price_per_hour"] == 12.5

    delete = client.delete(f"/slots/{slot_id}", headers=OWNER)
    assert delete.status_code == 200
    assert delete.json()["message"] == f"Parking slot of ID: {slot_id} removed successfully"
    assert client.get(f"/slots/{slot_id}").status_code == 404


def test_incomplete_slot_payload_is_a_bad_request(api) -> None:
    client, _ = api
    _init_lot(client)

    response = client.post("/slots", json={"parking_slot": "A1"}, headers=OWNER)

    assert response.status_code == 400
    assert response.json()["detail"] == "Incomplete input data!"


def test_pickup_by_other_client_is_forbidden(api) -> None:
    client, clock = api
    _init_lot(client)
    slot_id = _add_slot(client)
    allocation_id = client.post(
        "/allocations",
        json={"parking_id": slot_id, "car_model": "Tesla"},
        headers=ALICE,
    ).json()["allocation_id"]
    clock.advance(1)

    response = client.post(f"/allocations/{allocation_id}/pickup", headers=BOB)

    assert response.status_code == 403
    assert client.get(f"/slots/{slot_id}").json()["is_occupied"] is True


def test_valet_delivery_adds_surcharge(api) -> None:
    client, clock = api
    _init_lot(client)
    slot_id = _add_slot(client)
    allocation_id = client.post(
        "/allocations",
        json={"parking_id": slot_id, "car_model": "Tesla"},
        headers=ALICE,
    ).json()["allocation_id"]
    clock.advance(2)

    response = client.post(
        "/valet",
        json={"allocation_id": allocation_id, "client_location": "Terminal 2"},
        headers=ALICE,
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["price"] == 25.0
    assert payload["msg"] == "Your car will be delivered to Terminal 2 new total cost: $25.0"

    valet = client.get(f"/valets/{payload['valet_id']}", headers=ALICE)
    assert valet.status_code == 200
    assert valet.json()["allocation"] == allocation_id


def test_repeat_pickup_conflicts(api) -> None:
    client, _ = api
    _init_lot(client)
    slot_id = _add_slot(client)
    allocation_id = client.post(
        "/allocations",
        json={"parking_id": slot_id, "car_model": "Tesla"},
        headers=ALICE,
    ).json()["allocation_id"]

    assert client.post(f"/allocations/{allocation_id}/pickup", headers=ALICE).status_code == 200
    assert client.post(f"/allocations/{allocation_id}/pickup", headers=ALICE).status_code == 409
    assert client.get(f"/allocations/{allocation_id}", headers=ALICE).json()["status"] == "COMPLETED"


def test_health(api) -> None:
    client, _ = api
    assert client.get("/health").json() == {"status": "ok"}


@pytest.mark.parametrize("price", [True, False])
def test_boolean_slot_price_is_rejected(api, price) -> None:
    client, _ = api
    _init_lot(client)

    response = client.post("/slots", json={"parking_slot": "A1", "price": price}, headers=OWNER)

    assert response.status_code == 422
    assert client.get("/slots", headers=OWNER).json() == []


def test_integer_slot_price_is_accepted(api) -> None:
    client, _ = api
    _init_lot(client)

    slot_id = _add_slot(client, price=10)

    assert client.get(f"/slots/{slot_id}").json()["price_per_hour"] == 10.0


def test_overflowing_bill_is_unprocessable(api) -> None:
    client, clock = api
    _init_lot(client)
    slot_id = _add_slot(client, price="1e308")
    allocation_id = client.post(
        "/allocations",
        json={"parking_id": slot_id, "car_model": "Tesla"},
        headers=ALICE,
    ).json()["allocation_id"]
    clock.advance(10)

    response = client.post(f"/allocations/{allocation_id}/pickup", headers=ALICE)

    assert response.status_code == 422
    assert client.get(f"/slots/{slot_id}").json()["is_occupied"] is True
