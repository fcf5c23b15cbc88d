"""Integration tests for the rider endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from logistics.api.routes import delivery_router, rider_router
from protean.integrations.fastapi import register_exception_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(delivery_router)
    app.include_router(rider_router)
    register_exception_handlers(app)
    return TestClient(app)


def _register(client, name="Rahim", district="Dhaka", verify=True, **extra):
    payload = {"user_id": f"user-{name.lower()}", "display_name": name, "division": "Dhaka", "district": district}
    payload.update(extra)
    response = client.post("/riders", json=payload)
    assert response.status_code == 201
    rider_id = response.json()["rider_id"]
    if verify:
        client.put(f"/riders/{rider_id}/verify")
    return rider_id


def _deliver(client, customer_id="cust-rider-api"):
    delivery_id = client.post(
        "/deliveries",
        json={
            "customer_id": customer_id,
            "pickup": {"division": "Dhaka", "district": "Dhaka"},
            "delivery_address": {"division": "Dhaka", "district": "Dhaka"},
            "product": {"product_type": "non-document", "weight_kg": 2},
        },
    ).json()["delivery_id"]
    client.put(f"/deliveries/{delivery_id}/match")
    for status in ["PAID", "READY_TO_PICKUP", "IN_TRANSIT", "READY_FOR_DELIVERY", "DELIVERED"]:
        client.put(f"/deliveries/{delivery_id}/status", json={"status": status})
    return delivery_id


class TestRegisterRiderAPI:
    def test_register_returns_201(self, client):
        rider_id = _register(client, verify=False, vehicle_type="bicycle", phone="+8801711000000")
        body = client.get(f"/riders/{rider_id}").json()
        assert body["is_verified"] is False
        assert body["is_available"] is True
        assert body["rating"] == 5.0
        assert body["district"] == "Dhaka"

    def test_register_rejects_unknown_vehicle(self, client):
        response = client.post(
            "/riders",
            json={
                "user_id": "user-x",
                "display_name": "X",
                "division": "Dhaka",
                "district": "Dhaka",
                "vehicle_type": "rocket",
            },
        )
        assert response.status_code == 400

    def test_verify(self, client):
        rider_id = _register(client, verify=False)
        response = client.put(f"/riders/{rider_id}/verify")
        assert response.status_code == 200
        assert response.json()["is_verified"] is True


class TestCandidatesAPI:
    def test_candidates_exclude_unverified_and_other_districts(self, client):
        local = _register(client, "Local")
        _register(client, "Pending", verify=False)
        _register(client, "Remote", district="Gazipur")

        response = client.get("/riders/candidates", params={"division": "Dhaka", "district": "Dhaka"})

        assert response.status_code == 200
        assert [r["rider_id"] for r in response.json()] == [local]

    def test_candidates_match_location_exactly(self, client):
        _register(client, "Lower", district="dhaka")
        response = client.get("/riders/candidates", params={"division": "Dhaka", "district": "Dhaka"})
        assert response.json() == []

    def test_candidates_require_district(self, client):
        response = client.get("/riders/candidates", params={"division": "Dhaka", "district": ""})
        assert response.status_code == 400


class TestRiderLedgerAPI:
    def test_earnings_and_deliveries(self, client):
        rider_id = _register(client)
        first = _deliver(client)
        second = _deliver(client)

        earnings = client.get(f"/riders/{rider_id}/earnings").json()
        assert earnings["total"] == 176.0
        assert earnings["deliveries"] == 2
        assert earnings["average"] == 88.0

        deliveries = client.get(f"/riders/{rider_id}/deliveries").json()
        assert {d["delivery_id"] for d in deliveries} == {first, second}
        assert all(d["status"] == "DELIVERED" for d in deliveries)

    def test_release_idle_rider_is_noop(self, client):
        rider_id = _register(client)
        response = client.put(f"/riders/{rider_id}/release")
        assert response.status_code == 200
        assert response.json()["is_available"] is True

    def test_top_riders_by_rating(self, client):
        low = _register(client, "Low")
        delivery_id = _deliver(client, customer_id="cust-low")
        client.post(f"/deliveries/{delivery_id}/ratings", json={"customer_id": "cust-low", "rating": 2})
        high = _register(client, "High")

        response = client.get("/riders/top", params={"limit": 2})

        assert [r["rider_id"] for r in response.json()] == [high, low]
