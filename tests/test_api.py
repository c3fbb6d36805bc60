"""End-to-end through the HTTP layer; real clock, so dates are relative to today."""
from datetime import date, timedelta
import uuid

import pytest

DAY = date.today() + timedelta(days=7)


@pytest.fixture
def setup(client):
    owner = client.post("/api/v1/owners", json={"email": "owner@example.com", "name": "Olga"}).json()
    business = client.post("/api/v1/businesses", json={
        "owner_id": owner["id"],
        "name": "Barber X",
        "location": {"place_id": "place-x", "address": "1 Main St", "latitude": 41.0, "longitude": 29.0},
        "timezone": "UTC",
    }).json()
    rule = client.post(f"/api/v1/businesses/{business['id']}/availability-rules", json={
        "availability_type": "RECURRING_WEEKLY",
        "day_of_week": DAY.weekday(),
        "start_time": "09:00",
        "end_time": "17:00",
    })
    assert rule.status_code == 201, rule.text
    alice = client.post("/api/v1/users", json={"email": "alice@example.com", "name": "Alice"}).json()
    bob = client.post("/api/v1/users", json={"email": "bob@example.com", "name": "Bob"}).json()
    return {"owner": owner, "business": business, "rule": rule.json(), "alice": alice, "bob": bob}


def booking(setup, user_key, start="10:00", end="10:30"):
    return {
        "user_id": setup[user_key]["id"],
        "business_id": setup["business"]["id"],
        "reservation_date": DAY.isoformat(),
        "start_time": start,
        "end_time": end,
    }


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
    detailed = client.get("/health/detailed").json()
    assert detailed["database"] == "healthy"
    assert detailed["overall"] == "healthy"


def test_correlation_id_is_echoed(client):
    response = client.get("/health", headers={"X-Correlation-ID": "abc-123"})

    assert response.headers["X-Correlation-ID"] == "abc-123"


def test_business_payload(client, setup):
    business = setup["business"]

    assert business["location"]["place_id"] == "place-x"
    assert business["timezone"] == "UTC"
    settings = client.get(f"/api/v1/businesses/{business['id']}/settings").json()
    assert settings["slot_duration_minutes"] == 30

    by_place = client.get("/api/v1/businesses/by-place/place-x")
    assert by_place.json()["id"] == business["id"]


def test_availability_endpoint(client, setup):
    business_id = setup["business"]["id"]

    response = client.get(f"/api/v1/businesses/{business_id}/availability", params={"date": DAY.isoformat()})

    assert response.status_code == 200
    slots = response.json()["slots"]
    assert len(slots) == 16
    assert slots[0] == {"start": "09:00:00", "end": "09:30:00"}


def test_book_conflict_cancel_rebook(client, setup):
    first = client.post("/api/v1/reservations", json=booking(setup, "alice"))
    assert first.status_code == 201, first.text
    assert first.json()["status"] == "PENDING"

    conflict = client.post("/api/v1/reservations", json=booking(setup, "bob"))
    assert conflict.status_code == 409
    assert conflict.json()["error_code"] == "RESERVATION_CONFLICT"

    board = client.get(
        f"/api/v1/businesses/{setup['business']['id']}/slots", params={"date": DAY.isoformat()}
    ).json()
    assert board["booked_count"] == 1
    assert board["available_count"] == 15

    reservation_id = first.json()["id"]
    cancelled = client.post(f"/api/v1/reservations/{reservation_id}/cancel", json={"reason": "busy"})
    assert cancelled.json()["status"] == "CANCELLED"
    assert cancelled.json()["cancellation_reason"] == "busy"
    again = client.post(f"/api/v1/reservations/{reservation_id}/cancel")
    assert again.status_code == 200

    rebooked = client.post("/api/v1/reservations", json=booking(setup, "bob"))
    assert rebooked.status_code == 201


def test_book_by_start_time_only(client, setup):
    payload = booking(setup, "alice", start="14:00")
    del payload["end_time"]

    response = client.post("/api/v1/reservations", json=payload)

    assert response.status_code == 201
    assert response.json()["end_time"] == "14:30:00"


def test_error_mapping(client, setup):
    outside = client.post("/api/v1/reservations", json=booking(setup, "alice", "18:00", "18:30"))
    assert outside.status_code == 422
    assert outside.json()["error_code"] == "OUTSIDE_AVAILABILITY"

    missing_user = dict(booking(setup, "alice"), user_id=str(uuid.uuid4()))
    response = client.post("/api/v1/reservations", json=missing_user)
    assert response.status_code == 404
    assert response.json()["error_code"] == "USER_NOT_FOUND"

    duplicate = client.post("/api/v1/users", json={"email": "alice@example.com", "name": "Alice"})
    assert duplicate.status_code == 409
    assert duplicate.json()["error_code"] == "DUPLICATE_KEY"

    bad_rule = client.post(f"/api/v1/businesses/{setup['business']['id']}/availability-rules", json={
        "availability_type": "DATE_RANGE",
        "start_date": "2030-02-01",
        "end_date": "2030-01-01",
        "start_time": "09:00",
        "end_time": "10:00",
    })
    assert bad_rule.status_code == 422
    assert bad_rule.json()["error_code"] == "INVALID_AVAILABILITY_RULE"


def test_ambiguous_rules_surface_as_server_error(client, setup):
    business_id = setup["business"]["id"]
    client.post(f"/api/v1/businesses/{business_id}/availability-rules", json={
        "availability_type": "RECURRING_WEEKLY",
        "day_of_week": DAY.weekday(),
        "start_time": "12:00",
        "end_time": "20:00",
    })

    response = client.get(f"/api/v1/businesses/{business_id}/availability", params={"date": DAY.isoformat()})

    assert response.status_code == 500
    assert response.json()["error_code"] == "AMBIGUOUS_AVAILABILITY"


def test_lifecycle_and_listing(client, setup):
    created = client.post("/api/v1/reservations", json=booking(setup, "alice")).json()

    confirmed = client.post(f"/api/v1/reservations/{created['id']}/confirm").json()
    assert confirmed["is_confirmed"] is True
    completed = client.post(f"/api/v1/reservations/{created['id']}/complete").json()
    assert completed["status"] == "COMPLETED"

    refused = client.post(f"/api/v1/reservations/{created['id']}/cancel")
    assert refused.status_code == 409
    assert refused.json()["error_code"] == "INVALID_STATUS_TRANSITION"

    listed = client.get("/api/v1/reservations", params={"user_id": setup["alice"]["id"], "status": "COMPLETED"})
    assert [r["id"] for r in listed.json()] == [created["id"]]


def test_rule_supersede_and_deactivate(client, setup):
    business_id = setup["business"]["id"]
    rule_id = setup["rule"]["id"]

    replaced = client.put(f"/api/v1/businesses/{business_id}/availability-rules/{rule_id}", json={
        "availability_type": "RECURRING_WEEKLY",
        "day_of_week": DAY.weekday(),
        "start_time": "10:00",
        "end_time": "11:00",
    })
    assert replaced.status_code == 200
    new_id = replaced.json()["id"]

    old = client.get(f"/api/v1/businesses/{business_id}/availability-rules/{rule_id}").json()
    assert old["is_active"] is False
    assert old["superseded_by_id"] == new_id

    client.delete(f"/api/v1/businesses/{business_id}/availability-rules/{new_id}")
    slots = client.get(f"/api/v1/businesses/{business_id}/availability", params={"date": DAY.isoformat()})
    assert slots.json()["slots"] == []


def test_settings_update_and_range(client, setup):
    business_id = setup["business"]["id"]

    updated = client.put(f"/api/v1/businesses/{business_id}/settings", json={"slot_duration_minutes": 60})
    assert updated.json()["slot_duration_minutes"] == 60

    response = client.get(
        f"/api/v1/businesses/{business_id}/availability/range",
        params={"start_date": DAY.isoformat(), "end_date": (DAY + timedelta(days=6)).isoformat()},
    )
    days = response.json()["days"]
    assert len(days) == 7
    assert sum(len(day["slots"]) for day in days) == 8

    invalid = client.put(f"/api/v1/businesses/{business_id}/settings", json={"slot_duration_minutes": 0})
    assert invalid.status_code == 422


def test_inverted_range_is_a_validation_error(client, setup):
    response = client.get(
        f"/api/v1/businesses/{setup['business']['id']}/availability/range",
        params={"start_date": DAY.isoformat(), "end_date": (DAY - timedelta(days=1)).isoformat()},
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_slot_length_is_frozen_while_bookings_exist(client, setup):
    business_id = setup["business"]["id"]
    booked = client.post("/api/v1/reservations", json=booking(setup, "alice", "10:30", "11:00"))
    assert booked.status_code == 201

    refused = client.put(f"/api/v1/businesses/{business_id}/settings", json={"slot_duration_minutes": 60})
    assert refused.status_code == 422
    assert refused.json()["error_code"] == "POLICY_VIOLATION"

    # Other settings can still change
    allowed = client.put(f"/api/v1/businesses/{business_id}/settings", json={"auto_confirm": True})
    assert allowed.status_code == 200

    client.post(f"/api/v1/reservations/{booked.json()['id']}/cancel")
    regridded = client.put(f"/api/v1/businesses/{business_id}/settings", json={"slot_duration_minutes": 60})
    assert regridded.json()["slot_duration_minutes"] == 60
