"""Booking negotiation and slot holds over HTTP"""

import pytest

from vetgroom.models import Appointment, Client, Fraccionamiento


@pytest.fixture
def booking_payload(booking_day):
    return {
        "appointment_date": booking_day.isoformat(),
        "appointment_time": "10:00",
        "appointment_types": ["Grooming"],
        "client": {"full_name": "Sofía Ramírez", "phone_number": "+52 81 2222 3333"},
        "pet": {"name": "Luna", "species": "perro", "breed": "Schnauzer", "size": "mediano"},
        "address": {"street_address": "Av. Lázaro Cárdenas 1000", "postal_code": "64610"},
        "collection_type": "dropoff",
        "notes": "Corte de verano",
        "tags": [],
    }


def _url(tenant, path):
    return f"/tenants/{tenant.id}{path}"


# ============================================================================
# BOOKINGS
# ============================================================================


def test_booking_an_open_slot_creates_client_pet_and_appointment(api, db, tenant, booking_payload):
    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 200
    body = response.json()
    appointment = body["appointment"]
    assert appointment["scheduledTime"] == "10:00"
    assert appointment["type"] == "grooming"
    assert appointment["status"] == "scheduled"
    assert appointment["durationMinutes"] == 60
    assert "10:00" in body["userFriendlyMessage"]

    client = db.query(Client).filter(Client.tenant_id == tenant.id).one()
    assert client.phone == "8122223333"
    assert client.postal_code == "64610"
    assert [p.name for p in client.pets] == ["Luna"]


def test_booking_both_types_is_hybrid(api, tenant, booking_payload):
    booking_payload["appointment_types"] = ["Grooming", "Medical"]

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 200
    appointment = response.json()["appointment"]
    assert appointment["type"] == "hybrid"
    assert appointment["durationMinutes"] == 90
    assert sorted(appointment["services"]) == ["Grooming", "Medical"]


def test_booking_uses_service_duration_and_price(api, tenant, booking_payload, grooming_service):
    booking_payload["service_id"] = grooming_service.id

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    appointment = response.json()["appointment"]
    assert appointment["serviceId"] == grooming_service.id
    assert appointment["totalCost"] == 450.0
    assert appointment["services"] == ["Baño y Corte"]


def test_booking_with_missing_fields_returns_field_errors(api, tenant):
    response = api.post(_url(tenant, "/bookings"), json={})

    assert response.status_code == 400
    errors = response.json()["error"]["fieldErrors"]
    for field in (
        "client.full_name",
        "client.contact",
        "pet.name",
        "pet.breed",
        "pet.size",
        "appointment_types",
        "appointment_date",
        "appointment_time",
    ):
        assert field in errors


def test_booking_rejects_bad_phone_and_email(api, tenant, booking_payload):
    booking_payload["client"] = {"full_name": "Sofía", "phone_number": "123", "email": "sofia@"}

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 400
    errors = response.json()["error"]["fieldErrors"]
    assert "client.phone_number" in errors
    assert "client.email" in errors


def test_pickup_grooming_needs_coordinates_and_postal_code(api, tenant, booking_payload):
    booking_payload["collection_type"] = "pickup"
    booking_payload["address"] = {"street_address": "Calle 5"}

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 400
    errors = response.json()["error"]["fieldErrors"]
    assert "pickup_coordinates" in errors
    assert "address.postal_code" in errors


def test_pickup_with_coordinates_stores_them_on_the_client(api, db, tenant, booking_payload):
    booking_payload["collection_type"] = "pickup"
    booking_payload["pickup_coordinates"] = {"latitude": 25.7617, "longitude": -100.2892}

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 200
    assert response.json()["appointment"]["collectionType"] == "pickup"
    client = db.query(Client).filter(Client.tenant_id == tenant.id).one()
    assert client.latitude == 25.7617


def test_booking_a_taken_slot_offers_alternatives(api, tenant, booking_payload, booking_day, make_appointment):
    make_appointment(booking_day, "10:00", 60)

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 202
    body = response.json()
    assert body["userFriendlyMessage"]
    assert body["appOptions"][0] == {"date": booking_day.isoformat(), "time": "11:00"}


def test_existing_client_is_reused_by_phone(api, db, tenant, booking_payload, pet_owner):
    booking_payload["client"] = {"full_name": "Laura G.", "phone_number": "8111111111"}
    booking_payload["pet"] = {"name": "canela", "breed": "Poodle", "size": "chico"}

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 200
    assert response.json()["appointment"]["clientId"] == pet_owner.id
    assert response.json()["appointment"]["petId"] == pet_owner.pets[0].id
    assert db.query(Client).filter(Client.tenant_id == tenant.id).count() == 1


def test_known_pet_is_accepted_when_phone_matches_its_owner(api, tenant, booking_payload, pet_owner):
    booking_payload["client"] = {"full_name": "Laura G.", "phone_number": "8111111111"}
    booking_payload["pet"] = {"id": pet_owner.pets[0].id}

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 200
    assert response.json()["appointment"]["clientId"] == pet_owner.id
    assert response.json()["appointment"]["petId"] == pet_owner.pets[0].id


def test_another_clients_pet_cannot_be_booked(api, db, tenant, booking_payload, pet_owner):
    booking_payload["client"] = {"full_name": "Otro Cliente", "phone_number": "8199998888"}
    booking_payload["pet"] = {"id": pet_owner.pets[0].id}

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 400
    assert "pet.id" in response.json()["error"]["fieldErrors"]
    assert db.query(Appointment).filter(Appointment.tenant_id == tenant.id).count() == 0
    assert db.query(Client).filter(Client.tenant_id == tenant.id).count() == 1


@pytest.mark.parametrize("status", ["completed", "cancelled", "in_progress"])
def test_booking_cannot_start_in_a_later_status(api, tenant, booking_payload, status):
    booking_payload["status"] = status

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 400
    assert "status" in response.json()["error"]["fieldErrors"]


def test_booking_can_be_confirmed_up_front(api, tenant, booking_payload):
    booking_payload["status"] = "Confirmed"

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.json()["appointment"]["status"] == "confirmed"


def test_tags_are_kept_in_notes(api, db, tenant, booking_payload):
    booking_payload["tags"] = ["vip", "nervioso"]

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    appointment = db.get(Appointment, response.json()["appointment"]["id"])
    assert appointment.notes == "Corte de verano\nEtiquetas: vip, nervioso"


def test_new_colonia_typed_on_the_form_is_created(api, db, tenant, booking_payload):
    booking_payload["address"]["colonia_name_if_new"] = "  colinas de san jerónimo "

    response = api.post(_url(tenant, "/bookings"), json=booking_payload)

    assert response.status_code == 200
    colonia = db.query(Fraccionamiento).filter(Fraccionamiento.tenant_id == tenant.id).one()
    assert colonia.name == "Colinas De San Jerónimo"
    assert colonia.postal_code == "64610"


# ============================================================================
# SLOT HOLDS
# ============================================================================


def test_hold_conflicts_for_another_session(api, tenant, booking_day):
    payload = {"date": booking_day.isoformat(), "time": "10:00", "durationMinutes": 60}

    first = api.post(_url(tenant, "/slot-reservations"), json=payload, headers={"X-Session-Id": "s1"})
    assert first.status_code == 201
    body = first.json()
    assert body["timeoutMinutes"] == 5
    assert 0 < body["expiresIn"] <= 300

    second = api.post(_url(tenant, "/slot-reservations"), json=payload, headers={"X-Session-Id": "s2"})
    assert second.status_code == 409


def test_hold_requires_session_header(api, tenant, booking_day):
    response = api.post(
        _url(tenant, "/slot-reservations"), json={"date": booking_day.isoformat(), "time": "10:00"}
    )
    assert response.status_code == 400


def test_hold_on_booked_slot_is_rejected(api, tenant, booking_day, make_appointment):
    make_appointment(booking_day, "10:00", 60)

    response = api.post(
        _url(tenant, "/slot-reservations"),
        json={"date": booking_day.isoformat(), "time": "10:30", "durationMinutes": 30},
        headers={"X-Session-Id": "s1"},
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "Slot is already booked"


def test_a_session_keeps_only_its_latest_hold(api, tenant, booking_day):
    headers = {"X-Session-Id": "s1"}
    api.post(_url(tenant, "/slot-reservations"), json={"date": booking_day.isoformat(), "time": "10:00"}, headers=headers)
    api.post(_url(tenant, "/slot-reservations"), json={"date": booking_day.isoformat(), "time": "12:00"}, headers=headers)

    holds = api.get(_url(tenant, "/slot-reservations"), params={"date": booking_day.isoformat()}).json()

    assert [h["time"] for h in holds] == ["12:00"]


def test_only_the_owning_session_can_release(api, tenant, booking_day):
    created = api.post(
        _url(tenant, "/slot-reservations"),
        json={"date": booking_day.isoformat(), "time": "10:00"},
        headers={"X-Session-Id": "s1"},
    ).json()
    url = _url(tenant, f"/slot-reservations/{created['reservationId']}")

    assert api.delete(url, headers={"X-Session-Id": "s2"}).status_code == 403
    assert api.delete(url, headers={"X-Session-Id": "s1"}).status_code == 200


def test_booking_releases_the_callers_hold(api, tenant, booking_day, booking_payload):
    headers = {"X-Session-Id": "s1"}
    api.post(
        _url(tenant, "/slot-reservations"),
        json={"date": booking_day.isoformat(), "time": "10:00", "durationMinutes": 60},
        headers=headers,
    )

    response = api.post(_url(tenant, "/bookings"), json=booking_payload, headers=headers)

    assert response.status_code == 200
    assert api.get(_url(tenant, "/slot-reservations")).json() == []


def test_other_sessions_hold_makes_booking_negotiate(api, tenant, booking_day, booking_payload):
    api.post(
        _url(tenant, "/slot-reservations"),
        json={"date": booking_day.isoformat(), "time": "10:00", "durationMinutes": 60},
        headers={"X-Session-Id": "s1"},
    )

    response = api.post(_url(tenant, "/bookings"), json=booking_payload, headers={"X-Session-Id": "s2"})

    assert response.status_code == 202


def test_cleanup_endpoint_reports_deleted_count(api, tenant):
    response = api.post(_url(tenant, "/slot-reservations/cleanup"))

    assert response.status_code == 200
    assert response.json() == {"deleted": 0}


# ============================================================================
# AVAILABILITY ENDPOINTS
# ============================================================================


def test_availability_endpoint(api, tenant, booking_day, make_appointment):
    make_appointment(booking_day, "10:00", 60)

    response = api.get(
        _url(tenant, "/availability"),
        params={"date": booking_day.isoformat(), "time": "10:00", "type": "grooming"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["available"] is False
    assert body["reason"] == "booked"
    assert len(body["alternativeSlots"]) == 3


def test_availability_rejects_malformed_date(api, tenant):
    response = api.get(_url(tenant, "/availability"), params={"date": "mañana", "time": "10:00"})
    assert response.status_code == 400


def test_available_slots_endpoint(api, tenant, booking_day):
    response = api.get(
        _url(tenant, "/available-slots"), params={"date": booking_day.isoformat(), "type": "medical"}
    )

    body = response.json()
    assert body["slotIntervalMinutes"] == 15
    assert body["slots"][0] == {"time": "09:00", "available": True}
    assert body["slots"][-1]["time"] == "16:30"


def test_business_hours_update_replaces_all_days(api, tenant):
    days = [
        {"dayOfWeek": d, "openTime": "10:00", "closeTime": "18:00", "isClosed": d == 6}
        for d in range(7)
    ]

    response = api.put(_url(tenant, "/business-hours"), json={"days": days})

    assert response.status_code == 200
    assert api.get(_url(tenant, "/business-hours")).json()[0]["openTime"] == "10:00"


def test_business_hours_need_every_day(api, tenant):
    response = api.put(
        _url(tenant, "/business-hours"),
        json={"days": [{"dayOfWeek": 0, "openTime": "10:00", "closeTime": "18:00"}]},
    )
    assert response.status_code == 422


def test_appointment_type_overrides_change_the_slot_grid(api, tenant, booking_day):
    response = api.put(
        _url(tenant, "/appointment-types"),
        json=[{"appointmentType": "Grooming", "defaultDurationMinutes": 45, "slotIntervalMinutes": 15}],
    )

    assert response.status_code == 200
    assert response.json()["grooming"] == {"defaultDurationMinutes": 45, "slotIntervalMinutes": 15}
    assert response.json()["medical"]["slotIntervalMinutes"] == 15

    slots = api.get(
        _url(tenant, "/available-slots"), params={"date": booking_day.isoformat(), "type": "grooming"}
    ).json()
    assert slots["slotIntervalMinutes"] == 15
