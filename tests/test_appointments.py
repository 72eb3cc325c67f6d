"""Staff-side appointments and rescheduling"""

from datetime import timedelta


def _url(tenant, path=""):
    return f"/tenants/{tenant.id}/appointments{path}"


def test_direct_create_skips_availability(api, tenant, booking_day, make_appointment):
    make_appointment(booking_day, "10:00", 60)

    response = api.post(
        _url(tenant),
        json={
            "clientName": "Jorge Villarreal",
            "clientPhone": "8133334444",
            "petName": "Toby",
            "type": "Medical",
            "scheduledDate": booking_day.isoformat(),
            "scheduledTime": "10:00",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["type"] == "medical"
    assert body["durationMinutes"] == 30
    assert body["clientName"] == "Jorge Villarreal"


def test_list_is_ordered_and_filtered_by_range(api, tenant, booking_day, make_appointment):
    later = make_appointment(booking_day, "15:00", 30)
    earlier = make_appointment(booking_day, "09:00", 30)
    make_appointment(booking_day + timedelta(days=10), "09:00", 30)

    response = api.get(
        _url(tenant),
        params={"start_date": booking_day.isoformat(), "end_date": booking_day.isoformat()},
    )

    assert [a["id"] for a in response.json()] == [earlier.id, later.id]


def test_inverted_range_is_rejected(api, tenant, booking_day):
    response = api.get(
        _url(tenant),
        params={
            "start_date": booking_day.isoformat(),
            "end_date": (booking_day - timedelta(days=1)).isoformat(),
        },
    )
    assert response.status_code == 400


def test_status_update_only_accepts_known_statuses(api, tenant, booking_day, make_appointment):
    appointment = make_appointment(booking_day, "10:00", 60)

    ok = api.patch(_url(tenant, f"/{appointment.id}"), json={"status": "confirmed"})
    bad = api.patch(_url(tenant, f"/{appointment.id}"), json={"status": "lost"})

    assert ok.status_code == 200
    assert ok.json()["status"] == "confirmed"
    assert bad.status_code == 422


def test_reschedule_to_free_slot(api, tenant, booking_day, make_appointment):
    appointment = make_appointment(booking_day, "10:00", 60)

    response = api.put(
        _url(tenant, f"/{appointment.id}/reschedule"),
        json={"scheduledDate": booking_day.isoformat(), "scheduledTime": "10:30", "reason": "Cliente llega tarde"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["appointment"]["status"] == "rescheduled"
    assert body["appointment"]["notes"] == "Reprogramada: Cliente llega tarde"
    assert body["oldDate"] == f"{booking_day.isoformat()} 10:00"
    assert body["newDate"] == f"{booking_day.isoformat()} 10:30"


def test_reschedule_without_reason(api, tenant, booking_day, make_appointment):
    appointment = make_appointment(booking_day, "10:00", 60)

    response = api.put(
        _url(tenant, f"/{appointment.id}/reschedule"),
        json={"scheduledDate": booking_day.isoformat(), "scheduledTime": "14:00"},
    )

    assert response.json()["appointment"]["notes"] == "Reprogramada: Sin motivo especificado"


def test_reschedule_into_taken_slot_returns_alternatives(api, tenant, booking_day, make_appointment):
    make_appointment(booking_day, "12:00", 60)
    moving = make_appointment(booking_day, "09:00", 60)

    response = api.put(
        _url(tenant, f"/{moving.id}/reschedule"),
        json={"scheduledDate": booking_day.isoformat(), "scheduledTime": "12:00"},
    )

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["reason"] == "booked"
    assert detail["alternativeSlots"][0]["time"] == "13:00"


def test_completed_appointments_cannot_be_rescheduled(api, tenant, booking_day, make_appointment):
    appointment = make_appointment(booking_day, "10:00", 60, status="completed")

    response = api.put(
        _url(tenant, f"/{appointment.id}/reschedule"),
        json={"scheduledDate": booking_day.isoformat(), "scheduledTime": "11:00"},
    )

    assert response.status_code == 400


def test_delete_and_missing_appointment(api, tenant, booking_day, make_appointment):
    appointment = make_appointment(booking_day, "10:00", 60)

    assert api.delete(_url(tenant, f"/{appointment.id}")).status_code == 200
    assert api.get(_url(tenant, f"/{appointment.id}")).status_code == 404
