"""Slot availability: business hours, capacity, holds and alternatives"""

from datetime import timedelta

from vetgroom.domain.scheduling.availability_service import AvailabilityService
from vetgroom.models import BusinessHours, SlotReservation
from vetgroom.shared.timeutils import today_in_timezone, utcnow


def _service(db, tenant):
    return AvailabilityService(db, tenant)


def test_free_slot_is_available(db, tenant, booking_day):
    result = _service(db, tenant).check_availability(booking_day, "10:00", 60, 30)

    assert result.available
    assert result.reason is None
    assert result.alternatives == []


def test_sunday_is_closed_by_default(db, tenant, booking_day):
    sunday = booking_day + timedelta(days=(6 - booking_day.weekday()))

    result = _service(db, tenant).check_availability(sunday, "10:00", 60, 30)

    assert not result.available
    assert result.reason == "closed"


def test_slot_running_past_closing_is_outside_hours(db, tenant, booking_day):
    result = _service(db, tenant).check_availability(booking_day, "16:30", 60, 30)

    assert not result.available
    assert result.reason == "outside_hours"
    # Nothing fits later that day, so the search moves to the next open day
    assert result.alternatives
    assert all(option["date"] > booking_day.isoformat() for option in result.alternatives)
    assert result.alternatives[0]["time"] == "09:00"
    assert len(result.alternatives) == 3


def test_past_slot_is_rejected(db, tenant):
    yesterday = today_in_timezone(tenant.timezone) - timedelta(days=1)
    if yesterday.weekday() == 6:
        yesterday -= timedelta(days=1)

    result = _service(db, tenant).check_availability(yesterday, "10:00", 30, 15, with_alternatives=False)

    assert result.reason == "past"


def test_overlapping_appointment_blocks_slot_and_offers_same_day_alternatives(
    db, tenant, booking_day, make_appointment
):
    make_appointment(booking_day, "10:00", 60)

    result = _service(db, tenant).check_availability(booking_day, "10:00", 60, 30)

    assert not result.available
    assert result.reason == "booked"
    assert [o["time"] for o in result.alternatives] == ["11:00", "11:30", "12:00"]
    assert {o["date"] for o in result.alternatives} == {booking_day.isoformat()}


def test_back_to_back_appointment_does_not_conflict(db, tenant, booking_day, make_appointment):
    make_appointment(booking_day, "10:00", 60)

    result = _service(db, tenant).check_availability(booking_day, "11:00", 60, 30)

    assert result.available


def test_cancelled_appointments_free_the_slot(db, tenant, booking_day, make_appointment):
    make_appointment(booking_day, "10:00", 60, status="cancelled")

    assert _service(db, tenant).check_availability(booking_day, "10:00", 60, 30).available


def test_concurrent_capacity_allows_parallel_appointments(db, tenant, booking_day, make_appointment):
    tenant.concurrent_capacity = 2
    db.commit()
    make_appointment(booking_day, "10:00", 60)

    service = _service(db, tenant)
    assert service.check_availability(booking_day, "10:30", 60, 30).available

    make_appointment(booking_day, "10:30", 30)
    assert not service.check_availability(booking_day, "10:15", 30, 15).available


def test_exclude_appointment_ignores_its_own_slot(db, tenant, booking_day, make_appointment):
    appointment = make_appointment(booking_day, "10:00", 60)

    result = _service(db, tenant).check_availability(
        booking_day, "10:30", 60, 30, exclude_appointment_id=appointment.id
    )

    assert result.available


def test_hold_blocks_other_sessions_only(db, tenant, booking_day):
    db.add(
        SlotReservation(
            tenant_id=tenant.id,
            session_id="sesion-a",
            scheduled_date=booking_day,
            scheduled_time="10:00",
            duration_minutes=60,
            expires_at=utcnow() + timedelta(minutes=5),
        )
    )
    db.commit()
    service = _service(db, tenant)

    assert not service.check_availability(booking_day, "10:00", 60, 30, session_id="sesion-b").available
    assert service.check_availability(booking_day, "10:00", 60, 30, session_id="sesion-a").available


def test_expired_holds_are_cleaned_up_before_checking(db, tenant, booking_day):
    db.add(
        SlotReservation(
            tenant_id=tenant.id,
            session_id="sesion-vieja",
            scheduled_date=booking_day,
            scheduled_time="10:00",
            duration_minutes=60,
            expires_at=utcnow() - timedelta(minutes=1),
        )
    )
    db.commit()

    result = _service(db, tenant).check_availability(booking_day, "10:00", 60, 30, session_id="otra")

    assert result.available
    assert db.query(SlotReservation).count() == 0


def test_custom_business_hours_are_used(db, tenant, booking_day):
    db.add_all(
        BusinessHours(
            tenant_id=tenant.id,
            day_of_week=day,
            open_time="08:00",
            close_time="12:00",
            is_closed=False,
        )
        for day in range(7)
    )
    db.commit()
    service = _service(db, tenant)

    assert service.check_availability(booking_day, "08:00", 60, 30).available
    assert service.check_availability(booking_day, "12:00", 30, 30).reason == "outside_hours"


def test_resolve_timing_precedence(db, tenant, grooming_service):
    service = _service(db, tenant)

    assert service.resolve_timing("medical", 45, grooming_service) == (45, 15)
    assert service.resolve_timing(None, None, grooming_service) == (60, 30)
    assert service.resolve_timing("medical") == (30, 15)
    assert service.resolve_timing("hybrid") == (90, 15)
    assert service.resolve_timing(None) == (60, 30)


def test_day_slots_flags_taken_starts(db, tenant, booking_day, make_appointment):
    make_appointment(booking_day, "09:00", 60)

    day = _service(db, tenant).day_slots(booking_day, 60, 30)

    slots = {s["time"]: s["available"] for s in day["slots"]}
    assert slots["09:00"] is False
    assert slots["09:30"] is False
    assert slots["10:00"] is True
    assert "16:30" not in slots
    assert day["openTime"] == "09:00"
