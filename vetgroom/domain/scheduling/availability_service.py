"""
Availability service - decides whether a clinic-local slot can be booked.

A slot is bookable when it sits inside the day's business hours, is not in
the past for the clinic's timezone, and the number of overlapping
appointments plus other sessions' unexpired holds stays below the tenant's
concurrent capacity. When it is not bookable, nearby alternatives are
offered: first later the same day, then on the following days.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...cache import (
    get_business_hours_cached,
    invalidate_business_hours_cache,
    set_business_hours_cached,
)
from ...models import Service, Tenant
from ...shared.timeutils import now_in_timezone, utcnow
from .repository import SchedulingRepository
from .schemas import AppointmentTypeConfigItem, BusinessHoursDay
from .time_calculator import (
    DEFAULT_SLOT_INTERVAL,
    MAX_ALTERNATIVES,
    count_overlaps,
    fits_in_hours,
    from_minutes,
    generate_slot_starts,
    search_forward,
    to_minutes,
)

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 60
NEXT_DAYS_TO_SCAN = 7

# Monday-Saturday 09:00-17:00, Sunday closed
DEFAULT_BUSINESS_HOURS = [
    {"dayOfWeek": day, "openTime": "09:00", "closeTime": "17:00", "isClosed": day == 6}
    for day in range(7)
]

DEFAULT_TYPE_CONFIGS = {
    "grooming": {"defaultDurationMinutes": 60, "slotIntervalMinutes": 30},
    "medical": {"defaultDurationMinutes": 30, "slotIntervalMinutes": 15},
    "vaccination": {"defaultDurationMinutes": 15, "slotIntervalMinutes": 15},
}

REASON_MESSAGES = {
    "closed": "La clínica está cerrada ese día",
    "outside_hours": "El horario solicitado está fuera del horario de atención",
    "past": "No se pueden agendar citas en el pasado",
    "booked": "El horario solicitado ya está ocupado",
}


@dataclass
class AvailabilityResult:
    available: bool
    day: date
    time: str
    duration: int
    reason: Optional[str] = None
    alternatives: list[dict] = field(default_factory=list)

    @property
    def message(self) -> Optional[str]:
        return REASON_MESSAGES.get(self.reason) if self.reason else None


class AvailabilityService:
    """Slot availability for a single tenant"""

    def __init__(self, db: Session, tenant: Tenant):
        self.db = db
        self.tenant = tenant
        self.repo = SchedulingRepository()

    @property
    def capacity(self) -> int:
        return max(1, self.tenant.concurrent_capacity or 1)

    # ========================================================================
    # CONFIGURATION
    # ========================================================================

    def get_business_hours(self) -> list[dict]:
        cached = get_business_hours_cached(self.tenant.id)
        if cached is not None:
            return cached

        rows = self.repo.get_business_hours(self.db, self.tenant.id)
        if rows:
            by_day = {
                r.day_of_week: {
                    "dayOfWeek": r.day_of_week,
                    "openTime": r.open_time,
                    "closeTime": r.close_time,
                    "isClosed": r.is_closed,
                }
                for r in rows
            }
            hours = [by_day.get(d, DEFAULT_BUSINESS_HOURS[d]) for d in range(7)]
        else:
            hours = [dict(d) for d in DEFAULT_BUSINESS_HOURS]

        set_business_hours_cached(self.tenant.id, hours)
        return hours

    def update_business_hours(self, days: list[BusinessHoursDay]) -> list[dict]:
        self.repo.replace_business_hours(
            self.db,
            self.tenant.id,
            [
                {
                    "day_of_week": d.dayOfWeek,
                    "open_time": d.openTime,
                    "close_time": d.closeTime,
                    "is_closed": d.isClosed,
                }
                for d in days
            ],
        )
        invalidate_business_hours_cache(self.tenant.id)
        logger.info(f"🕘 Business hours updated for tenant {self.tenant.id}")
        return self.get_business_hours()

    def hours_for(self, day: date) -> dict:
        return self.get_business_hours()[day.weekday()]

    def get_type_configs(self) -> dict[str, dict]:
        configs = {k: dict(v) for k, v in DEFAULT_TYPE_CONFIGS.items()}
        for row in self.repo.get_type_configs(self.db, self.tenant.id):
            configs[row.appointment_type] = {
                "defaultDurationMinutes": row.default_duration_minutes,
                "slotIntervalMinutes": row.slot_interval_minutes,
            }
        return configs

    def update_type_configs(self, items: list[AppointmentTypeConfigItem]) -> dict[str, dict]:
        for item in items:
            self.repo.upsert_type_config(
                self.db,
                self.tenant.id,
                item.appointmentType,
                item.defaultDurationMinutes,
                item.slotIntervalMinutes,
            )
        self.db.commit()
        return self.get_type_configs()

    def resolve_timing(
        self,
        appointment_type: Optional[str] = None,
        duration: Optional[int] = None,
        service: Optional[Service] = None,
    ) -> tuple[int, int]:
        """
        Duration and slot interval for a request.

        Duration precedence: explicit value, the service's duration, the
        appointment type default, 60 minutes. A hybrid visit takes the
        grooming and medical defaults back to back.
        """
        configs = self.get_type_configs()
        appointment_type = (appointment_type or (service.type if service else "") or "").lower()

        if appointment_type == "hybrid":
            parts = [configs["grooming"], configs["medical"]]
            type_duration = sum(p["defaultDurationMinutes"] for p in parts)
            interval = min(p["slotIntervalMinutes"] for p in parts)
        elif appointment_type in configs:
            type_duration = configs[appointment_type]["defaultDurationMinutes"]
            interval = configs[appointment_type]["slotIntervalMinutes"]
        else:
            type_duration = None
            interval = DEFAULT_SLOT_INTERVAL

        if duration:
            resolved = duration
        elif service is not None and service.duration_minutes:
            resolved = service.duration_minutes
        else:
            resolved = type_duration or DEFAULT_DURATION

        return resolved, interval

    # ========================================================================
    # AVAILABILITY
    # ========================================================================

    def cleanup_expired(self) -> int:
        deleted = self.repo.delete_expired_reservations(self.db, utcnow(), self.tenant.id)
        if deleted:
            logger.info(f"🧹 Removed {deleted} expired slot holds for tenant {self.tenant.id}")
        return deleted

    def busy_intervals(
        self,
        day: date,
        exclude_appointment_id: Optional[int] = None,
        session_id: Optional[str] = None,
    ) -> list[tuple[int, int]]:
        """Occupied [start, end) minute ranges: live appointments plus other sessions' holds"""
        busy = []
        for appt in self.repo.get_active_appointments_on(
            self.db, self.tenant.id, day, exclude_appointment_id
        ):
            start = to_minutes(appt.scheduled_time)
            busy.append((start, start + (appt.duration_minutes or DEFAULT_DURATION)))

        for hold in self.repo.get_active_reservations(self.db, self.tenant.id, day, utcnow()):
            if session_id and hold.session_id == session_id:
                continue
            start = to_minutes(hold.scheduled_time)
            busy.append((start, start + hold.duration_minutes))
        return busy

    def _blocking_reason(
        self,
        day: date,
        start: int,
        duration: int,
        hours: dict,
        busy: list[tuple[int, int]],
        now: datetime,
    ) -> Optional[str]:
        if hours["isClosed"]:
            return "closed"
        open_minute, close_minute = to_minutes(hours["openTime"]), to_minutes(hours["closeTime"])
        if not fits_in_hours(start, duration, open_minute, close_minute):
            return "outside_hours"
        if day < now.date() or (day == now.date() and start < now.hour * 60 + now.minute):
            return "past"
        if count_overlaps(start, start + duration, busy) >= self.capacity:
            return "booked"
        return None

    def check_availability(
        self,
        day: date,
        hhmm: str,
        duration: int,
        interval: int = DEFAULT_SLOT_INTERVAL,
        exclude_appointment_id: Optional[int] = None,
        session_id: Optional[str] = None,
        with_alternatives: bool = True,
    ) -> AvailabilityResult:
        self.cleanup_expired()

        now = now_in_timezone(self.tenant.timezone)
        start = to_minutes(hhmm)
        hours = self.hours_for(day)
        busy = self.busy_intervals(day, exclude_appointment_id, session_id)

        reason = self._blocking_reason(day, start, duration, hours, busy, now)
        result = AvailabilityResult(
            available=reason is None,
            day=day,
            time=from_minutes(start),
            duration=duration,
            reason=reason,
        )
        if reason and with_alternatives:
            result.alternatives = self.find_alternatives(
                day, start, duration, interval, exclude_appointment_id, session_id, now, busy
            )
        logger.info(
            f"📅 Availability {day.isoformat()} {result.time} ({duration}m) tenant {self.tenant.id}: "
            f"{'available' if result.available else reason}"
        )
        return result

    def find_alternatives(
        self,
        day: date,
        start: int,
        duration: int,
        interval: int,
        exclude_appointment_id: Optional[int] = None,
        session_id: Optional[str] = None,
        now: Optional[datetime] = None,
        busy: Optional[list[tuple[int, int]]] = None,
    ) -> list[dict]:
        """Later the same day first, then the next open days from opening time"""
        now = now or now_in_timezone(self.tenant.timezone)
        if busy is None:
            busy = self.busy_intervals(day, exclude_appointment_id, session_id)

        hours = self.hours_for(day)
        options: list[dict] = []

        if not hours["isClosed"]:
            last_start = to_minutes(hours["closeTime"]) - duration
            starts = search_forward(
                start,
                interval,
                lambda candidate: self._blocking_reason(day, candidate, duration, hours, busy, now)
                is None,
                last_start=last_start,
            )
            options = [{"date": day.isoformat(), "time": from_minutes(s)} for s in starts]

        if options:
            return options

        for offset in range(1, NEXT_DAYS_TO_SCAN + 1):
            next_day = day + timedelta(days=offset)
            next_hours = self.hours_for(next_day)
            if next_hours["isClosed"]:
                continue
            next_busy = self.busy_intervals(next_day, exclude_appointment_id, session_id)
            for candidate in generate_slot_starts(
                to_minutes(next_hours["openTime"]),
                to_minutes(next_hours["closeTime"]),
                interval,
                duration,
            ):
                if self._blocking_reason(next_day, candidate, duration, next_hours, next_busy, now) is None:
                    options.append({"date": next_day.isoformat(), "time": from_minutes(candidate)})
                    if len(options) >= MAX_ALTERNATIVES:
                        return options
        return options

    def day_slots(
        self, day: date, duration: int, interval: int, session_id: Optional[str] = None
    ) -> dict:
        """Every slot start of the day with an availability flag"""
        self.cleanup_expired()
        hours = self.hours_for(day)
        result = {
            "date": day.isoformat(),
            "isClosed": hours["isClosed"],
            "openTime": None if hours["isClosed"] else hours["openTime"],
            "closeTime": None if hours["isClosed"] else hours["closeTime"],
            "durationMinutes": duration,
            "slotIntervalMinutes": interval,
            "slots": [],
        }
        if hours["isClosed"]:
            return result

        now = now_in_timezone(self.tenant.timezone)
        busy = self.busy_intervals(day, session_id=session_id)
        for start in generate_slot_starts(
            to_minutes(hours["openTime"]), to_minutes(hours["closeTime"]), interval, duration
        ):
            reason = self._blocking_reason(day, start, duration, hours, busy, now)
            result["slots"].append({"time": from_minutes(start), "available": reason is None})
        return result
