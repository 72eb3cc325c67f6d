"""
Fixed-offset timezone helpers.

Clinics pick one of a small set of regional timezones. Offsets are fixed
(no DST), matching how the clinics operate in Mexico, Colombia and Argentina.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

from ..config import DEFAULT_TIMEZONE

TIMEZONE_CONFIGS = {
    "UTC": {"offset": 0, "name": "UTC", "display_name": "UTC"},
    "Mexico/General": {"offset": -6, "name": "CST", "display_name": "Mexico Central (CST-6)"},
    "America/Mexico_City": {"offset": -6, "name": "CST", "display_name": "Mexico City (CST-6)"},
    "America/Mazatlan": {"offset": -7, "name": "MST", "display_name": "Culiacán (MST-7)"},
    "America/Bogota": {"offset": -5, "name": "COT", "display_name": "Colombia (COT-5)"},
    "America/Argentina/Buenos_Aires": {
        "offset": -3,
        "name": "ART",
        "display_name": "Argentina (ART-3)",
    },
}

SPANISH_WEEKDAYS = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]
SPANISH_MONTHS = [
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
]


def resolve_timezone(tz_key: Optional[str]) -> str:
    """Return a known timezone key, falling back to the default"""
    if tz_key and tz_key in TIMEZONE_CONFIGS:
        return tz_key
    if DEFAULT_TIMEZONE in TIMEZONE_CONFIGS:
        return DEFAULT_TIMEZONE
    return "Mexico/General"


def get_tzinfo(tz_key: Optional[str]) -> timezone:
    offset = TIMEZONE_CONFIGS[resolve_timezone(tz_key)]["offset"]
    return timezone(timedelta(hours=offset))


def utcnow() -> datetime:
    """Naive UTC now, the format stored in DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def now_in_timezone(tz_key: Optional[str]) -> datetime:
    """Current wall-clock time in the tenant timezone (naive)"""
    return datetime.now(get_tzinfo(tz_key)).replace(tzinfo=None)


def today_in_timezone(tz_key: Optional[str]) -> date:
    return now_in_timezone(tz_key).date()


def parse_time(value: str) -> time:
    """Parse HH:MM into a time object"""
    match = re.fullmatch(r"(\d{1,2}):(\d{2})(?::\d{2})?", value.strip())
    if not match:
        raise ValueError(f"Invalid time: {value}")
    return time(int(match.group(1)), int(match.group(2)))


def format_time(value: Union[time, datetime]) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def combine(day: date, hhmm: str) -> datetime:
    return datetime.combine(day, parse_time(hhmm))


def local_datetime_to_utc(day: date, hhmm: str, tz_key: Optional[str]) -> datetime:
    """Clinic-local wall time as naive UTC, the format stored in DateTime columns"""
    local_dt = combine(day, hhmm).replace(tzinfo=get_tzinfo(tz_key))
    return local_dt.astimezone(timezone.utc).replace(tzinfo=None)


def local_to_utc(local_date: Union[date, str], local_time: str, tz_key: Optional[str]) -> dict:
    """Convert clinic-local date/time into UTC date, HH:MM and ISO string"""
    if isinstance(local_date, str):
        local_date = datetime.strptime(local_date, "%Y-%m-%d").date()
    local_dt = combine(local_date, local_time).replace(tzinfo=get_tzinfo(tz_key))
    utc_dt = local_dt.astimezone(timezone.utc)
    return {
        "date": utc_dt.date().isoformat(),
        "time": format_time(utc_dt),
        "iso": utc_dt.isoformat().replace("+00:00", "Z"),
    }


def utc_to_local(utc_dt: datetime, tz_key: Optional[str]) -> dict:
    """Convert a UTC datetime (naive or aware) to clinic-local date, HH:MM and ISO string"""
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)
    local_dt = utc_dt.astimezone(get_tzinfo(tz_key))
    return {
        "date": local_dt.date().isoformat(),
        "time": format_time(local_dt),
        "iso": local_dt.isoformat(),
    }


def add_days(date_str: str, days: int) -> str:
    day = datetime.strptime(date_str, "%Y-%m-%d").date()
    return (day + timedelta(days=days)).isoformat()


def is_valid_date(value: Optional[str]) -> bool:
    if not value or not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
        return True
    except ValueError:
        return False


def format_date_es(value: Union[date, str]) -> str:
    """e.g. 'miércoles, 15 de enero de 2025'"""
    if isinstance(value, str):
        value = datetime.strptime(value, "%Y-%m-%d").date()
    weekday = SPANISH_WEEKDAYS[value.weekday()]
    month = SPANISH_MONTHS[value.month - 1]
    return f"{weekday}, {value.day} de {month} de {value.year}"
