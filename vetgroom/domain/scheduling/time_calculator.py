"""
Time parsing and slot arithmetic.

Everything here works in minutes since midnight of a single clinic-local day,
so a slot is the half-open interval [start, start + duration).
"""

from typing import Callable, Iterable, Optional

MAX_ALTERNATIVE_STEPS = 20
MAX_ALTERNATIVES = 3
DEFAULT_SLOT_INTERVAL = 30
MINUTES_PER_DAY = 24 * 60


def to_minutes(hhmm: str) -> int:
    """'09:30' -> 570"""
    hours, minutes = hhmm.strip().split(":")[:2]
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    """570 -> '09:30'"""
    return f"{total // 60:02d}:{total % 60:02d}"


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval overlap: touching edges do not conflict"""
    return start_a < end_b and start_b < end_a


def count_overlaps(start: int, end: int, busy: Iterable[tuple[int, int]]) -> int:
    return sum(1 for busy_start, busy_end in busy if overlaps(start, end, busy_start, busy_end))


def fits_in_hours(start: int, duration: int, open_minute: int, close_minute: int) -> bool:
    return start >= open_minute and start + duration <= close_minute


def generate_slot_starts(open_minute: int, close_minute: int, interval: int, duration: int) -> list[int]:
    """Every slot start in the day at the given interval that still ends before closing"""
    interval = interval or DEFAULT_SLOT_INTERVAL
    starts = []
    current = open_minute
    while current + duration <= close_minute:
        starts.append(current)
        current += interval
    return starts


def search_forward(
    requested_start: int,
    interval: int,
    is_free: Callable[[int], bool],
    max_steps: int = MAX_ALTERNATIVE_STEPS,
    max_results: int = MAX_ALTERNATIVES,
    last_start: Optional[int] = None,
) -> list[int]:
    """
    Step forward from the requested start and collect free starts.

    Stops after max_results hits, max_steps steps, or once a candidate
    would begin after last_start (usually closing time minus duration).
    """
    interval = interval or DEFAULT_SLOT_INTERVAL
    found: list[int] = []
    candidate = requested_start
    for _ in range(max_steps):
        candidate += interval
        if candidate >= MINUTES_PER_DAY:
            break
        if last_start is not None and candidate > last_start:
            break
        if is_free(candidate):
            found.append(candidate)
            if len(found) >= max_results:
                break
    return found
