"""Validators, timezone helpers and slot arithmetic"""

from datetime import date, datetime

import pytest

from vetgroom.domain.scheduling.time_calculator import (
    count_overlaps,
    from_minutes,
    generate_slot_starts,
    overlaps,
    search_forward,
    to_minutes,
)
from vetgroom.shared.timeutils import (
    add_days,
    format_date_es,
    is_valid_date,
    local_datetime_to_utc,
    local_to_utc,
    parse_time,
    resolve_timezone,
    utc_to_local,
)
from vetgroom.shared.validators import (
    validate_date_string,
    validate_email,
    validate_hex_color,
    validate_mx_phone,
    validate_postal_code,
    validate_time_string,
)

# ============================================================================
# VALIDATORS
# ============================================================================


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("8112345678", "8112345678"),
        ("+52 81 1234 5678", "8112345678"),
        ("(81) 1234-5678", "8112345678"),
        ("52 8112345678", "8112345678"),
    ],
)
def test_mx_phone_is_normalized_to_ten_digits(raw, expected):
    assert validate_mx_phone(raw) == expected


def test_mx_phone_rejects_short_numbers():
    with pytest.raises(ValueError):
        validate_mx_phone("12345")


def test_email_is_lowercased_and_checked():
    assert validate_email("  Laura@Example.COM ") == "laura@example.com"
    with pytest.raises(ValueError):
        validate_email("laura@")


def test_postal_code_needs_five_digits():
    assert validate_postal_code("64000") == "64000"
    with pytest.raises(ValueError):
        validate_postal_code("6400")


def test_time_string_is_zero_padded():
    assert validate_time_string("9:05") == "09:05"
    with pytest.raises(ValueError):
        validate_time_string("24:00")
    with pytest.raises(ValueError):
        validate_time_string("nueve")


def test_date_string_rejects_impossible_dates():
    assert validate_date_string("2025-02-28") == date(2025, 2, 28)
    with pytest.raises(ValueError):
        validate_date_string("2025-02-30")
    with pytest.raises(ValueError):
        validate_date_string("28/02/2025")


def test_hex_color():
    assert validate_hex_color("#14b8a6") == "#14B8A6"
    with pytest.raises(ValueError):
        validate_hex_color("teal")


# ============================================================================
# TIMEZONES
# ============================================================================


def test_unknown_timezone_falls_back_to_default():
    assert resolve_timezone("Mars/Olympus") == "Mexico/General"
    assert resolve_timezone("America/Bogota") == "America/Bogota"


def test_local_to_utc_applies_fixed_offset():
    result = local_to_utc("2025-01-15", "18:30", "Mexico/General")
    assert result["date"] == "2025-01-16"
    assert result["time"] == "00:30"
    assert result["iso"].endswith("Z")


def test_local_datetime_to_utc_is_naive_utc():
    result = local_datetime_to_utc(date(2025, 1, 15), "21:15", "America/Bogota")
    assert result == datetime(2025, 1, 16, 2, 15)
    assert result.tzinfo is None


def test_utc_to_local_round_trip_for_mazatlan():
    local = utc_to_local(datetime(2025, 1, 15, 3, 0), "America/Mazatlan")
    assert local["date"] == "2025-01-14"
    assert local["time"] == "20:00"


def test_add_days_crosses_month():
    assert add_days("2025-01-30", 3) == "2025-02-02"


def test_is_valid_date():
    assert is_valid_date("2024-02-29")
    assert not is_valid_date("2023-02-29")
    assert not is_valid_date("2023-2-1")
    assert not is_valid_date(None)


def test_parse_time_accepts_seconds():
    assert parse_time("07:45:00").hour == 7


def test_format_date_es():
    assert format_date_es(date(2025, 1, 15)) == "miércoles, 15 de enero de 2025"


# ============================================================================
# SLOT ARITHMETIC
# ============================================================================


def test_minutes_conversion():
    assert to_minutes("09:30") == 570
    assert from_minutes(570) == "09:30"


def test_touching_slots_do_not_overlap():
    assert not overlaps(540, 600, 600, 660)
    assert overlaps(540, 601, 600, 660)


def test_count_overlaps():
    busy = [(540, 600), (570, 630), (700, 760)]
    assert count_overlaps(580, 640, busy) == 2


def test_generate_slot_starts_stops_before_closing():
    starts = generate_slot_starts(to_minutes("09:00"), to_minutes("11:00"), 30, 60)
    assert [from_minutes(s) for s in starts] == ["09:00", "09:30", "10:00"]


def test_search_forward_caps_results_and_steps():
    free = search_forward(540, 30, lambda candidate: True)
    assert free == [570, 600, 630]

    never = search_forward(540, 15, lambda candidate: False)
    assert never == []


def test_search_forward_respects_last_start():
    found = search_forward(900, 30, lambda candidate: True, last_start=960)
    assert found == [930, 960]
