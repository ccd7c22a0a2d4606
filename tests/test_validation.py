import pytest

from interview_slots.services.slots import SlotConfig, SlotValidationError, validate_slot_input
from interview_slots.services.slots.validation import (
    is_on_interval_boundary,
    is_valid_date,
    is_valid_time_format,
    validate_date,
)


def _field(date, start, end, config=None):
    with pytest.raises(SlotValidationError) as exc_info:
        validate_slot_input(date, start, end, config)
    return exc_info.value.field


def test_valid_input_is_normalized():
    result = validate_slot_input(" 2025-03-10 ", "09:00 ", " 10:30", SlotConfig())
    assert (result.date, result.start_time, result.end_time) == ("2025-03-10", "09:00", "10:30")


@pytest.mark.parametrize("value", ["2024-02-30", "2023-02-29", "2025-04-31", "2025-13-01", "25-03-10", "2025/03/10", "", None])
def test_invalid_dates(value):
    assert not is_valid_date(value)


def test_leap_day_is_valid():
    assert is_valid_date("2024-02-29")


@pytest.mark.parametrize("value", ["24:00", "9:00", "09:60", "0900", "09:00:00", "", None])
def test_invalid_time_formats(value):
    assert not is_valid_time_format(value)


def test_interval_boundary():
    assert is_on_interval_boundary("09:30", 30)
    assert not is_on_interval_boundary("09:15", 30)
    assert is_on_interval_boundary("09:15", 15)
    assert not is_on_interval_boundary("bad", 30)


def test_date_checked_first():
    assert _field("2024-02-30", "bad", "bad") == "date"


def test_start_format_before_end_format():
    assert _field("2025-03-10", "9:00", "xx") == "startTime"
    assert _field("2025-03-10", "09:00", "25:00") == "endTime"


def test_format_checked_before_alignment():
    assert _field("2025-03-10", "09:15", "10:70") == "endTime"


def test_unaligned_times():
    assert _field("2025-03-10", "09:15", "10:00") == "startTime"
    assert _field("2025-03-10", "09:00", "10:45") == "endTime"


def test_alignment_follows_configured_interval():
    config = SlotConfig(interval_minutes=15)
    result = validate_slot_input("2025-03-10", "09:15", "09:45", config)
    assert result.start_time == "09:15"
    hourly = validate_slot_input("2025-03-10", "09:00", "11:00", SlotConfig(interval_minutes=60))
    assert hourly.end_time == "11:00"


def test_hour_grid_rejects_half_hours():
    assert _field("2025-03-10", "09:30", "11:00", SlotConfig(interval_minutes=60)) == "startTime"


@pytest.mark.parametrize("start,end", [("10:00", "10:00"), ("10:00", "09:30"), ("23:30", "00:00")])
def test_end_must_be_after_start(start, end):
    assert _field("2025-03-10", start, end) == "range"


def test_validate_date_returns_stripped_value():
    assert validate_date(" 2025-03-10") == "2025-03-10"
    with pytest.raises(SlotValidationError) as exc_info:
        validate_date("2025-02-30")
    assert exc_info.value.field == "date"
