# interview_slots/services/slots/validation.py
"""
Validation of booking input.

Checks run in a fixed order and stop at the first failure:
  1. date:        YYYY-MM-DD and a real calendar date
  2. start / end: HH:MM, 00-23 / 00-59
  3. start / end: on the interval boundary
  4. range:       end strictly after start (same day)
"""

import re
from datetime import datetime

from .config import SlotConfig, get_slot_config
from .errors import SlotValidationError
from .types import ValidatedSlotInput


TIME_RE = re.compile(r"([01][0-9]|2[0-3]):([0-5][0-9])")
DATE_RE = re.compile(r"[0-9]{4}-(0[1-9]|1[0-2])-(0[1-9]|[12][0-9]|3[01])")


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def is_valid_time_format(value) -> bool:
    return TIME_RE.fullmatch(_clean(value)) is not None


def is_on_interval_boundary(value, interval_minutes: int | None = None) -> bool:
    """Check that the minutes of "HH:MM" fall on the interval grid."""
    if not is_valid_time_format(value):
        return False
    interval = interval_minutes or get_slot_config().interval_minutes
    minutes = int(_clean(value).split(":")[1])
    return minutes % interval == 0


def is_valid_date(value) -> bool:
    """Format YYYY-MM-DD and a real date (2024-02-30 is rejected)."""
    cleaned = _clean(value)
    if DATE_RE.fullmatch(cleaned) is None:
        return False
    try:
        datetime.strptime(cleaned, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def validate_date(value, label: str = "date") -> str:
    """Return the stripped date or raise a date-tagged validation error."""
    if not is_valid_date(value):
        raise SlotValidationError(f'Invalid {label}: "{value}". Use YYYY-MM-DD format.', "date")
    return _clean(value)


def validate_slot_input(
    date,
    start_time,
    end_time,
    config: SlotConfig | None = None,
) -> ValidatedSlotInput:
    """
    Validate and normalize slot input.

    Raises:
        SlotValidationError: tagged with the offending field
            ("date", "startTime", "endTime" or "range").
    """
    config = config or get_slot_config()
    interval = config.interval_minutes

    date_str = validate_date(date)
    start_str = _clean(start_time)
    end_str = _clean(end_time)

    if not is_valid_time_format(start_str):
        raise SlotValidationError(
            f'Invalid start time: "{start_time}". Use HH:MM format.', "startTime"
        )
    if not is_valid_time_format(end_str):
        raise SlotValidationError(
            f'Invalid end time: "{end_time}". Use HH:MM format.', "endTime"
        )

    if not is_on_interval_boundary(start_str, interval):
        raise SlotValidationError(
            f"Start time must be on {interval}-minute interval.", "startTime"
        )
    if not is_on_interval_boundary(end_str, interval):
        raise SlotValidationError(
            f"End time must be on {interval}-minute interval.", "endTime"
        )

    if config.time_to_index(end_str) <= config.time_to_index(start_str):
        raise SlotValidationError(
            f"End time ({end_str}) must be after start time ({start_str}).", "range"
        )

    return ValidatedSlotInput(date=date_str, start_time=start_str, end_time=end_str)
