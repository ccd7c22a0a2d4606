# interview_slots/services/slots/config.py
"""
Slot grid configuration and time codec.

A day is split into fixed intervals (15/30/60 minutes). Every "HH:MM"
wall-clock string maps onto a zero-based interval index:

    index = (hours * 60 + minutes) // interval_minutes
"""

from dataclasses import dataclass
from functools import lru_cache

from ...config import settings


ALLOWED_INTERVALS = (15, 30, 60)
MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class SlotConfig:
    """
    Configuration for the slot engine.

    Attributes:
        interval_minutes: Grid step in minutes (15/30/60)
        allow_overlap: Allow overlapping slots on the same date
        lock_writes: Serialize check-then-write per date inside a manager
    """
    interval_minutes: int = 30
    allow_overlap: bool = False
    lock_writes: bool = True

    def __post_init__(self):
        """Validate configuration."""
        if self.interval_minutes not in ALLOWED_INTERVALS:
            raise ValueError(
                f"interval_minutes must be 15, 30, or 60, got {self.interval_minutes}"
            )

    @property
    def intervals_per_hour(self) -> int:
        return 60 // self.interval_minutes

    @property
    def intervals_per_day(self) -> int:
        """
        Number of intervals in a day.

        - 15 min → 96
        - 30 min → 48
        - 60 min → 24
        """
        return MINUTES_PER_DAY // self.interval_minutes

    def time_to_index(self, time_str: str) -> int:
        """Convert "HH:MM" to interval index."""
        return time_str_to_minutes(time_str) // self.interval_minutes

    def index_to_time(self, index: int) -> str:
        """Convert interval index to "HH:MM" (end of day renders as "24:00")."""
        return minutes_to_time_str(index * self.interval_minutes)


def time_str_to_minutes(time_str: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hours, minutes = time_str.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time_str(total_minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def time_to_index(time_str: str, interval_minutes: int | None = None) -> int:
    """
    Convert time string to interval index.

    Example (30 min grid): "09:30" → 19
    """
    interval = interval_minutes or get_slot_config().interval_minutes
    return time_str_to_minutes(time_str) // interval


def index_to_time(index: int, interval_minutes: int | None = None) -> str:
    """
    Convert interval index back to time string.

    Example (30 min grid): 19 → "09:30"
    """
    interval = interval_minutes or get_slot_config().interval_minutes
    return minutes_to_time_str(index * interval)


@lru_cache
def get_slot_config() -> SlotConfig:
    """Process-wide slot configuration (singleton), read from settings."""
    return SlotConfig(
        interval_minutes=settings.slot_interval_minutes,
        allow_overlap=settings.slot_allow_overlap,
        lock_writes=settings.slot_lock_writes,
    )
