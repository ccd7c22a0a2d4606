# interview_slots/services/slots/types.py
"""
Value types of the slot engine.

Slot is frozen: an "update" is a delete followed by a new booking.
Dates are ISO "YYYY-MM-DD", times are "HH:MM" (24h), so plain string
ordering equals chronological ordering.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class Slot:
    """One scheduled time range on one calendar date."""
    id: str
    date: str
    start_time: str
    end_time: str
    metadata: dict[str, Any] | None = field(default=None, hash=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Slot":
        return cls(
            id=str(data["id"]),
            date=data["date"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            metadata=data.get("metadata"),
        )


def slot_sort_key(slot: Slot) -> tuple[str, str]:
    """Ascending by (date, start time)."""
    return slot.date, slot.start_time


@dataclass(frozen=True)
class TimeRange:
    start_time: str
    end_time: str


@dataclass(frozen=True)
class SlotConflict:
    slot1: Slot
    slot2: Slot
    overlap_minutes: int


@dataclass(frozen=True)
class CreateSlotInput:
    """Raw booking input, as received from the host application."""
    date: str
    start_time: str
    end_time: str
    metadata: dict[str, Any] | None = field(default=None, hash=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CreateSlotInput":
        return cls(
            date=data.get("date"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            metadata=data.get("metadata"),
        )


@dataclass(frozen=True)
class ValidatedSlotInput:
    """Normalized (stripped) date and times that passed validation."""
    date: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class AvailabilityOptions:
    """
    Free-window query options.

    Attributes:
        start_hour: First hour of the window (0-23)
        end_hour: Hour the window ends at (1-24, exclusive)
        min_duration_intervals: Shortest free run to report, in intervals
    """
    start_hour: int = 0
    end_hour: int = 24
    min_duration_intervals: int = 1


@dataclass(frozen=True)
class QueryOptions:
    start_date: str | None = None
    end_date: str | None = None
    limit: int | None = None
    offset: int | None = None


@dataclass(frozen=True)
class Page:
    slots: list[Slot]
    total: int
    has_more: bool


@dataclass(frozen=True)
class DailyStats:
    date: str
    slot_count: int
    total_minutes: int
