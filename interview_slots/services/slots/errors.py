# interview_slots/services/slots/errors.py
"""
Slot engine failures.

Storage backend errors (SQLAlchemyError, RedisError, ...) are not part of
this hierarchy: they propagate to the caller unchanged.
"""

from typing import Literal

from .types import Slot


ValidationField = Literal["date", "startTime", "endTime", "range"]


class SlotError(Exception):
    """Base class for slot engine failures."""


class SlotValidationError(SlotError):
    """Malformed or misordered date/time input."""

    def __init__(self, message: str, field: ValidationField):
        super().__init__(message)
        self.message = message
        self.field = field


class SlotConflictError(SlotError):
    """Valid input that collides with existing bookings."""

    def __init__(self, message: str, conflicting_slots: list[Slot]):
        super().__init__(message)
        self.message = message
        self.conflicting_slots = conflicting_slots


class SlotNotFoundError(SlotError):
    def __init__(self, slot_id: str):
        super().__init__(f"Slot not found: {slot_id}")
        self.slot_id = slot_id


class SlotOwnerRequiredError(SlotError):
    """A write needs an owner scope the storage adapter does not have."""

    def __init__(self, message: str = "Slots on this storage need an owner (interviewer_id)."):
        super().__init__(message)
        self.message = message
