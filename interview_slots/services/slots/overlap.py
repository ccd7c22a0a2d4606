# interview_slots/services/slots/overlap.py
"""
Overlap math on slots.

Ranges are half-open [start, end): slots that only touch (09:00-10:00 and
10:00-11:00) do not overlap. Slots on different dates never overlap.
"""

from uuid import uuid4

from .config import time_str_to_minutes
from .types import Slot


def generate_id() -> str:
    return str(uuid4())


def is_overlapping(slot1: Slot, slot2: Slot) -> bool:
    if slot1.date != slot2.date:
        return False
    return ranges_overlap(
        slot1.start_time, slot1.end_time, slot2.start_time, slot2.end_time
    )


def ranges_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """start1 < end2 AND end1 > start2"""
    return (
        time_str_to_minutes(start1) < time_str_to_minutes(end2)
        and time_str_to_minutes(end1) > time_str_to_minutes(start2)
    )


def overlap_minutes(slot1: Slot, slot2: Slot) -> int:
    """Overlap duration in minutes, 0 if the slots do not overlap."""
    if not is_overlapping(slot1, slot2):
        return 0
    start = max(time_str_to_minutes(slot1.start_time), time_str_to_minutes(slot2.start_time))
    end = min(time_str_to_minutes(slot1.end_time), time_str_to_minutes(slot2.end_time))
    return max(0, end - start)


def duration_minutes(slot: Slot) -> int:
    return time_str_to_minutes(slot.end_time) - time_str_to_minutes(slot.start_time)
