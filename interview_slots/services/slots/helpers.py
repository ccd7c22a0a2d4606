# interview_slots/services/slots/helpers.py
"""
Host-side helpers: manager wiring and grid utilities for API routes.
"""

from functools import lru_cache

from ...config import settings
from .config import get_slot_config, minutes_to_time_str, time_str_to_minutes
from .manager import SlotManager
from .storage.base import StorageAdapter
from .storage.memory import InMemoryStorageAdapter
from .types import Slot


DEFAULT_SLOT_DURATION = 30


def build_storage(owner_id: int | None = None) -> StorageAdapter:
    """Storage adapter for the backend selected by settings.slot_storage."""
    backend = settings.slot_storage

    if backend == "memory":
        return InMemoryStorageAdapter()

    if backend == "sql":
        from ...database import engine
        from .storage.sql import SqlStorageAdapter
        table_name = f"slots_{owner_id}" if owner_id is not None else "slots"
        return SqlStorageAdapter(engine, table_name=table_name)

    if backend == "orm":
        from ...database import SessionLocal
        from .storage.orm import OrmStorageAdapter
        return OrmStorageAdapter(SessionLocal, owner_id=owner_id)

    if backend == "redis":
        from ...redis_client import redis_client
        from .storage.redis_store import RedisStorageAdapter
        # "_" is the unscoped namespace, disjoint from every owner id
        scope = owner_id if owner_id is not None else "_"
        return RedisStorageAdapter(
            redis_client,
            key_prefix=f"slot:{scope}:",
            date_index_prefix=f"slots:date:{scope}:",
            ttl=settings.slot_redis_ttl,
        )

    raise ValueError(f"Unknown slot storage backend: {backend}")


@lru_cache(maxsize=None)
def get_slot_manager(owner_id: int | None = None) -> SlotManager:
    """
    One manager per owner scope (per interviewer), shared across requests,
    so the manager's per-date write locks cover every request of that scope.
    """
    return SlotManager(build_storage(owner_id), get_slot_config())


def generate_bookable_slots(
    start_time: str,
    end_time: str,
    slot_duration: int = DEFAULT_SLOT_DURATION,
) -> list[tuple[str, str]]:
    """
    Split an availability block into consecutive bookable chunks.

    ("09:00", "10:30", 30) → [("09:00", "09:30"), ("09:30", "10:00"), ("10:00", "10:30")]
    A trailing remainder shorter than slot_duration is dropped.
    """
    if slot_duration <= 0:
        raise ValueError(f"slot_duration must be positive, got {slot_duration}")

    current = time_str_to_minutes(start_time)
    end = time_str_to_minutes(end_time)
    chunks = []
    while current + slot_duration <= end:
        chunks.append((minutes_to_time_str(current), minutes_to_time_str(current + slot_duration)))
        current += slot_duration
    return chunks


def generate_time_slots(slot_duration: int = DEFAULT_SLOT_DURATION) -> list[str]:
    """All "HH:MM" start times of a day on a slot_duration grid."""
    if slot_duration <= 0:
        raise ValueError(f"slot_duration must be positive, got {slot_duration}")
    return [minutes_to_time_str(m) for m in range(0, 24 * 60, slot_duration)]


def get_time_slot_index(time_str: str, slot_duration: int = DEFAULT_SLOT_DURATION) -> int:
    return time_str_to_minutes(time_str) // slot_duration


def slot_to_api_response(slot: Slot) -> dict:
    meta = slot.metadata or {}
    return {
        "id": slot.id,
        "date": slot.date,
        "start_time": slot.start_time,
        "end_time": slot.end_time,
        "duration": meta.get("duration") or DEFAULT_SLOT_DURATION,
        "notes": meta.get("notes"),
    }
