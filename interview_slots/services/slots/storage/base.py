# interview_slots/services/slots/storage/base.py
"""
Storage adapter protocol and shared helpers.

Implementations:
- InMemoryStorageAdapter: dict + date index (reference / tests)
- SqlStorageAdapter: own table, SQL range and overlap queries
- OrmStorageAdapter: host-owned availability_slots table, owner scoping
- RedisStorageAdapter: key per slot + set per date

All methods are async. Backend errors propagate unchanged.
"""

from typing import Iterable, Protocol, Sequence, runtime_checkable

from ..overlap import ranges_overlap
from ..types import QueryOptions, Slot, slot_sort_key


@runtime_checkable
class StorageAdapter(Protocol):
    """Persistence boundary of the slot engine."""

    async def save(self, slot: Slot) -> Slot:
        """Insert or replace by id. Returns the stored slot (id may be re-derived)."""
        ...

    async def bulk_save(self, slots: Sequence[Slot]) -> list[Slot]:
        """Persist a batch as one unit where the backend allows it."""
        ...

    async def get_by_id(self, slot_id: str) -> Slot | None:
        ...

    async def get_by_date(self, date: str) -> list[Slot]:
        """Slots on date, ascending by start time."""
        ...

    async def get_by_date_range(self, start_date: str, end_date: str) -> list[Slot]:
        """Slots in [start_date, end_date], ascending by (date, start time)."""
        ...

    async def delete(self, slot_id: str) -> bool:
        """False if the slot does not exist."""
        ...

    async def delete_by_date(self, date: str) -> int:
        ...

    async def exists(self, slot_id: str) -> bool:
        ...

    async def get_all(self, options: QueryOptions | None = None) -> list[Slot]:
        ...

    async def count(self, date: str | None = None) -> int:
        ...

    async def clear(self) -> None:
        """Drop all slots (tests / reset only)."""
        ...

    async def find_overlapping_slots(
        self,
        date: str,
        start_time: str,
        end_time: str,
        exclude_id: str | None = None,
    ) -> list[Slot]:
        """
        Slots on date whose [start, end) intersects [start_time, end_time).

        Must return the same result as filter_overlapping(get_by_date(date), ...).
        """
        ...


def filter_overlapping(
    slots: Iterable[Slot],
    date: str,
    start_time: str,
    end_time: str,
    exclude_id: str | None = None,
) -> list[Slot]:
    """Reference overlap filter, ascending by start time."""
    result = [
        slot for slot in slots
        if slot.date == date
        and slot.id != exclude_id
        and ranges_overlap(slot.start_time, slot.end_time, start_time, end_time)
    ]
    return sorted(result, key=slot_sort_key)


def filter_by_options(slots: Iterable[Slot], options: QueryOptions | None) -> list[Slot]:
    """Apply date bounds, sort by (date, start time), then offset/limit."""
    options = options or QueryOptions()
    result = list(slots)

    if options.start_date:
        result = [s for s in result if s.date >= options.start_date]
    if options.end_date:
        result = [s for s in result if s.date <= options.end_date]

    result.sort(key=slot_sort_key)

    offset = options.offset or 0
    if options.limit is None:
        return result[offset:]
    return result[offset:offset + options.limit]
