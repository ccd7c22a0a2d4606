# interview_slots/services/slots/storage/memory.py
"""
In-process storage.

Map id → Slot plus a secondary date → {id} index:
O(1) lookup by id, O(k) lookup by date (k = slots on that date).

No method awaits between reading and writing its maps, so every call is
atomic on the event loop. There is no storage-level exclusion constraint:
double-booking protection comes from the manager only.
"""

from typing import Sequence

from ..types import QueryOptions, Slot, slot_sort_key
from .base import filter_by_options, filter_overlapping


class InMemoryStorageAdapter:
    def __init__(self) -> None:
        self._slots: dict[str, Slot] = {}
        self._date_index: dict[str, set[str]] = {}

    def _put(self, slot: Slot) -> None:
        previous = self._slots.get(slot.id)
        if previous is not None and previous.date != slot.date:
            self._unindex(previous)
        self._slots[slot.id] = slot
        self._date_index.setdefault(slot.date, set()).add(slot.id)

    def _unindex(self, slot: Slot) -> None:
        ids = self._date_index.get(slot.date)
        if ids is None:
            return
        ids.discard(slot.id)
        if not ids:
            del self._date_index[slot.date]

    # ── Write ────────────────────────────────────────────────────────────

    async def save(self, slot: Slot) -> Slot:
        self._put(slot)
        return slot

    async def bulk_save(self, slots: Sequence[Slot]) -> list[Slot]:
        for slot in slots:
            self._put(slot)
        return list(slots)

    # ── Read ─────────────────────────────────────────────────────────────

    async def get_by_id(self, slot_id: str) -> Slot | None:
        return self._slots.get(slot_id)

    async def get_by_date(self, date: str) -> list[Slot]:
        ids = self._date_index.get(date, ())
        slots = [self._slots[i] for i in ids if i in self._slots]
        return sorted(slots, key=slot_sort_key)

    async def get_by_date_range(self, start_date: str, end_date: str) -> list[Slot]:
        result: list[Slot] = []
        for date, ids in self._date_index.items():
            if start_date <= date <= end_date:
                result.extend(self._slots[i] for i in ids if i in self._slots)
        return sorted(result, key=slot_sort_key)

    async def exists(self, slot_id: str) -> bool:
        return slot_id in self._slots

    async def get_all(self, options: QueryOptions | None = None) -> list[Slot]:
        return filter_by_options(self._slots.values(), options)

    async def count(self, date: str | None = None) -> int:
        if date:
            return len(self._date_index.get(date, ()))
        return len(self._slots)

    async def find_overlapping_slots(
        self,
        date: str,
        start_time: str,
        end_time: str,
        exclude_id: str | None = None,
    ) -> list[Slot]:
        return filter_overlapping(
            await self.get_by_date(date), date, start_time, end_time, exclude_id
        )

    # ── Delete ───────────────────────────────────────────────────────────

    async def delete(self, slot_id: str) -> bool:
        slot = self._slots.pop(slot_id, None)
        if slot is None:
            return False
        self._unindex(slot)
        return True

    async def delete_by_date(self, date: str) -> int:
        ids = self._date_index.pop(date, set())
        for slot_id in ids:
            self._slots.pop(slot_id, None)
        return len(ids)

    async def clear(self) -> None:
        self._slots.clear()
        self._date_index.clear()
