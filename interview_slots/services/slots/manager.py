# interview_slots/services/slots/manager.py
"""
Slot manager: booking, conflict detection, free windows, cancellation.

Flow of a booking:
  input → validate → read same-date slots from storage → overlap check
        → write → Slot

Validation and conflict failures never reach storage. Storage errors
propagate unchanged; there is no retry.

Conflict checking is check-then-write. With lock_writes (default) the
manager holds a per-date asyncio.Lock around it, so concurrent bookings
through the same manager instance cannot double-book. Bookings from other
processes or other manager instances are not serialized.
"""

import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, Iterable, Mapping

from .config import SlotConfig, get_slot_config
from .errors import (
    SlotConflictError,
    SlotNotFoundError,
    SlotOwnerRequiredError,
    SlotValidationError,
)
from .overlap import duration_minutes, generate_id, is_overlapping, overlap_minutes
from .storage.base import StorageAdapter
from .storage.memory import InMemoryStorageAdapter
from .types import (
    AvailabilityOptions,
    CreateSlotInput,
    QueryOptions,
    Slot,
    SlotConflict,
    TimeRange,
)
from .validation import validate_date, validate_slot_input


logger = logging.getLogger(__name__)


def _as_input(data: CreateSlotInput | Mapping[str, Any]) -> CreateSlotInput:
    if isinstance(data, CreateSlotInput):
        return data
    return CreateSlotInput.from_dict(data)


class SlotManager:
    """Facade over validation, overlap math and one storage adapter."""

    def __init__(
        self,
        storage: StorageAdapter | None = None,
        config: SlotConfig | None = None,
        allow_overlap: bool | None = None,
        lock_writes: bool | None = None,
    ):
        self._storage = storage if storage is not None else InMemoryStorageAdapter()
        self.config = config or get_slot_config()
        self.allow_overlap = (
            self.config.allow_overlap if allow_overlap is None else allow_overlap
        )
        self.lock_writes = self.config.lock_writes if lock_writes is None else lock_writes
        # date → lock, and how many bookings hold or wait for it
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_refs: dict[str, int] = {}

    @property
    def storage(self) -> StorageAdapter:
        return self._storage

    @asynccontextmanager
    async def _write_scope(self, dates: Iterable[str]):
        """
        Hold the per-date locks (sorted, so batches cannot deadlock).

        A lock is dropped once nobody holds or waits for it.
        """
        if not self.lock_writes:
            yield
            return

        keys = sorted(set(dates))
        for date in keys:
            if date not in self._locks:
                self._locks[date] = asyncio.Lock()
                self._lock_refs[date] = 0
            self._lock_refs[date] += 1

        try:
            async with AsyncExitStack() as stack:
                for date in keys:
                    await stack.enter_async_context(self._locks[date])
                yield
        finally:
            for date in keys:
                self._lock_refs[date] -= 1
                if not self._lock_refs[date]:
                    del self._lock_refs[date]
                    del self._locks[date]

    def _check_owner(self) -> None:
        # Only host-table adapters define owner_required
        if getattr(self._storage, "owner_required", False):
            raise SlotOwnerRequiredError()

    def _new_slot(self, data: CreateSlotInput) -> Slot:
        validated = validate_slot_input(data.date, data.start_time, data.end_time, self.config)
        return Slot(
            id=generate_id(),
            date=validated.date,
            start_time=validated.start_time,
            end_time=validated.end_time,
            metadata=data.metadata,
        )

    # ── Booking ──────────────────────────────────────────────────────────

    async def book(self, data: CreateSlotInput | Mapping[str, Any]) -> Slot:
        """
        Validate, check conflicts and persist a new slot.

        Raises:
            SlotValidationError: malformed input (nothing is stored)
            SlotConflictError: overlaps existing slots (nothing is stored)
            SlotOwnerRequiredError: storage needs an owner scope (nothing is stored)
        """
        slot = self._new_slot(_as_input(data))
        self._check_owner()

        async with self._write_scope([slot.date]):
            if not self.allow_overlap:
                conflicts = await self.get_conflicts(slot)
                if conflicts:
                    logger.warning(
                        f"Booking rejected: {slot.date} {slot.start_time}-{slot.end_time} "
                        f"conflicts with {len(conflicts)} slot(s)"
                    )
                    raise SlotConflictError(
                        f"Slot conflicts with {len(conflicts)} existing slot(s).",
                        conflicts,
                    )
            saved = await self._storage.save(slot)

        logger.info(f"Slot booked: id={saved.id}, {saved.date} {saved.start_time}-{saved.end_time}")
        return saved

    async def book_many(self, items: Iterable[CreateSlotInput | Mapping[str, Any]]) -> list[Slot]:
        """
        Book a batch: all inputs are validated and conflict-checked (against
        storage and against each other) before anything is written.

        Writes go through storage.bulk_save (one transaction where the
        backend has one).
        """
        slots = [self._new_slot(_as_input(item)) for item in items]
        if not slots:
            return []
        self._check_owner()

        async with self._write_scope(s.date for s in slots):
            if not self.allow_overlap:
                for slot in slots:
                    conflicts = await self.get_conflicts(slot)
                    if conflicts:
                        logger.warning(
                            f"Batch rejected: {slot.date} {slot.start_time}-{slot.end_time} "
                            f"conflicts with {len(conflicts)} slot(s)"
                        )
                        raise SlotConflictError(
                            f"Slot {slot.start_time}-{slot.end_time} conflicts with existing slot(s).",
                            conflicts,
                        )

                for i, first in enumerate(slots):
                    for second in slots[i + 1:]:
                        if is_overlapping(first, second):
                            logger.warning(
                                f"Batch rejected: {first.date} {first.start_time}-{first.end_time} "
                                f"overlaps {second.start_time}-{second.end_time} in the same batch"
                            )
                            raise SlotConflictError(
                                "Slots in batch conflict with each other.",
                                [first, second],
                            )

            saved = await self._storage.bulk_save(slots)

        logger.info(f"Batch booked: {len(saved)} slot(s)")
        return saved

    # ── Read ─────────────────────────────────────────────────────────────

    async def get(self, slot_id: str) -> Slot | None:
        return await self._storage.get_by_id(slot_id)

    async def get_or_throw(self, slot_id: str) -> Slot:
        slot = await self._storage.get_by_id(slot_id)
        if slot is None:
            raise SlotNotFoundError(slot_id)
        return slot

    async def get_by_date(self, date: str) -> list[Slot]:
        return await self._storage.get_by_date(validate_date(date))

    async def get_by_date_range(self, start_date: str, end_date: str) -> list[Slot]:
        start = validate_date(start_date, "start date")
        end = validate_date(end_date, "end date")
        return await self._storage.get_by_date_range(start, end)

    async def get_all(self, options: QueryOptions | None = None) -> list[Slot]:
        if options is not None:
            if options.start_date:
                validate_date(options.start_date, "start date")
            if options.end_date:
                validate_date(options.end_date, "end date")
        return await self._storage.get_all(options)

    async def count(self, date: str | None = None) -> int:
        if date is not None:
            date = validate_date(date)
        return await self._storage.count(date)

    # ── Cancel ───────────────────────────────────────────────────────────

    async def cancel(self, slot_id: str) -> bool:
        """False if the slot does not exist."""
        deleted = await self._storage.delete(slot_id)
        if deleted:
            logger.info(f"Slot cancelled: id={slot_id}")
        return deleted

    async def cancel_or_throw(self, slot_id: str) -> None:
        if not await self.cancel(slot_id):
            raise SlotNotFoundError(slot_id)

    async def cancel_by_date(self, date: str) -> int:
        date = validate_date(date)
        deleted = await self._storage.delete_by_date(date)
        logger.info(f"Cancelled {deleted} slot(s) on {date}")
        return deleted

    async def clear(self) -> None:
        await self._storage.clear()

    # ── Availability ─────────────────────────────────────────────────────

    def _window(self, options: AvailabilityOptions | None) -> tuple[int, int, int]:
        options = options or AvailabilityOptions()
        start_hour, end_hour = options.start_hour, options.end_hour

        if not 0 <= start_hour <= 23:
            raise ValueError(f"start_hour must be 0-23, got {start_hour}")
        if not 1 <= end_hour <= 24:
            raise ValueError(f"end_hour must be 1-24, got {end_hour}")
        if end_hour <= start_hour:
            raise ValueError("end_hour must be greater than start_hour")
        if options.min_duration_intervals < 1:
            raise ValueError(
                f"min_duration_intervals must be >= 1, got {options.min_duration_intervals}"
            )

        per_hour = self.config.intervals_per_hour
        return start_hour * per_hour, end_hour * per_hour, options.min_duration_intervals

    async def get_available_slots(
        self,
        date: str,
        options: AvailabilityOptions | None = None,
    ) -> list[TimeRange]:
        """
        Maximal free runs inside [start_hour, end_hour) of at least
        min_duration_intervals intervals.

        Runs cut by the window edges are reported as they are.

        Raises:
            SlotValidationError: invalid date
            ValueError: invalid hour window
        """
        date = validate_date(date)
        window_start, window_end, min_intervals = self._window(options)

        occupied = bytearray(self.config.intervals_per_day)
        for slot in await self._storage.get_by_date(date):
            start = self.config.time_to_index(slot.start_time)
            end = self.config.time_to_index(slot.end_time)
            occupied[start:end] = b"\x01" * (end - start)

        available: list[TimeRange] = []
        block_start = None

        for i in range(window_start, window_end + 1):
            is_free = i < window_end and not occupied[i]

            if is_free and block_start is None:
                block_start = i
            elif not is_free and block_start is not None:
                if i - block_start >= min_intervals:
                    available.append(TimeRange(
                        start_time=self.config.index_to_time(block_start),
                        end_time=self.config.index_to_time(i),
                    ))
                block_start = None

        return available

    async def is_available(self, date: str, start_time: str, end_time: str) -> bool:
        """True if a slot with these bounds would not conflict. Invalid input → False."""
        try:
            validated = validate_slot_input(date, start_time, end_time, self.config)
        except SlotValidationError:
            return False

        probe = Slot(
            id="temp",
            date=validated.date,
            start_time=validated.start_time,
            end_time=validated.end_time,
        )
        return not await self.get_conflicts(probe)

    async def get_conflicts(self, slot: Slot) -> list[Slot]:
        """Stored slots on the same date that overlap slot (slot itself excluded)."""
        return await self._storage.find_overlapping_slots(
            slot.date, slot.start_time, slot.end_time, exclude_id=slot.id
        )

    async def find_conflicts(self, date: str) -> list[SlotConflict]:
        """All pairwise overlaps among stored slots on date (audit)."""
        slots = await self._storage.get_by_date(validate_date(date))
        conflicts: list[SlotConflict] = []

        for i, first in enumerate(slots):
            for second in slots[i + 1:]:
                if is_overlapping(first, second):
                    conflicts.append(SlotConflict(
                        slot1=first,
                        slot2=second,
                        overlap_minutes=overlap_minutes(first, second),
                    ))

        return conflicts

    # ── Statistics ───────────────────────────────────────────────────────

    async def get_booked_minutes(self, date: str) -> int:
        slots = await self._storage.get_by_date(validate_date(date))
        return sum(duration_minutes(slot) for slot in slots)

    async def get_available_minutes(
        self,
        date: str,
        options: AvailabilityOptions | None = None,
    ) -> int:
        available = await self.get_available_slots(date, options)
        interval = self.config.interval_minutes
        return sum(
            (self.config.time_to_index(r.end_time) - self.config.time_to_index(r.start_time)) * interval
            for r in available
        )


def create_slot_manager(
    storage: StorageAdapter | None = None,
    config: SlotConfig | None = None,
    allow_overlap: bool | None = None,
    lock_writes: bool | None = None,
) -> SlotManager:
    return SlotManager(storage, config, allow_overlap=allow_overlap, lock_writes=lock_writes)
