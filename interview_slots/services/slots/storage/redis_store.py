# interview_slots/services/slots/storage/redis_store.py
"""
Redis storage for slots.

Key format:
    slot:{id}            → JSON of the slot (optional TTL)
    slots:date:{date}    → Set of slot ids on that date

There is no native range query: a date range scan enumerates the date
index keys (SCAN slots:date:*), keeps those inside the range and unions
their members. Cost is O(distinct dates), fine for modest volumes or as a
read-through cache in front of a durable store.

No exclusion constraint: double-booking protection comes from the manager.
With a TTL, a date index may briefly list ids whose slot already expired;
those ids are skipped on read but still counted by count(date).
"""

import json
import logging
from typing import Sequence

from redis.asyncio import Redis

from ..types import QueryOptions, Slot, slot_sort_key
from .base import filter_by_options, filter_overlapping


logger = logging.getLogger(__name__)

MGET_CHUNK = 500


def _decode(value) -> str:
    return value.decode() if isinstance(value, bytes) else value


class RedisStorageAdapter:
    """Slot storage on Redis strings + per-date sets."""

    def __init__(
        self,
        redis: Redis,
        key_prefix: str = "slot:",
        date_index_prefix: str = "slots:date:",
        ttl: int | None = None,
    ):
        self.redis = redis
        self.key_prefix = key_prefix
        self.date_index_prefix = date_index_prefix
        self.ttl = ttl

    def _slot_key(self, slot_id: str) -> str:
        return f"{self.key_prefix}{slot_id}"

    def _date_key(self, date: str) -> str:
        return f"{self.date_index_prefix}{date}"

    def _parse(self, raw) -> Slot | None:
        if raw is None:
            return None
        try:
            return Slot.from_dict(json.loads(_decode(raw)))
        except (json.JSONDecodeError, KeyError, TypeError):
            logger.warning(f"Skipping invalid slot payload in Redis: {str(raw)[:200]}")
            return None

    async def _load_many(self, keys: list[str]) -> list[Slot]:
        slots: list[Slot] = []
        for i in range(0, len(keys), MGET_CHUNK):
            for raw in await self.redis.mget(keys[i:i + MGET_CHUNK]):
                slot = self._parse(raw)
                if slot is not None:
                    slots.append(slot)
        return slots

    async def _scan_keys(self, prefix: str) -> list[str]:
        return [_decode(key) async for key in self.redis.scan_iter(match=f"{prefix}*")]

    # ── Write ────────────────────────────────────────────────────────────

    async def _write(self, slots: Sequence[Slot]) -> list[Slot]:
        if not slots:
            return []

        # Previous versions, to move ids between date indexes on re-dating
        previous = await self.redis.mget([self._slot_key(s.id) for s in slots])

        async with self.redis.pipeline(transaction=True) as pipe:
            for slot, raw in zip(slots, previous):
                old = self._parse(raw)
                if old is not None and old.date != slot.date:
                    pipe.srem(self._date_key(old.date), slot.id)

                date_key = self._date_key(slot.date)
                pipe.set(self._slot_key(slot.id), json.dumps(slot.to_dict()), ex=self.ttl)
                pipe.sadd(date_key, slot.id)
                if self.ttl:
                    pipe.expire(date_key, self.ttl)
            await pipe.execute()

        return list(slots)

    async def save(self, slot: Slot) -> Slot:
        saved = await self._write([slot])
        return saved[0]

    async def bulk_save(self, slots: Sequence[Slot]) -> list[Slot]:
        """All writes in one MULTI/EXEC."""
        return await self._write(list(slots))

    # ── Read ─────────────────────────────────────────────────────────────

    async def get_by_id(self, slot_id: str) -> Slot | None:
        return self._parse(await self.redis.get(self._slot_key(slot_id)))

    async def get_by_date(self, date: str) -> list[Slot]:
        ids = await self.redis.smembers(self._date_key(date))
        if not ids:
            return []
        slots = await self._load_many([self._slot_key(_decode(i)) for i in ids])
        return sorted(slots, key=slot_sort_key)

    async def get_by_date_range(self, start_date: str, end_date: str) -> list[Slot]:
        dates = []
        for key in await self._scan_keys(self.date_index_prefix):
            date = key[len(self.date_index_prefix):]
            if start_date <= date <= end_date:
                dates.append(date)

        result: list[Slot] = []
        for date in dates:
            result.extend(await self.get_by_date(date))
        return sorted(result, key=slot_sort_key)

    async def exists(self, slot_id: str) -> bool:
        return await self.redis.exists(self._slot_key(slot_id)) > 0

    async def get_all(self, options: QueryOptions | None = None) -> list[Slot]:
        keys = await self._scan_keys(self.key_prefix)
        if not keys:
            return []
        return filter_by_options(await self._load_many(keys), options)

    async def count(self, date: str | None = None) -> int:
        if date:
            return await self.redis.scard(self._date_key(date))
        return len(await self._scan_keys(self.key_prefix))

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
        slot = await self.get_by_id(slot_id)
        if slot is None:
            return False

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.srem(self._date_key(slot.date), slot_id)
            pipe.delete(self._slot_key(slot_id))
            _, deleted = await pipe.execute()
        return deleted > 0

    async def delete_by_date(self, date: str) -> int:
        date_key = self._date_key(date)
        ids = [_decode(i) for i in await self.redis.smembers(date_key)]
        if not ids:
            return 0

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.delete(*[self._slot_key(i) for i in ids])
            pipe.delete(date_key)
            await pipe.execute()
        return len(ids)

    async def clear(self) -> None:
        keys = await self._scan_keys(self.key_prefix)
        keys += await self._scan_keys(self.date_index_prefix)
        if keys:
            await self.redis.delete(*keys)
