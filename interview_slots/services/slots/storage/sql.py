# interview_slots/services/slots/storage/sql.py
"""
Relational storage for slots (SQLAlchemy Core).

Owns its table:

    slots(id PK, date DATE, start_time TIME, end_time TIME, metadata JSON,
          created_at, updated_at)
    idx_slots_date           (date)
    idx_slots_date_time      (date, start_time, end_time)

The table is created lazily and idempotently on first use.
Overlap query runs in SQL: start_time < :end AND end_time > :start.

Uses a synchronous engine; every call runs via asyncio.to_thread.
Works with SQLite and PostgreSQL (upsert via ON CONFLICT DO UPDATE).
"""

import asyncio
import logging
import threading
from datetime import date as date_type, time as time_type
from typing import Sequence

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Time,
    delete,
    func,
    select,
)
from sqlalchemy.engine import Engine

from ..overlap import duration_minutes
from ..types import DailyStats, Page, QueryOptions, Slot

logger = logging.getLogger(__name__)

UPSERT_COLUMNS = ("date", "start_time", "end_time", "metadata")


class SqlStorageAdapter:
    """Slot storage in a relational table owned by this adapter."""

    def __init__(
        self,
        engine: Engine,
        table_name: str = "slots",
        schema: str | None = None,
        auto_create_table: bool = True,
    ):
        self.engine = engine
        self.table_name = table_name
        self.auto_create_table = auto_create_table
        self.metadata = MetaData(schema=schema)
        self.table = Table(
            table_name,
            self.metadata,
            Column("id", String(36), primary_key=True),
            Column("date", Date, nullable=False),
            Column("start_time", Time, nullable=False),
            Column("end_time", Time, nullable=False),
            Column("metadata", JSON(none_as_null=True)),
            Column("created_at", DateTime, server_default=func.now()),
            Column("updated_at", DateTime, server_default=func.now()),
            Index(f"idx_{table_name}_date", "date"),
            Index(f"idx_{table_name}_date_time", "date", "start_time", "end_time"),
        )
        self._initialized = False
        self._init_lock = threading.Lock()

    # ── Schema ───────────────────────────────────────────────────────────

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return
            if self.auto_create_table:
                self.metadata.create_all(self.engine, checkfirst=True)
                logger.info(f"Slots table ready: {self.table.fullname}")
            self._initialized = True

    async def initialize(self) -> None:
        """Create table and indexes if missing."""
        await asyncio.to_thread(self._ensure_initialized)

    async def drop_table(self) -> None:
        """Drop the table (use with caution)."""
        await asyncio.to_thread(self._drop_table)

    def _drop_table(self) -> None:
        self.table.drop(self.engine, checkfirst=True)
        self._initialized = False

    # ── Row mapping ──────────────────────────────────────────────────────

    def _slot_to_row(self, slot: Slot) -> dict:
        return {
            "id": slot.id,
            "date": date_type.fromisoformat(slot.date),
            "start_time": time_type.fromisoformat(slot.start_time),
            "end_time": time_type.fromisoformat(slot.end_time),
            "metadata": slot.metadata,
        }

    def _row_to_slot(self, row) -> Slot:
        mapping = row._mapping
        return Slot(
            id=mapping["id"],
            date=_format_date(mapping["date"]),
            start_time=_format_time(mapping["start_time"]),
            end_time=_format_time(mapping["end_time"]),
            metadata=mapping["metadata"],
        )

    def _select(self):
        c = self.table.c
        return select(c.id, c.date, c.start_time, c.end_time, c["metadata"])

    def _fetch(self, stmt) -> list[Slot]:
        self._ensure_initialized()
        with self.engine.connect() as conn:
            return [self._row_to_slot(row) for row in conn.execute(stmt)]

    # ── Write ────────────────────────────────────────────────────────────

    def _upsert_statement(self, rows: list[dict]):
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            return None

        stmt = insert(self.table).values(rows)
        set_ = {name: stmt.excluded[name] for name in UPSERT_COLUMNS}
        set_["updated_at"] = func.now()
        return stmt.on_conflict_do_update(index_elements=[self.table.c.id], set_=set_)

    def _write(self, slots: Sequence[Slot]) -> list[Slot]:
        self._ensure_initialized()
        if not slots:
            return []

        rows = [self._slot_to_row(slot) for slot in slots]
        stmt = self._upsert_statement(rows)

        # One transaction for the whole batch
        with self.engine.begin() as conn:
            if stmt is not None:
                conn.execute(stmt)
            else:
                ids = [row["id"] for row in rows]
                conn.execute(delete(self.table).where(self.table.c.id.in_(ids)))
                conn.execute(self.table.insert(), rows)

        return list(slots)

    async def save(self, slot: Slot) -> Slot:
        saved = await asyncio.to_thread(self._write, [slot])
        return saved[0]

    async def bulk_save(self, slots: Sequence[Slot]) -> list[Slot]:
        """Multi-row insert in a single transaction."""
        return await asyncio.to_thread(self._write, list(slots))

    # ── Read ─────────────────────────────────────────────────────────────

    async def get_by_id(self, slot_id: str) -> Slot | None:
        stmt = self._select().where(self.table.c.id == slot_id)
        rows = await asyncio.to_thread(self._fetch, stmt)
        return rows[0] if rows else None

    async def get_by_date(self, date: str) -> list[Slot]:
        c = self.table.c
        stmt = (
            self._select()
            .where(c.date == date_type.fromisoformat(date))
            .order_by(c.start_time)
        )
        return await asyncio.to_thread(self._fetch, stmt)

    async def get_by_date_range(self, start_date: str, end_date: str) -> list[Slot]:
        c = self.table.c
        stmt = (
            self._select()
            .where(
                c.date >= date_type.fromisoformat(start_date),
                c.date <= date_type.fromisoformat(end_date),
            )
            .order_by(c.date, c.start_time)
        )
        return await asyncio.to_thread(self._fetch, stmt)

    async def exists(self, slot_id: str) -> bool:
        return await asyncio.to_thread(self._exists, slot_id)

    def _exists(self, slot_id: str) -> bool:
        self._ensure_initialized()
        stmt = select(self.table.c.id).where(self.table.c.id == slot_id).limit(1)
        with self.engine.connect() as conn:
            return conn.execute(stmt).first() is not None

    async def get_all(self, options: QueryOptions | None = None) -> list[Slot]:
        options = options or QueryOptions()
        c = self.table.c
        stmt = self._select()

        if options.start_date:
            stmt = stmt.where(c.date >= date_type.fromisoformat(options.start_date))
        if options.end_date:
            stmt = stmt.where(c.date <= date_type.fromisoformat(options.end_date))

        stmt = stmt.order_by(c.date, c.start_time)

        if options.limit is not None:
            stmt = stmt.limit(options.limit)
        if options.offset:
            stmt = stmt.offset(options.offset)

        return await asyncio.to_thread(self._fetch, stmt)

    async def count(self, date: str | None = None) -> int:
        return await asyncio.to_thread(self._count, date)

    def _count(self, date: str | None) -> int:
        self._ensure_initialized()
        stmt = select(func.count()).select_from(self.table)
        if date:
            stmt = stmt.where(self.table.c.date == date_type.fromisoformat(date))
        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one()

    async def find_overlapping_slots(
        self,
        date: str,
        start_time: str,
        end_time: str,
        exclude_id: str | None = None,
    ) -> list[Slot]:
        c = self.table.c
        stmt = self._select().where(
            c.date == date_type.fromisoformat(date),
            c.start_time < time_type.fromisoformat(end_time),
            c.end_time > time_type.fromisoformat(start_time),
        )
        if exclude_id:
            stmt = stmt.where(c.id != exclude_id)
        stmt = stmt.order_by(c.start_time)
        return await asyncio.to_thread(self._fetch, stmt)

    async def get_with_pagination(self, options: QueryOptions | None = None) -> Page:
        """Slots page plus total count and has_more flag."""
        options = options or QueryOptions()
        slots = await self.get_all(options)
        total = await self.count()
        offset = options.offset or 0
        return Page(slots=slots, total=total, has_more=offset + len(slots) < total)

    async def get_daily_stats(self, start_date: str, end_date: str) -> list[DailyStats]:
        """Per-date slot count and booked minutes in [start_date, end_date]."""
        slots = await self.get_by_date_range(start_date, end_date)

        stats: dict[str, DailyStats] = {}
        for slot in slots:
            current = stats.get(slot.date) or DailyStats(slot.date, 0, 0)
            stats[slot.date] = DailyStats(
                date=slot.date,
                slot_count=current.slot_count + 1,
                total_minutes=current.total_minutes + duration_minutes(slot),
            )
        return list(stats.values())

    # ── Delete ───────────────────────────────────────────────────────────

    def _execute_delete(self, stmt) -> int:
        self._ensure_initialized()
        with self.engine.begin() as conn:
            return conn.execute(stmt).rowcount

    async def delete(self, slot_id: str) -> bool:
        stmt = delete(self.table).where(self.table.c.id == slot_id)
        deleted = await asyncio.to_thread(self._execute_delete, stmt)
        return deleted > 0

    async def delete_by_date(self, date: str) -> int:
        stmt = delete(self.table).where(self.table.c.date == date_type.fromisoformat(date))
        return await asyncio.to_thread(self._execute_delete, stmt)

    async def clear(self) -> None:
        await asyncio.to_thread(self._execute_delete, delete(self.table))


def _format_date(value) -> str:
    if isinstance(value, date_type):
        return value.isoformat()
    return str(value).split("T")[0][:10]


def _format_time(value) -> str:
    if isinstance(value, time_type):
        return value.strftime("%H:%M")
    return str(value)[:5]

