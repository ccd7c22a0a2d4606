# interview_slots/services/slots/storage/orm.py
"""
ORM storage on the host-owned availability_slots table.

The table belongs to the surrounding application and carries columns the
slot engine does not know about (interviewer_id, slot_duration, meeting_*,
recurrence, admin_notes). The mapping between Slot and row is explicit:
two functions passed to the constructor (defaults below).

Scoping: when owner_id is set, every date/range/list/count/delete query is
filtered by the owner column and writes inject it. Lookups by id are global.
One adapter holds one scope: the owner never comes from slot metadata, and an
unscoped adapter cannot insert into a table whose owner column is NOT NULL
(SlotOwnerRequiredError). Conflict checks therefore stay within one owner.

Ids are integer primary keys; a non-numeric id is treated as absent.
Uses a synchronous Session; every call runs via asyncio.to_thread.
"""

import asyncio
import logging
from datetime import date as date_type, time as time_type
from typing import Any, Callable, Sequence

from sqlalchemy.orm import Session, sessionmaker

from ....models.generated import AvailabilitySlots
from ..errors import SlotOwnerRequiredError
from ..types import QueryOptions, Slot
from .base import filter_overlapping


logger = logging.getLogger(__name__)

DEFAULT_SLOT_DURATION = 30

RowBuilder = Callable[[Slot, int | None], dict[str, Any]]
SlotBuilder = Callable[[Any], Slot]


def default_to_row(slot: Slot, owner_id: int | None) -> dict[str, Any]:
    """Slot → availability_slots column values (no primary key)."""
    meta = slot.metadata or {}
    row = {
        "date": date_type.fromisoformat(slot.date),
        "start_time": time_type.fromisoformat(slot.start_time),
        "end_time": time_type.fromisoformat(slot.end_time),
        "slot_duration": meta.get("duration") or DEFAULT_SLOT_DURATION,
        "admin_notes": meta.get("notes"),
        "meeting_type": meta.get("meeting_type"),
        "meeting_title": meta.get("meeting_title"),
        "meeting_description": meta.get("meeting_description"),
        "is_recurring": bool(meta.get("is_recurring", False)),
        # Stored as-is, never expanded
        "recurrence_rule": meta.get("recurrence_rule"),
    }

    if owner_id is not None:
        row["interviewer_id"] = owner_id
    return row


def default_from_row(row: AvailabilitySlots) -> Slot:
    """availability_slots row → Slot; host columns go to metadata."""
    return Slot(
        id=str(row.id),
        date=row.date.isoformat(),
        start_time=row.start_time.strftime("%H:%M"),
        end_time=row.end_time.strftime("%H:%M"),
        metadata={
            "duration": row.slot_duration,
            "notes": row.admin_notes,
            "meeting_type": row.meeting_type,
            "meeting_title": row.meeting_title,
            "meeting_description": row.meeting_description,
            "is_recurring": bool(row.is_recurring),
            "recurrence_rule": row.recurrence_rule,
            "interviewer_id": row.interviewer_id,
        },
    )


def _parse_id(slot_id) -> int | None:
    try:
        return int(slot_id)
    except (TypeError, ValueError):
        return None


class OrmStorageAdapter:
    """Slot storage through SQLAlchemy ORM on a host-owned model."""

    def __init__(
        self,
        session_factory: sessionmaker,
        owner_id: int | None = None,
        model=AvailabilitySlots,
        owner_column: str = "interviewer_id",
        to_row: RowBuilder = default_to_row,
        from_row: SlotBuilder = default_from_row,
        native_overlap: bool = True,
    ):
        self.session_factory = session_factory
        self.owner_id = owner_id
        self.model = model
        self.owner_column = owner_column
        self.to_row = to_row
        self.from_row = from_row
        self.native_overlap = native_overlap

    @property
    def owner_required(self) -> bool:
        """True if inserts need an owner this adapter does not have."""
        if self.owner_id is not None:
            return False
        column = self.model.__table__.c.get(self.owner_column)
        return column is not None and not column.nullable

    # ── Session helpers ──────────────────────────────────────────────────

    def _run(self, fn: Callable, *args):
        db = self.session_factory()
        try:
            return fn(db, *args)
        finally:
            db.close()

    async def _call(self, fn: Callable, *args):
        return await asyncio.to_thread(self._run, fn, *args)

    def _scoped(self, db: Session):
        query = db.query(self.model)
        if self.owner_id is not None:
            query = query.filter(getattr(self.model, self.owner_column) == self.owner_id)
        return query

    def _get_row(self, db: Session, slot_id: str):
        numeric_id = _parse_id(slot_id)
        if numeric_id is None:
            return None
        return db.get(self.model, numeric_id)

    def _apply(self, db: Session, slot: Slot):
        values = self.to_row(slot, self.owner_id)
        obj = self._get_row(db, slot.id)
        if obj is not None:
            for key, value in values.items():
                setattr(obj, key, value)
        else:
            if self.owner_required and values.get(self.owner_column) is None:
                raise SlotOwnerRequiredError()
            obj = self.model(**values)
            db.add(obj)
        return obj

    # ── Write ────────────────────────────────────────────────────────────

    def _save(self, db: Session, slots: Sequence[Slot]) -> list[Slot]:
        objs = [self._apply(db, slot) for slot in slots]
        db.commit()
        for obj in objs:
            db.refresh(obj)
        return [self.from_row(obj) for obj in objs]

    async def save(self, slot: Slot) -> Slot:
        saved = await self._call(self._save, [slot])
        return saved[0]

    async def bulk_save(self, slots: Sequence[Slot]) -> list[Slot]:
        """All rows in one session, one commit."""
        if not slots:
            return []
        return await self._call(self._save, list(slots))

    # ── Read ─────────────────────────────────────────────────────────────

    async def get_by_id(self, slot_id: str) -> Slot | None:
        def _get(db: Session):
            obj = self._get_row(db, slot_id)
            return self.from_row(obj) if obj is not None else None

        return await self._call(_get)

    async def get_by_date(self, date: str) -> list[Slot]:
        def _get(db: Session):
            rows = (
                self._scoped(db)
                .filter(self.model.date == date_type.fromisoformat(date))
                .order_by(self.model.start_time)
                .all()
            )
            return [self.from_row(r) for r in rows]

        return await self._call(_get)

    async def get_by_date_range(self, start_date: str, end_date: str) -> list[Slot]:
        def _get(db: Session):
            rows = (
                self._scoped(db)
                .filter(
                    self.model.date >= date_type.fromisoformat(start_date),
                    self.model.date <= date_type.fromisoformat(end_date),
                )
                .order_by(self.model.date, self.model.start_time)
                .all()
            )
            return [self.from_row(r) for r in rows]

        return await self._call(_get)

    async def exists(self, slot_id: str) -> bool:
        numeric_id = _parse_id(slot_id)
        if numeric_id is None:
            return False

        def _exists(db: Session):
            return (
                db.query(self.model.id).filter(self.model.id == numeric_id).first()
                is not None
            )

        return await self._call(_exists)

    async def get_all(self, options: QueryOptions | None = None) -> list[Slot]:
        options = options or QueryOptions()

        def _get(db: Session):
            query = self._scoped(db)
            if options.start_date:
                query = query.filter(self.model.date >= date_type.fromisoformat(options.start_date))
            if options.end_date:
                query = query.filter(self.model.date <= date_type.fromisoformat(options.end_date))
            query = query.order_by(self.model.date, self.model.start_time)
            if options.offset:
                query = query.offset(options.offset)
            if options.limit is not None:
                query = query.limit(options.limit)
            return [self.from_row(r) for r in query.all()]

        return await self._call(_get)

    async def count(self, date: str | None = None) -> int:
        def _count(db: Session):
            query = self._scoped(db)
            if date:
                query = query.filter(self.model.date == date_type.fromisoformat(date))
            return query.count()

        return await self._call(_count)

    async def find_overlapping_slots(
        self,
        date: str,
        start_time: str,
        end_time: str,
        exclude_id: str | None = None,
    ) -> list[Slot]:
        if not self.native_overlap:
            # Custom row mapping: filter in the application
            return filter_overlapping(
                await self.get_by_date(date), date, start_time, end_time, exclude_id
            )

        def _find(db: Session):
            query = self._scoped(db).filter(
                self.model.date == date_type.fromisoformat(date),
                # existing.start < new.end AND existing.end > new.start
                self.model.start_time < time_type.fromisoformat(end_time),
                self.model.end_time > time_type.fromisoformat(start_time),
            )
            numeric_id = _parse_id(exclude_id)
            if numeric_id is not None:
                query = query.filter(self.model.id != numeric_id)
            rows = query.order_by(self.model.start_time).all()
            return [self.from_row(r) for r in rows]

        return await self._call(_find)

    # ── Delete ───────────────────────────────────────────────────────────

    async def delete(self, slot_id: str) -> bool:
        def _delete(db: Session):
            obj = self._get_row(db, slot_id)
            if obj is None:
                return False
            db.delete(obj)
            db.commit()
            return True

        return await self._call(_delete)

    async def delete_by_date(self, date: str) -> int:
        def _delete(db: Session):
            deleted = (
                self._scoped(db)
                .filter(self.model.date == date_type.fromisoformat(date))
                .delete(synchronize_session=False)
            )
            db.commit()
            return deleted

        return await self._call(_delete)

    async def clear(self) -> None:
        def _clear(db: Session):
            deleted = self._scoped(db).delete(synchronize_session=False)
            db.commit()
            logger.info(f"Cleared {deleted} availability slot(s), owner_id={self.owner_id}")

        await self._call(_clear)
