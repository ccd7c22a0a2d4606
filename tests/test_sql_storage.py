import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from interview_slots.services.slots import QueryOptions, Slot
from interview_slots.services.slots.storage import SqlStorageAdapter
from interview_slots.services.slots.types import DailyStats

DAY = "2025-03-10"


def make(slot_id, start, end, date=DAY, metadata=None):
    return Slot(id=slot_id, date=date, start_time=start, end_time=end, metadata=metadata)


@pytest.mark.asyncio
async def test_table_created_lazily_with_indexes(sqlite_engine):
    storage = SqlStorageAdapter(sqlite_engine, table_name="availability")
    assert not inspect(sqlite_engine).has_table("availability")

    await storage.count()

    inspector = inspect(sqlite_engine)
    assert inspector.has_table("availability")
    index_names = {ix["name"] for ix in inspector.get_indexes("availability")}
    assert {"idx_availability_date", "idx_availability_date_time"} <= index_names


@pytest.mark.asyncio
async def test_initialize_is_idempotent(sqlite_engine):
    storage = SqlStorageAdapter(sqlite_engine)
    await storage.initialize()
    await storage.initialize()

    # A second adapter on the same table must not fail on existing schema
    other = SqlStorageAdapter(sqlite_engine)
    await other.initialize()
    assert await other.count() == 0


@pytest.mark.asyncio
async def test_without_auto_create_table_missing_table_raises(sqlite_engine):
    storage = SqlStorageAdapter(sqlite_engine, table_name="not_there", auto_create_table=False)

    with pytest.raises(OperationalError):
        await storage.count()


@pytest.mark.asyncio
async def test_metadata_round_trip(sqlite_engine):
    storage = SqlStorageAdapter(sqlite_engine)
    await storage.save(make("m1", "09:00", "10:00", metadata={"candidate": "Grace", "round": 2}))
    await storage.save(make("m2", "10:00", "11:00"))

    first = await storage.get_by_id("m1")
    second = await storage.get_by_id("m2")
    assert first.metadata == {"candidate": "Grace", "round": 2}
    assert second.metadata is None


@pytest.mark.asyncio
async def test_upsert_updates_existing_row(sqlite_engine):
    storage = SqlStorageAdapter(sqlite_engine)
    await storage.save(make("u1", "09:00", "10:00", metadata={"v": 1}))
    await storage.save(make("u1", "09:30", "10:30", metadata={"v": 2}))

    slot = await storage.get_by_id("u1")
    assert (slot.start_time, slot.end_time, slot.metadata) == ("09:30", "10:30", {"v": 2})
    assert await storage.count() == 1


@pytest.mark.asyncio
async def test_pagination(sqlite_engine):
    storage = SqlStorageAdapter(sqlite_engine)
    await storage.bulk_save([
        make(f"p{i}", f"{9 + i:02d}:00", f"{9 + i:02d}:30") for i in range(5)
    ])

    page = await storage.get_with_pagination(QueryOptions(limit=2, offset=2))
    assert [s.id for s in page.slots] == ["p2", "p3"]
    assert page.total == 5
    assert page.has_more

    last = await storage.get_with_pagination(QueryOptions(limit=2, offset=4))
    assert [s.id for s in last.slots] == ["p4"]
    assert not last.has_more


@pytest.mark.asyncio
async def test_daily_stats(sqlite_engine):
    storage = SqlStorageAdapter(sqlite_engine)
    await storage.bulk_save([
        make("d1", "09:00", "10:00"),
        make("d2", "13:00", "14:30"),
        make("d3", "09:00", "09:30", date="2025-03-12"),
        make("d4", "09:00", "09:30", date="2025-04-01"),
    ])

    stats = await storage.get_daily_stats(DAY, "2025-03-31")
    assert stats == [
        DailyStats(date=DAY, slot_count=2, total_minutes=150),
        DailyStats(date="2025-03-12", slot_count=1, total_minutes=30),
    ]


@pytest.mark.asyncio
async def test_drop_table_then_recreate_on_use(sqlite_engine):
    storage = SqlStorageAdapter(sqlite_engine)
    await storage.save(make("x", "09:00", "10:00"))

    await storage.drop_table()
    assert not inspect(sqlite_engine).has_table("slots")

    assert await storage.count() == 0
    assert inspect(sqlite_engine).has_table("slots")


@pytest.mark.asyncio
async def test_tables_are_independent(sqlite_engine):
    first = SqlStorageAdapter(sqlite_engine, table_name="slots_1")
    second = SqlStorageAdapter(sqlite_engine, table_name="slots_2")

    await first.save(make("a", "09:00", "10:00"))

    assert await first.count() == 1
    assert await second.count() == 0
