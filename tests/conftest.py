import pytest
from fakeredis import FakeAsyncRedis
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from interview_slots.models import Base, Interviewers
from interview_slots.services.slots import SlotConfig, SlotManager
from interview_slots.services.slots.storage import (
    InMemoryStorageAdapter,
    OrmStorageAdapter,
    RedisStorageAdapter,
    SqlStorageAdapter,
)

BACKENDS = ["memory", "sql", "orm", "redis"]


@pytest.fixture
def config():
    return SlotConfig(interval_minutes=30)


@pytest.fixture
def sqlite_engine():
    # One shared in-memory database, usable from asyncio.to_thread workers
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    Base.metadata.create_all(sqlite_engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=sqlite_engine)

    db = factory()
    db.add_all([
        Interviewers(id=1, name="Ada Lovelace", email="ada@example.com"),
        Interviewers(id=2, name="Alan Turing", email="alan@example.com"),
    ])
    db.commit()
    db.close()
    return factory


@pytest.fixture
def fake_redis():
    return FakeAsyncRedis(decode_responses=True)


@pytest.fixture(params=BACKENDS)
def storage(request):
    """Each storage adapter, behind the same protocol."""
    if request.param == "memory":
        return InMemoryStorageAdapter()
    if request.param == "sql":
        return SqlStorageAdapter(request.getfixturevalue("sqlite_engine"))
    if request.param == "orm":
        return OrmStorageAdapter(request.getfixturevalue("session_factory"), owner_id=1)
    return RedisStorageAdapter(request.getfixturevalue("fake_redis"))


@pytest.fixture
def manager(config):
    return SlotManager(InMemoryStorageAdapter(), config)
