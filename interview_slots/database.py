from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from .config import settings

# check_same_thread=False: sessions are used from worker threads (asyncio.to_thread)
connect_args = {"check_same_thread": False} if settings.is_sqlite else {}

engine = create_engine(
    settings.resolved_database_url,
    connect_args=connect_args,
)


# Foreign keys are off by default in SQLite
@event.listens_for(engine, "connect")
def enable_sqlite_fk(dbapi_connection, _):
    if not settings.is_sqlite:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def init_db() -> None:
    """Create host tables (availability_slots, interviewers) if missing."""
    from .models import Base

    if settings.is_sqlite:
        db_path = settings.resolved_database_url.replace("sqlite:///", "", 1)
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    Base.metadata.create_all(bind=engine)
