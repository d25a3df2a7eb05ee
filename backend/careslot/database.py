from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import settings
from .models import Base


def make_engine(url: str, timeout: float | None = None, **engine_kwargs) -> Engine:
    """Create an engine; SQLite gets a busy timeout and foreign keys."""
    connect_args = {}
    if url.startswith("sqlite"):
        # check_same_thread=False: FastAPI runs sync routes in a thread pool
        connect_args = {
            "check_same_thread": False,
            "timeout": timeout if timeout is not None else settings.store_timeout_seconds,
        }

    engine = create_engine(url, connect_args=connect_args, **engine_kwargs)

    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_fk)

    return engine


def _enable_sqlite_fk(dbapi_connection, _):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = make_engine(settings.resolved_database_url)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables (local runs and tests; production uses Alembic)."""
    Base.metadata.create_all(bind=bind or engine)


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
