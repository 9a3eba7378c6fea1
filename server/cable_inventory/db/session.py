"""Database session management."""

from collections.abc import Generator
from typing import Any, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from cable_inventory.config import get_settings
from cable_inventory.db.base import Base

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker[Session]] = None


def _install_sqlite_listeners(engine: Engine) -> None:
    """
    Make SQLite enforce foreign keys and take the write lock up front.

    pysqlite defers BEGIN until the first write, which would let a second
    import interleave between a pass's catalog read and its ledger writes.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(database_url: str, **kwargs: Any) -> Engine:
    """Create an engine for ``database_url`` with dialect-specific setup applied."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(url, connect_args=connect_args, **kwargs)
        _install_sqlite_listeners(engine)
        return engine
    return create_engine(url, pool_pre_ping=True, **kwargs)


def get_engine() -> Engine:
    """Get or create the SQLAlchemy engine."""
    global _engine
    settings = get_settings()

    if _engine is None:
        if not settings.database_url:
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        _engine = create_db_engine(settings.resolved_database_url)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory."""
    global _SessionLocal

    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.
    Usage: db: Session = Depends(get_db)
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Optional[Engine] = None) -> None:
    """Create any missing tables."""
    # Register every model on the metadata before create_all.
    import cable_inventory.models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def check_db_connection() -> tuple[bool, Optional[str]]:
    """
    Check database connectivity.
    Returns (success, error_message).
    """
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
            conn.commit()
        return True, None
    except Exception:
        # Never leak connection details
        return False, "connection_failed"
