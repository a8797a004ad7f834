"""
Database wiring for the optional ledger store.

Responsibility:
    Holds the process-wide SQLAlchemy engine and session factory used by
    ``LedgerStore``, hands out transactional sessions, and creates or drops
    the ledger tables.

Architecture position:
    Kernel > DB.  Nothing outside ``backoffice_kernel`` needs this module
    unless the host opts into relational persistence.

Invariants enforced:
    - ``session_scope`` commits when the block completes and rolls back
      when it raises, so an entry, its lines and its GL postings are
      stored together or not at all.
    - The immutability listeners are registered whenever tables are
      created.

Failure modes:
    - RuntimeError when a session or the engine is requested before
      ``init_engine_from_url``.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backoffice_kernel.logging_config import get_logger

logger = get_logger("db.engine")

IN_MEMORY_SQLITE_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})


@dataclass
class _Database:
    engine: Engine
    sessions: sessionmaker[Session]


_database: _Database | None = None


def _current() -> _Database:
    if _database is None:
        raise RuntimeError(
            "No ledger database configured; call init_engine_from_url() first."
        )
    return _database


def init_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """
    Point the store at ``database_url`` and return the new engine.

    An in-memory SQLite database lives only as long as its connection, so
    those URLs get a single shared connection.
    """
    global _database

    options: dict = {"echo": echo}
    if database_url in IN_MEMORY_SQLITE_URLS:
        options.update(poolclass=StaticPool, connect_args={"check_same_thread": False})

    engine = create_engine(database_url, **options)
    _database = _Database(engine, sessionmaker(bind=engine, expire_on_commit=False))

    logger.info("ledger_database_configured", extra={"dialect": engine.dialect.name})
    return engine


def get_engine() -> Engine:
    return _current().engine


def get_session() -> Session:
    """A new session; the caller owns commit and close."""
    return _current().sessions()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    One unit of work::

        with session_scope() as session:
            LedgerStore(session).save_entry(entry)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("ledger_transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create the ledger tables and arm the immutability listeners."""
    from backoffice_kernel.db.base import Base
    from backoffice_kernel.db.immutability import register_immutability_listeners
    import backoffice_kernel.models  # noqa: F401  registers the mapped classes

    Base.metadata.create_all(get_engine())
    register_immutability_listeners()
    logger.info("ledger_tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables() -> None:
    """Drop the ledger tables (tests and throwaway databases)."""
    from backoffice_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose of the engine and forget the configuration."""
    global _database
    if _database is not None:
        _database.engine.dispose()
    _database = None
