"""
Module: case_kernel.db.engine
Responsibility: Owns the process-wide SQLAlchemy engine and session factory
    for the case kernel, and the unit-of-work helper ``session_scope()``.
Architecture position: Kernel > DB.  May import from db/base.py.
    MUST NOT import from services/, selectors/, domain/, or outer layers
    (create_tables/drop_tables import models and the sequence table lazily).

Invariants enforced:
    - PostgreSQL is the production backend: pooled connections with
      pre-ping, READ COMMITTED, row locks on sequence counters.
    - SQLite serves tests and local tooling: foreign keys are switched on
      per connection, transactions begin IMMEDIATE so concurrent writers
      queue instead of deadlocking, and in-memory databases share one
      connection through StaticPool.

Failure modes:
    - RuntimeError when a session or the engine is requested before
      init_engine_from_url().

Audit relevance:
    session_scope() commits a status change and its history entry together,
    or neither.
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from case_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_NOT_INITIALIZED = "Database not initialized; call init_engine_from_url() first."

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _on_sqlite_connect(dbapi_connection, connection_record):
    # Hand transaction control to SQLAlchemy so SAVEPOINT works.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_sqlite_begin(conn):
    # Writers are serialized: the write lock is taken at BEGIN.
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def _create_sqlite_engine(database_url: str, echo: bool) -> Engine:
    url = make_url(database_url)
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, echo=echo, **kwargs)
    event.listen(engine, "connect", _on_sqlite_connect)
    event.listen(engine, "begin", _on_sqlite_begin)
    return engine


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the kernel's engine and session factory, replacing any previous one.

    Args:
        database_url: PostgreSQL URL in production, SQLite URL in tests.
        echo: Echo SQL statements to the SQLAlchemy logger.
        pool_size: Pooled connections kept open (ignored for SQLite).
        max_overflow: Extra connections allowed above pool_size (ignored for SQLite).
        pool_pre_ping: Check pooled connections before handing them out.
        pool_timeout: Seconds to wait for a free pooled connection.
        pool_recycle: Seconds before a pooled connection is replaced.
    """
    global _engine, _SessionFactory

    dialect = make_url(database_url).get_backend_name()
    if dialect == "sqlite":
        _engine = _create_sqlite_engine(database_url, echo)
    else:
        _engine = create_engine(
            database_url,
            echo=echo,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            isolation_level="READ COMMITTED",
        )

    # Sessions keep loaded values after commit; DTOs are built from them.
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={
            "dialect": dialect,
            "pool_size": None if dialect == "sqlite" else pool_size,
            "echo": echo,
        },
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Session factory for callers that open their own sessions (one per thread)."""
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Unit of work: commit on normal exit, roll back and re-raise on error.

    Usage:
        with session_scope() as session:
            TransitionService(session).request_transition(record, target, actor_id)
    """
    session = get_session()
    try:
        yield session
        session.commit()
        logger.debug("unit_of_work_committed")
    except Exception:
        session.rollback()
        logger.warning("unit_of_work_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _metadata():
    from case_kernel.db.base import Base
    import case_kernel.models  # noqa: F401
    import case_kernel.services.sequence_service  # noqa: F401

    return Base.metadata


def create_tables() -> None:
    """Create every kernel table that does not exist yet."""
    _metadata().create_all(get_engine())


def drop_tables() -> None:
    """Drop every kernel table.  Tests and local tooling only."""
    _metadata().drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


@atexit.register
def _dispose_at_exit():
    if _engine is not None:
        try:
            _engine.dispose()
        except SQLAlchemyError:
            logger.debug("engine_dispose_failed_at_exit")
