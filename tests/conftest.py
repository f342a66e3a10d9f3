"""
Pytest fixtures for the case kernel test suite.

Provides:
- SQLite database sessions for all tests (one file database per run)
- Service, selector and factory fixtures
- Captured structured logs

Environment Variables:
- DATABASE_URL: Database URL to test against (e.g. a PostgreSQL URL).
  If not set, a SQLite file in the pytest temp directory is used.
"""

import json
import logging
import os
import threading
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy import delete
from sqlalchemy.orm import Session

from case_kernel.db.base import Base
from case_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from case_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from case_kernel.domain.clock import DeterministicClock
from case_kernel.domain.status_catalog import CaseStatus
from case_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from case_kernel.selectors.case_selector import CaseSelector
from case_kernel.services.audit_trail_service import AuditTrailService
from case_kernel.services.case_record_service import CaseRecordService
from case_kernel.services.document_ledger_service import DocumentLedgerService
from case_kernel.services.transition_service import TransitionService

# Actor recorded on every record, attachment and transition in the suite
TEST_ACTOR_ID = uuid4()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """JSON logging at DEBUG for the whole run."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Each test starts with no bound record or actor."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture case_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, transition_service):
            transition_service.request_transition(...)
            logs = captured_logs()
            assert any(r["message"] == "transition_applied" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("case_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


def pytest_configure(config):
    """Markers used by the race tests."""
    config.addinivalue_line(
        "markers", "slow_locks: mark test as potentially waiting for DB locks"
    )


# =============================================================================
# Database: one engine and one schema per run
# =============================================================================
#
# Per-test isolation comes from transaction rollback (regular tests) or a
# DELETE sweep of every table (concurrency tests that really commit).
# =============================================================================


@pytest.fixture(scope="session")
def db_engine(tmp_path_factory):
    """Single engine for the entire test session."""
    db_url = os.environ.get("DATABASE_URL")
    if db_url is None:
        db_url = f"sqlite:///{tmp_path_factory.mktemp('db') / 'case_kernel_test.db'}"
    eng = init_engine_from_url(db_url, echo=False, pool_size=10, max_overflow=10)
    yield eng
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    """Fresh schema for the run, with the immutability rules armed throughout."""
    drop_tables()
    create_tables()
    register_immutability_listeners()
    yield
    unregister_immutability_listeners()
    drop_tables()


def _delete_all_rows(engine):
    """Remove all rows with Core DELETEs (ORM immutability listeners do not fire).

    Used by concurrency tests that need real commits and therefore
    cannot rely on the rollback isolation pattern.
    """
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(delete(table))


# =============================================================================
# Rolled-back session (most tests)
# =============================================================================


@pytest.fixture(scope="function")
def session(db_tables, db_engine) -> Generator[Session, None, None]:
    """Session whose work is undone after the test.

    The session joins an outer transaction on a dedicated connection with
    ``join_transaction_mode="create_savepoint"``, so a ``commit()`` or
    ``rollback()`` inside the test only ends a savepoint.  Teardown rolls
    the outer transaction back.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# =============================================================================
# Concurrency testing fixtures (real commits + DELETE cleanup)
# =============================================================================


@pytest.fixture(scope="function")
def committed_session_factory(db_engine, db_tables):
    """Provide a tracked session factory whose sessions really commit.

    Each thread should create its own session using this factory.
    On teardown all tracked sessions are rolled back and closed, then
    every table is emptied.
    """
    factory = get_session_factory()
    created_sessions = []
    lock = threading.Lock()

    def tracked_factory() -> Session:
        with lock:
            s = factory()
            created_sessions.append(s)
            return s

    yield tracked_factory

    for s in created_sessions:
        if s.in_transaction():
            s.rollback()
        s.close()
    _delete_all_rows(db_engine)


@pytest.fixture(scope="function")
def committed_session(committed_session_factory) -> Generator[Session, None, None]:
    """A single session that performs real commits."""
    sess = committed_session_factory()
    yield sess


@pytest.fixture
def test_actor_id() -> UUID:
    """The actor id used throughout the suite."""
    return TEST_ACTOR_ID


# Clock fixtures


@pytest.fixture
def deterministic_clock():
    """Clock starting at 2024-01-01 12:00 UTC that moves only when told."""
    return DeterministicClock()


# Service fixtures


@pytest.fixture
def record_service(session: Session, deterministic_clock) -> CaseRecordService:
    return CaseRecordService(session, deterministic_clock)


@pytest.fixture
def ledger_service(session: Session, deterministic_clock) -> DocumentLedgerService:
    return DocumentLedgerService(session, deterministic_clock)


@pytest.fixture
def audit_service(session: Session) -> AuditTrailService:
    return AuditTrailService(session)


@pytest.fixture
def transition_service(session: Session, deterministic_clock) -> TransitionService:
    return TransitionService(session, deterministic_clock)


# Selector fixtures


@pytest.fixture
def case_selector(session: Session) -> CaseSelector:
    return CaseSelector(session)


# Factory fixtures


@pytest.fixture
def open_record(record_service, test_actor_id):
    """Factory fixture to open a case record with a unique number."""
    counter = {"n": 0}

    def _open(record_number: str | None = None):
        counter["n"] += 1
        number = record_number or f"FR-{counter['n']:05d}"
        return record_service.open_record(number, test_actor_id)

    return _open


@pytest.fixture
def move_to(transition_service, ledger_service, deterministic_clock, test_actor_id):
    """Factory fixture that moves a record to a status, attaching evidence first
    when the status is gated.  Advances the clock by one second per move.
    """
    from case_kernel.domain.status_catalog import STATUS_CATALOG

    def _move(record, status: CaseStatus, note: str | None = None):
        if STATUS_CATALOG.definition_for(status).requires_document:
            ledger_service.record_attachment(
                record.id, status, f"{status.value}.pdf", test_actor_id
            )
        deterministic_clock.tick()
        return transition_service.request_transition(
            record, status, test_actor_id, note=note
        )

    return _move
