"""
SequenceService -- gap-free ordering numbers for the status history.

Responsibility:
    Hands out the ``seq`` stamped on every history entry.  ``seq`` is the
    tie-breaker when two entries share an ``occurred_at``, so it must grow
    strictly across all records.

Architecture position:
    Kernel > Services -- infrastructure used by AuditTrailService.

Invariants enforced:
    - One counter row per sequence name, locked for the rest of the
      caller's transaction (``SELECT ... FOR UPDATE`` on PostgreSQL, the
      IMMEDIATE write lock on SQLite).  Never ``max(seq) + 1``.
    - A value handed to a transaction that rolls back is handed out again;
      committed values have no gaps.

Failure modes:
    - IntegrityError while creating a counter row means another
      transaction created it first; the savepoint is dropped and the
      existing row is locked instead.
"""

from sqlalchemy import BigInteger, String, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, Session, mapped_column

from case_kernel.db.base import Base
from case_kernel.logging_config import get_logger

logger = get_logger("services.sequence")


class SequenceCounter(Base):
    """Last value handed out for one named sequence."""

    __tablename__ = "sequence_counters"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    current_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class SequenceService:
    """Allocates sequence values inside the caller's transaction."""

    STATUS_HISTORY = "status_history"

    def __init__(self, session: Session):
        self._session = session

    def _select(self, name: str, lock: bool):
        stmt = select(SequenceCounter).where(SequenceCounter.name == name)
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self._session.execute(stmt).scalar_one_or_none()

    def _create(self, name: str) -> SequenceCounter:
        try:
            with self._session.begin_nested():
                counter = SequenceCounter(name=name, current_value=0)
                self._session.add(counter)
            return counter
        except IntegrityError:
            logger.debug("sequence_counter_race", extra={"sequence_name": name})
            counter = self._select(name, lock=True)
            if counter is None:
                raise
            return counter

    def next_value(self, name: str) -> int:
        """Increment ``name`` and return the new value (first value is 1)."""
        counter = self._select(name, lock=True) or self._create(name)
        counter.current_value += 1
        self._session.flush()

        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, name: str) -> int | None:
        """Last value handed out, or None if ``name`` was never used."""
        counter = self._select(name, lock=False)
        return counter.current_value if counter else None
