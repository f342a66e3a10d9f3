"""
AuditTrailService -- append-only, hash-chained status history.

Responsibility:
    Persists ``StatusHistoryEntry`` values produced by the workflow engine,
    links each entry into its record's hash chain, and answers
    "what changed, when, by whom" for compliance review.

Architecture position:
    Kernel > Services -- imperative shell, called by TransitionService.

Invariants enforced:
    - Append-only: history rows are never modified or deleted (ORM
      listeners on StatusHistoryModel).
    - Sequence monotonicity via SequenceService (never raw SQL max+1);
      ``seq`` breaks ties between entries with the same ``occurred_at``.
    - Per-record hash chain: ``hash = H(fields + prev_hash)`` where
      ``prev_hash`` is the hash of the record's previous entry.

Failure modes:
    - ValueError: Entry is missing a required field.
    - AuditChainBrokenError: Recomputed hash does not match stored hash,
      or prev_hash does not match the predecessor's hash.

Audit relevance:
    This IS the audit trail.  Replaying ``history_for(record_id)`` from
    record_created reproduces the record's current status.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from case_kernel.domain.dtos import StatusHistoryEntry
from case_kernel.exceptions import AuditChainBrokenError
from case_kernel.logging_config import get_logger
from case_kernel.models.status_history import StatusHistoryModel
from case_kernel.services.base import BaseService
from case_kernel.services.sequence_service import SequenceService
from case_kernel.utils.hashing import hash_status_entry

logger = get_logger("services.audit_trail")

_REQUIRED_FIELDS = (
    "id",
    "record_id",
    "old_status",
    "new_status",
    "old_percentage",
    "new_percentage",
    "actor_id",
    "occurred_at",
    "note",
)


def _entry_hash(row: StatusHistoryModel) -> str:
    return hash_status_entry(
        record_id=str(row.record_id),
        old_status=row.old_status,
        new_status=row.new_status,
        old_percentage=row.old_percentage,
        new_percentage=row.new_percentage,
        actor_id=str(row.actor_id),
        occurred_at=row.occurred_at,
        note=row.note,
        prev_hash=row.prev_hash,
    )


class AuditTrailService(BaseService[StatusHistoryModel]):
    """
    Service for appending and reading status history.

    Contract:
        ``append`` accepts an engine-built entry (``seq``/hash unset) and
        returns the stored entry with ``seq``, ``prev_hash`` and ``hash``
        filled in.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT validate the transition itself; that already happened
          in the workflow engine.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._sequence_service = SequenceService(session)

    def _last_hash(self, record_id: UUID) -> str | None:
        last = self.session.execute(
            select(StatusHistoryModel)
            .where(StatusHistoryModel.record_id == record_id)
            .order_by(StatusHistoryModel.seq.desc())
            .limit(1)
        ).scalar_one_or_none()
        return last.hash if last else None

    def append(self, entry: StatusHistoryEntry) -> StatusHistoryEntry:
        """
        Append one entry to its record's history.

        Preconditions:
            - Every recorded field of ``entry`` is non-null.

        Postconditions:
            - A new row is flushed with a monotonically increasing ``seq``
              and a valid hash chain link.

        Raises:
            ValueError: If a required field is None.
        """
        missing = [name for name in _REQUIRED_FIELDS if getattr(entry, name) is None]
        if missing:
            raise ValueError(f"status history entry is missing {', '.join(missing)}")

        seq = self._sequence_service.next_value(SequenceService.STATUS_HISTORY)
        prev_hash = self._last_hash(entry.record_id)

        row = StatusHistoryModel(
            id=entry.id,
            record_id=entry.record_id,
            seq=seq,
            old_status=entry.old_status.value,
            new_status=entry.new_status.value,
            old_percentage=entry.old_percentage,
            new_percentage=entry.new_percentage,
            actor_id=entry.actor_id,
            occurred_at=entry.occurred_at,
            note=entry.note,
            prev_hash=prev_hash,
        )
        row.hash = _entry_hash(row)

        self.session.add(row)
        self.session.flush()

        logger.info(
            "status_history_appended",
            extra={
                "record_id": str(entry.record_id),
                "seq": seq,
                "old_status": entry.old_status.value,
                "new_status": entry.new_status.value,
            },
        )
        return row.to_dto()

    def history_for(self, record_id: UUID) -> tuple[StatusHistoryEntry, ...]:
        """All entries for a record, oldest first (ties by insertion order)."""
        rows = self.session.execute(
            select(StatusHistoryModel)
            .where(StatusHistoryModel.record_id == record_id)
            .order_by(StatusHistoryModel.occurred_at, StatusHistoryModel.seq)
        ).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def latest_for(self, record_id: UUID) -> StatusHistoryEntry | None:
        history = self.history_for(record_id)
        return history[-1] if history else None

    def validate_chain(self, record_id: UUID) -> bool:
        """
        Validate a record's history chain.

        Postconditions:
            - Returns ``True`` only if every entry's stored ``hash``
              matches the recomputed value and every entry's
              ``prev_hash`` matches its predecessor's ``hash``.

        Raises:
            AuditChainBrokenError: If chain validation fails at any point.
        """
        rows = self.session.execute(
            select(StatusHistoryModel)
            .where(StatusHistoryModel.record_id == record_id)
            .order_by(StatusHistoryModel.seq)
        ).scalars().all()

        expected_prev: str | None = None
        for position, row in enumerate(rows):
            # Only the first entry may start a chain.
            if row.is_genesis != (position == 0) or row.prev_hash != expected_prev:
                logger.critical(
                    "audit_chain_broken",
                    extra={"record_id": str(record_id), "seq": row.seq},
                )
                raise AuditChainBrokenError(
                    str(record_id),
                    row.seq,
                    expected_prev or "None",
                    row.prev_hash or "None",
                )

            expected_hash = _entry_hash(row)
            if row.hash != expected_hash:
                logger.critical(
                    "audit_chain_broken",
                    extra={"record_id": str(record_id), "seq": row.seq},
                )
                raise AuditChainBrokenError(
                    str(record_id), row.seq, expected_hash, row.hash
                )

            expected_prev = row.hash

        logger.debug(
            "audit_chain_valid",
            extra={"record_id": str(record_id), "entries": len(rows)},
        )
        return True
