"""
TransitionService -- persisting orchestrator for status transitions.

Responsibility:
    The single mutation entry point for status changes.  Takes a consistent
    ledger snapshot, runs the pure ``WorkflowEngine``, writes the updated
    record with an optimistic-concurrency compare-and-swap, and appends the
    history entry in the same transaction.

Architecture position:
    Kernel > Services -- imperative shell around the functional core
    (``case_kernel.domain.workflow_engine``).

Invariants enforced:
    - All-or-nothing: validation happens before any write.  The record
      update and the history entry share the caller's transaction; on any
      failure the caller rolls both back.
    - At most one concurrent transition wins per record: the UPDATE only
      matches when the stored ``version`` equals the caller's, and bumps it
      by exactly one.
    - The persisted percentage is always the catalog percentage of the new
      status.

Failure modes:
    - UnknownStatusError / DocumentRequiredError: Rejected by the validator;
      nothing was written.
    - RecordNotFoundError: The record does not exist.
    - ConcurrentModificationError: Another transition committed first; the
      caller must refetch the record and retry.
    - PersistenceFailureError: The database rejected a write; the caller's
      transaction must be rolled back.

Audit relevance:
    Every successful call produces exactly one hash-chained history entry.
    Rejected and conflicting requests are logged but never audited.
"""

from dataclasses import replace
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from case_kernel.domain.clock import Clock, SystemClock
from case_kernel.domain.dtos import CaseRecord, TransitionResult
from case_kernel.domain.status_catalog import STATUS_CATALOG, CaseStatus, StatusCatalog
from case_kernel.domain.workflow_engine import WorkflowEngine
from case_kernel.exceptions import (
    ConcurrentModificationError,
    PersistenceFailureError,
    RecordNotFoundError,
    StatusError,
    TransitionError,
)
from case_kernel.logging_config import LogContext, get_logger
from case_kernel.models.case_record import CaseRecordModel
from case_kernel.services.audit_trail_service import AuditTrailService
from case_kernel.services.base import BaseService
from case_kernel.services.document_ledger_service import DocumentLedgerService

logger = get_logger("services.transition")


class TransitionService(BaseService[CaseRecordModel]):
    """
    Service that applies status transitions to persisted records.

    Contract:
        ``request_transition`` either raises without writing anything, or
        flushes one record update plus one history entry and returns the
        persisted result (version already bumped).

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT retry on conflict; retry policy belongs to the caller.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        catalog: StatusCatalog = STATUS_CATALOG,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._ledger = DocumentLedgerService(session, self._clock)
        self._audit = AuditTrailService(session)
        self._engine = WorkflowEngine(catalog=catalog, clock=self._clock)

    def request_transition(
        self,
        record: CaseRecord,
        target_status_id: CaseStatus | str,
        actor_id: UUID,
        note: str | None = None,
    ) -> TransitionResult:
        """
        Move ``record`` to ``target_status_id``.

        Preconditions:
            - ``record`` is the caller's latest view of the record; its
              ``version`` is the optimistic-concurrency token.

        Postconditions:
            - The stored record has the new status, catalog percentage and
              ``version == record.version + 1``.
            - One history entry is appended with the next ``seq``.

        Raises:
            UnknownStatusError: Target is not a catalog status.
            DocumentRequiredError: Target needs evidence that is not on file.
            RecordNotFoundError: Record does not exist.
            ConcurrentModificationError: ``record.version`` is stale.
            PersistenceFailureError: A write failed.
        """
        with LogContext.bind(record_id=str(record.id), actor_id=str(actor_id)):
            try:
                exists = self.session.get(CaseRecordModel, record.id) is not None
            except SQLAlchemyError as exc:
                raise PersistenceFailureError(str(record.id), "load_record", str(exc)) from exc
            if not exists:
                raise RecordNotFoundError(str(record.id))

            ledger = self._ledger.snapshot(record.id)
            try:
                result = self._engine.request_transition(
                    record, target_status_id, actor_id, ledger, note=note
                )
            except (StatusError, TransitionError) as exc:
                logger.warning(
                    "transition_rejected",
                    extra={
                        "from_status": record.status.value,
                        "target_status": str(getattr(target_status_id, "value", target_status_id)),
                        "error_code": exc.code,
                    },
                )
                raise

            new_version = record.version + 1
            updated = result.record
            try:
                matched = self.session.execute(
                    update(CaseRecordModel)
                    .where(
                        CaseRecordModel.id == record.id,
                        CaseRecordModel.version == record.version,
                    )
                    .values(
                        status=updated.status.value,
                        progress_percentage=updated.progress_percentage,
                        version=new_version,
                        updated_at=updated.updated_at,
                        updated_by_id=actor_id,
                    )
                    .execution_options(synchronize_session="evaluate")
                ).rowcount
            except SQLAlchemyError as exc:
                raise PersistenceFailureError(str(record.id), "update_record", str(exc)) from exc

            if matched != 1:
                logger.warning(
                    "transition_conflict",
                    extra={
                        "expected_version": record.version,
                        "target_status": updated.status.value,
                    },
                )
                raise ConcurrentModificationError(str(record.id), record.version)

            try:
                entry = self._audit.append(result.history_entry)
            except SQLAlchemyError as exc:
                raise PersistenceFailureError(str(record.id), "append_history", str(exc)) from exc

            logger.info(
                "transition_applied",
                extra={
                    "from_status": entry.old_status.value,
                    "to_status": entry.new_status.value,
                    "progress_percentage": entry.new_percentage,
                    "version": new_version,
                    "seq": entry.seq,
                },
            )
            return TransitionResult(
                record=replace(updated, version=new_version),
                history_entry=entry,
            )
