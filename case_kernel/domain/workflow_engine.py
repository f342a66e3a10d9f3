"""
Workflow engine (``case_kernel.domain.workflow_engine``).

Responsibility
--------------
Turns a validated transition request into an updated ``CaseRecord`` and a
``StatusHistoryEntry``.  The engine is a pure function of (record, target,
ledger snapshot) plus an injected clock: it holds no state between calls
and never retains the record it was given.

Architecture position
---------------------
**Kernel domain layer** -- functional core.  ZERO I/O.  Persistence of
the result is the job of ``case_kernel.services.transition_service``.

Invariants enforced
-------------------
* All-or-nothing: validation happens before anything is built; a
  rejected request yields no record copy and no history entry.
* The new percentage is always read from the catalog.
* The history entry captures old/new status and old/new percentage of
  exactly the record that was passed in.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from case_kernel.domain.clock import Clock, SystemClock
from case_kernel.domain.document_ledger import DocumentLedger
from case_kernel.domain.dtos import CaseRecord, StatusHistoryEntry, TransitionResult
from case_kernel.domain.status_catalog import STATUS_CATALOG, CaseStatus, StatusCatalog
from case_kernel.domain.transition_validator import TransitionValidator

DEFAULT_NOTE_TEMPLATE = "Status changed from {old_label} to {new_label}"


def default_note(old_label: str, new_label: str) -> str:
    return DEFAULT_NOTE_TEMPLATE.format(old_label=old_label, new_label=new_label)


class WorkflowEngine:
    """
    Pure transition orchestrator.

    Contract:
        ``request_transition`` either raises the validator's error or
        returns a ``TransitionResult`` whose record has
        ``status == target`` and ``progress_percentage`` taken from the
        catalog.

    Non-goals:
        - Does NOT bump ``version``; the persister owns the token.
        - Does NOT decide when a transition should happen.
    """

    def __init__(
        self,
        catalog: StatusCatalog = STATUS_CATALOG,
        clock: Clock | None = None,
        validator: TransitionValidator | None = None,
    ):
        self._catalog = catalog
        self._clock = clock or SystemClock()
        self._validator = validator or TransitionValidator(catalog)

    def request_transition(
        self,
        record: CaseRecord,
        target_status_id: CaseStatus | str,
        actor_id: UUID,
        ledger: DocumentLedger,
        note: str | None = None,
    ) -> TransitionResult:
        """
        Validate and build a transition.

        Raises:
            UnknownStatusError: Target is not a catalog status.
            DocumentRequiredError: Target needs evidence that is not on file.
        """
        decision = self._validator.validate(record, target_status_id, ledger)
        target = decision.raise_if_rejected()

        # Never stamp earlier than the record's last change; history is read
        # back in occurred_at order.
        now = max(self._clock.now(), record.updated_at)
        old = self._catalog.definition_for(record.status)
        updated = record.with_status(target.status, updated_at=now)

        entry = StatusHistoryEntry(
            id=uuid4(),
            record_id=record.id,
            old_status=old.status,
            new_status=target.status,
            old_percentage=record.progress_percentage,
            new_percentage=target.percentage,
            actor_id=actor_id,
            occurred_at=now,
            note=note if note else default_note(old.label, target.label),
        )
        return TransitionResult(record=updated, history_entry=entry)
