"""
Transition validator (``case_kernel.domain.transition_validator``).

Responsibility
--------------
Decides whether a requested status transition is legal for a record,
given a document ledger.  Returns a ``TransitionDecision`` instead of
raising so callers can render the reason without a try block; the
workflow engine calls ``raise_if_rejected()``.

Architecture position
---------------------
**Kernel domain layer** -- pure.  ZERO I/O beyond the ledger protocol,
which the engine satisfies with an in-memory ``LedgerSnapshot``.

Invariants enforced
-------------------
* The target must be a catalog status (``UnknownStatusError``).
* A status with ``requires_document`` may only be entered when the
  ledger holds a document captured at that status
  (``DocumentRequiredError``).
* No edge set: backward moves, skipped statuses and same-status requests
  are all permitted.  The business process relies on manual corrections.
"""

from __future__ import annotations

from dataclasses import dataclass

from case_kernel.domain.document_ledger import DocumentLedger
from case_kernel.domain.dtos import CaseRecord
from case_kernel.domain.status_catalog import (
    STATUS_CATALOG,
    CaseStatus,
    StatusCatalog,
    StatusDefinition,
)
from case_kernel.exceptions import (
    DocumentRequiredError,
    TransitionError,
    UnknownStatusError,
)


@dataclass(frozen=True)
class TransitionDecision:
    """Result of validating one requested transition."""

    target: CaseStatus | None
    definition: StatusDefinition | None = None
    error: TransitionError | UnknownStatusError | None = None

    @property
    def is_allowed(self) -> bool:
        return self.error is None

    def raise_if_rejected(self) -> StatusDefinition:
        """Raise the carried error, or return the target definition."""
        if self.error is not None:
            raise self.error
        if self.definition is None:
            raise UnknownStatusError(str(self.target))
        return self.definition


class TransitionValidator:
    """Evidence guard for status transitions."""

    def __init__(self, catalog: StatusCatalog = STATUS_CATALOG):
        self._catalog = catalog

    def validate(
        self,
        record: CaseRecord,
        target_status_id: CaseStatus | str,
        ledger: DocumentLedger,
    ) -> TransitionDecision:
        try:
            definition = self._catalog.definition_for(target_status_id)
        except UnknownStatusError as exc:
            return TransitionDecision(target=None, error=exc)

        if definition.requires_document and not ledger.has_document_for(
            record.id, definition.status
        ):
            return TransitionDecision(
                target=definition.status,
                definition=definition,
                error=DocumentRequiredError(
                    record_id=str(record.id),
                    status=definition.status.value,
                    label=definition.label,
                ),
            )

        return TransitionDecision(target=definition.status, definition=definition)
