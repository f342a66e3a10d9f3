"""
Document ledger contract (``case_kernel.domain.document_ledger``).

Responsibility
--------------
Declares the read-side contract the transition validator needs from a
document ledger, plus ``LedgerSnapshot``: an immutable view of which
statuses have evidence on file for one record.

Architecture position
---------------------
**Kernel domain layer** -- ZERO I/O.  The persistent implementation is
``case_kernel.services.document_ledger_service.DocumentLedgerService``.

Invariants enforced
-------------------
* Capture-time rule: a document counts toward status X only if it was
  captured while X was active on the record.  A document uploaded later,
  under a different status, never satisfies an earlier gate.
* A snapshot never changes after construction, so validation inside one
  transition sees a consistent view even while uploads continue.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Protocol, runtime_checkable
from uuid import UUID

from case_kernel.domain.dtos import DocumentAttachment
from case_kernel.domain.status_catalog import STATUS_CATALOG, CaseStatus


@runtime_checkable
class DocumentLedger(Protocol):
    """Anything that can answer the gating question for a record."""

    def has_document_for(self, record_id: UUID, status_id: CaseStatus | str) -> bool:
        """True iff an attachment captured at ``status_id`` exists for the record."""
        ...


@dataclass(frozen=True)
class LedgerSnapshot:
    """Evidenced statuses for a single record at one point in time."""

    record_id: UUID
    evidenced: frozenset[CaseStatus] = field(default_factory=frozenset)

    @classmethod
    def from_attachments(
        cls,
        record_id: UUID,
        attachments: Iterable[DocumentAttachment],
    ) -> LedgerSnapshot:
        return cls(
            record_id=record_id,
            evidenced=frozenset(
                a.status_when_uploaded for a in attachments if a.record_id == record_id
            ),
        )

    def has_document_for(self, record_id: UUID, status_id: CaseStatus | str) -> bool:
        if record_id != self.record_id:
            return False
        return STATUS_CATALOG.parse(status_id) in self.evidenced
