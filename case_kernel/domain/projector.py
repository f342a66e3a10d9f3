"""
Record status projector (``case_kernel.domain.projector``).

Read-only classification helpers used by reporting and export
collaborators.  Pure functions, no side effects.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from case_kernel.domain.document_ledger import DocumentLedger
from case_kernel.domain.dtos import CaseRecord
from case_kernel.domain.status_catalog import STATUS_CATALOG, CaseStatus

TERMINAL_STATUSES: frozenset[CaseStatus] = frozenset({
    CaseStatus.FUNERAL_COMPLETED,
    CaseStatus.AGREEMENT_BREACHED,
})

PAYMENT_AT_RISK_STATUSES: frozenset[CaseStatus] = frozenset({
    CaseStatus.PAYMENT_REMINDER_1,
    CaseStatus.PAYMENT_REMINDER_2,
    CaseStatus.PAYMENT_REMINDER_FINAL,
    CaseStatus.AGREEMENT_BREACHED,
})

DEFAULT_REMINDER_INTERVAL_DAYS = 7


def is_terminal(status: CaseStatus | str) -> bool:
    """Completed, or ended in breach."""
    return STATUS_CATALOG.parse(status) in TERMINAL_STATUSES


def is_active(status: CaseStatus | str) -> bool:
    return not is_terminal(status)


def is_payment_at_risk(status: CaseStatus | str) -> bool:
    """A payment reminder has gone out, or the agreement was breached."""
    return STATUS_CATALOG.parse(status) in PAYMENT_AT_RISK_STATUSES


def is_overdue(
    record: CaseRecord,
    as_of: datetime,
    reminder_interval_days: int = DEFAULT_REMINDER_INTERVAL_DAYS,
) -> bool:
    """Payment is at risk and the record has not moved for a full reminder interval.

    A breached agreement is terminal and never overdue.
    """
    if record.status == CaseStatus.AGREEMENT_BREACHED:
        return False
    if not is_payment_at_risk(record.status):
        return False
    return as_of - record.updated_at > timedelta(days=reminder_interval_days)


def needs_document(record: CaseRecord, ledger: DocumentLedger) -> bool:
    """The current status requires evidence that is not on file.

    Gating is only checked when a transition happens, so a record can sit
    in a gated status after its document was removed.
    """
    definition = STATUS_CATALOG.definition_for(record.status)
    if not definition.requires_document:
        return False
    return not ledger.has_document_for(record.id, record.status)
