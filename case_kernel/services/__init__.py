"""Services for the case kernel (write side)."""

from case_kernel.services.audit_trail_service import AuditTrailService
from case_kernel.services.case_record_service import CaseRecordService
from case_kernel.services.document_ledger_service import DocumentLedgerService
from case_kernel.services.sequence_service import SequenceService
from case_kernel.services.transition_service import TransitionService

__all__ = [
    "AuditTrailService",
    "CaseRecordService",
    "DocumentLedgerService",
    "SequenceService",
    "TransitionService",
]
