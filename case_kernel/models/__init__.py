"""Persistence models for the case kernel."""

from case_kernel.models.case_record import CaseRecordModel
from case_kernel.models.document_attachment import DocumentAttachmentModel
from case_kernel.models.status_history import StatusHistoryModel

__all__ = [
    "CaseRecordModel",
    "DocumentAttachmentModel",
    "StatusHistoryModel",
]
