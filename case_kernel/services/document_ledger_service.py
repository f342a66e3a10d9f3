"""
DocumentLedgerService -- persistent document ledger.

Responsibility:
    Records that a document was attached to a case record while a given
    status was active, removes attachments, and answers the gating question
    "is there evidence on file for status X?".

Architecture position:
    Kernel > Services -- imperative shell.  Satisfies the
    ``case_kernel.domain.document_ledger.DocumentLedger`` protocol and
    hands immutable ``LedgerSnapshot`` values to the pure workflow engine.

Invariants enforced:
    - Capture-time rule: ``status_when_uploaded`` is fixed when the
      attachment is recorded and never changes afterwards (ORM listener).
    - Removing an attachment never rolls back a transition that already
      succeeded; gating is checked only at transition time.

Failure modes:
    - RecordNotFoundError: Record does not exist.
    - UnknownStatusError: Status is not in the catalog.
    - AttachmentNotFoundError: Attachment to remove does not exist.
"""

from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from case_kernel.domain.clock import Clock, SystemClock
from case_kernel.domain.document_ledger import LedgerSnapshot
from case_kernel.domain.dtos import DocumentAttachment
from case_kernel.domain.status_catalog import STATUS_CATALOG, CaseStatus
from case_kernel.exceptions import AttachmentNotFoundError, RecordNotFoundError
from case_kernel.logging_config import get_logger
from case_kernel.models.case_record import CaseRecordModel
from case_kernel.models.document_attachment import DocumentAttachmentModel
from case_kernel.services.base import BaseService

logger = get_logger("services.document_ledger")


class DocumentLedgerService(BaseService[DocumentAttachmentModel]):
    """
    Service for document attachments.

    Non-goals:
        - Does NOT store file bytes; the external file store owns them.
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def _require_record(self, record_id: UUID) -> CaseRecordModel:
        record = self.session.get(CaseRecordModel, record_id)
        if record is None:
            raise RecordNotFoundError(str(record_id))
        return record

    def has_document_for(self, record_id: UUID, status_id: CaseStatus | str) -> bool:
        """True iff an attachment captured at ``status_id`` exists for the record."""
        status = STATUS_CATALOG.parse(status_id)
        return bool(
            self.session.execute(
                select(
                    exists().where(
                        DocumentAttachmentModel.record_id == record_id,
                        DocumentAttachmentModel.status_when_uploaded == status.value,
                    )
                )
            ).scalar()
        )

    def record_attachment(
        self,
        record_id: UUID,
        status_id: CaseStatus | str,
        document_name: str,
        uploaded_by: UUID,
    ) -> DocumentAttachment:
        """
        Store a new attachment captured at ``status_id``.

        Raises:
            UnknownStatusError: ``status_id`` is not in the catalog.
            RecordNotFoundError: The record does not exist.
        """
        status = STATUS_CATALOG.parse(status_id)
        self._require_record(record_id)

        attachment = DocumentAttachmentModel(
            record_id=record_id,
            status_when_uploaded=status.value,
            document_name=document_name,
            uploaded_at=self._clock.now(),
            uploaded_by=uploaded_by,
        )
        self.session.add(attachment)
        self.session.flush()

        logger.info(
            "attachment_recorded",
            extra={
                "record_id": str(record_id),
                "attachment_id": str(attachment.id),
                "status_when_uploaded": status.value,
            },
        )
        return attachment.to_dto()

    def attach_for_current_status(
        self,
        record_id: UUID,
        document_name: str,
        uploaded_by: UUID,
    ) -> DocumentAttachment:
        """Store an attachment captured at the record's current status.

        This is what an upload does: the document counts as evidence for
        whatever status the record is in at that moment.
        """
        record = self._require_record(record_id)
        return self.record_attachment(record_id, record.status, document_name, uploaded_by)

    def remove_attachment(self, attachment_id: UUID) -> None:
        """
        Delete one attachment.

        Raises:
            AttachmentNotFoundError: No attachment with this id.
        """
        attachment = self.session.get(DocumentAttachmentModel, attachment_id)
        if attachment is None:
            raise AttachmentNotFoundError(str(attachment_id))

        record_id = attachment.record_id
        status = attachment.status_when_uploaded
        self.session.delete(attachment)
        self.session.flush()

        logger.info(
            "attachment_removed",
            extra={
                "record_id": str(record_id),
                "attachment_id": str(attachment_id),
                "status_when_uploaded": status,
            },
        )

    def attachments_for(self, record_id: UUID) -> tuple[DocumentAttachment, ...]:
        """All attachments of a record, oldest first."""
        rows = self.session.execute(
            select(DocumentAttachmentModel)
            .where(DocumentAttachmentModel.record_id == record_id)
            .order_by(DocumentAttachmentModel.uploaded_at, DocumentAttachmentModel.id)
        ).scalars().all()
        return tuple(row.to_dto() for row in rows)

    def snapshot(self, record_id: UUID) -> LedgerSnapshot:
        """Immutable view of the statuses evidenced for one record."""
        statuses = self.session.execute(
            select(DocumentAttachmentModel.status_when_uploaded)
            .where(DocumentAttachmentModel.record_id == record_id)
            .distinct()
        ).scalars().all()
        return LedgerSnapshot(
            record_id=record_id,
            evidenced=frozenset(CaseStatus(value) for value in statuses),
        )
