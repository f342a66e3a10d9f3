"""
Module: case_kernel.models.document_attachment
Responsibility: ORM persistence for the fact that a document was attached to
    a case record while a given status was active.  File bytes live in the
    external file store; this row only records that evidence exists.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - status_when_uploaded is write-once (ORM listener in db/immutability.py).
    - record_id references an existing case record (FK, cascade on delete).

Audit relevance:
    The captured status is what the document gate checks.  Deleting an
    attachment is allowed and never rolls back a transition that already
    succeeded.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from case_kernel.db.base import Base
from case_kernel.db.types import UTCDateTime, UUIDString

if TYPE_CHECKING:
    from case_kernel.domain.dtos import DocumentAttachment


class DocumentAttachmentModel(Base):
    """Persistent document attachment."""

    __tablename__ = "case_documents"

    __table_args__ = (
        Index("idx_case_documents_record_status", "record_id", "status_when_uploaded"),
    )

    record_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("case_records.id", ondelete="CASCADE"),
        nullable=False,
    )

    status_when_uploaded: Mapped[str] = mapped_column(String(50), nullable=False)

    document_name: Mapped[str] = mapped_column(String(255), nullable=False)

    uploaded_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    uploaded_by: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<DocumentAttachment {self.document_name} "
            f"record={self.record_id} at={self.status_when_uploaded}>"
        )

    def to_dto(self) -> DocumentAttachment:
        """Convert ORM model to frozen domain DTO."""
        from case_kernel.domain.dtos import DocumentAttachment as DocumentAttachmentDTO
        from case_kernel.domain.status_catalog import CaseStatus

        return DocumentAttachmentDTO(
            id=self.id,
            record_id=self.record_id,
            status_when_uploaded=CaseStatus(self.status_when_uploaded),
            document_name=self.document_name,
            uploaded_at=self.uploaded_at,
            uploaded_by=self.uploaded_by,
        )
