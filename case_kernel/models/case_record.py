"""
Module: case_kernel.models.case_record
Responsibility: ORM persistence for the workflow-relevant slice of a case
    record: its current status, derived progress percentage and optimistic
    concurrency version.
Architecture position: Kernel > Models.  May import from db/ and
    domain/status_catalog only.

Invariants enforced:
    - progress_percentage equals the catalog percentage of status; the
      DTO conversion rejects rows that disagree.
    - version starts at 1 and is bumped by exactly one on every persisted
      transition (compare-and-swap in TransitionService).
    - record_number is unique (uq_case_record_number).

Failure modes:
    - IntegrityError on duplicate record_number.
    - ValueError from to_dto() when a row's percentage drifted from its status.

Audit relevance:
    The current status is the head of the record's status history; replaying
    the history must land on exactly this row's status and percentage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from case_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from case_kernel.domain.dtos import CaseRecord


class CaseRecordModel(TrackedBase):
    """
    Persistent case record (workflow fields only).

    Contract:
        Status changes go through TransitionService; direct writes to
        status/progress_percentage/version bypass the audit trail.
    """

    __tablename__ = "case_records"

    __table_args__ = (
        UniqueConstraint("record_number", name="uq_case_record_number"),
        CheckConstraint(
            "progress_percentage >= 0 AND progress_percentage <= 100",
            name="ck_case_records_percentage_range",
        ),
        CheckConstraint("version >= 1", name="ck_case_records_version_positive"),
        Index("idx_case_record_status", "status"),
    )

    record_number: Mapped[str] = mapped_column(String(50), nullable=False)

    status: Mapped[str] = mapped_column(String(50), nullable=False)

    progress_percentage: Mapped[int] = mapped_column(Integer, nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return (
            f"<CaseRecord {self.record_number} status={self.status} "
            f"{self.progress_percentage}% v{self.version}>"
        )

    def to_dto(self) -> CaseRecord:
        """Convert ORM model to frozen domain DTO."""
        from case_kernel.domain.dtos import CaseRecord as CaseRecordDTO

        return CaseRecordDTO(
            id=self.id,
            record_number=self.record_number,
            status=self.status,
            progress_percentage=self.progress_percentage,
            version=self.version,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
