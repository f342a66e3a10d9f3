"""
Module: case_kernel.models.status_history
Responsibility: ORM persistence for the append-only, hash-chained status
    history of every case record.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - History rows are append-only; no UPDATE or DELETE (ORM listeners in
      db/immutability.py).
    - Per-record hash chain: hash = H(record_id | old | new | old% | new% |
      actor | occurred_at | note | prev_hash).  Validated by
      AuditTrailService.validate_chain().
    - seq is globally unique and monotonically increasing, allocated by
      SequenceService; it breaks ties between equal occurred_at values.

Failure modes:
    - ImmutabilityViolationError on any UPDATE/DELETE attempt.
    - AuditChainBrokenError when chain validation detects a hash mismatch.

Audit relevance:
    This table IS the audit trail for status changes: what changed, when,
    and by whom.  Replaying it from record_created reproduces the record's
    current status.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from case_kernel.db.base import Base
from case_kernel.db.types import UTCDateTime, UUIDString

if TYPE_CHECKING:
    from case_kernel.domain.dtos import StatusHistoryEntry


class StatusHistoryModel(Base):
    """
    One persisted status change.

    Guarantees:
        - prev_hash is None only for a record's first entry.

    Non-goals:
        - This model does NOT compute hashes; AuditTrailService does.
    """

    __tablename__ = "case_status_history"

    __table_args__ = (
        Index("idx_case_history_record_order", "record_id", "occurred_at", "seq"),
        Index("idx_case_history_actor", "actor_id"),
    )

    record_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("case_records.id", ondelete="CASCADE"),
        nullable=False,
    )

    seq: Mapped[int] = mapped_column(BigInteger, nullable=False, unique=True)

    old_status: Mapped[str] = mapped_column(String(50), nullable=False)
    new_status: Mapped[str] = mapped_column(String(50), nullable=False)

    old_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    new_percentage: Mapped[int] = mapped_column(Integer, nullable=False)

    actor_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    note: Mapped[str] = mapped_column(Text, nullable=False)

    prev_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    hash: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<StatusHistory #{self.seq} {self.old_status} -> {self.new_status} "
            f"record={self.record_id}>"
        )

    @property
    def is_genesis(self) -> bool:
        """First entry in this record's chain."""
        return self.prev_hash is None

    def to_dto(self) -> StatusHistoryEntry:
        """Convert ORM model to frozen domain DTO."""
        from case_kernel.domain.dtos import StatusHistoryEntry as StatusHistoryEntryDTO
        from case_kernel.domain.status_catalog import CaseStatus

        return StatusHistoryEntryDTO(
            id=self.id,
            record_id=self.record_id,
            old_status=CaseStatus(self.old_status),
            new_status=CaseStatus(self.new_status),
            old_percentage=self.old_percentage,
            new_percentage=self.new_percentage,
            actor_id=self.actor_id,
            occurred_at=self.occurred_at,
            note=self.note,
            seq=self.seq,
            prev_hash=self.prev_hash,
            hash=self.hash,
        )
