"""
Domain DTOs (``case_kernel.domain.dtos``).

Responsibility
--------------
Frozen value objects that cross the boundary between the pure workflow
core and its collaborators: the case record as the engine sees it,
document attachments, status history entries, and transition results.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  May import
only from ``domain/status_catalog`` and ``exceptions``.

Invariants enforced
-------------------
* ``CaseRecord.progress_percentage`` always equals the catalog percentage
  of ``CaseRecord.status`` (checked in ``__post_init__``); it is derived,
  never independently settable.
* ``DocumentAttachment.status_when_uploaded`` is captured once at upload
  time; the DTO is frozen.
* ``StatusHistoryEntry`` is frozen; ``seq`` and the hash fields are
  assigned once by the audit trail at append time.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from case_kernel.domain.status_catalog import STATUS_CATALOG, CaseStatus


@dataclass(frozen=True)
class CaseRecord:
    """The engine's view of a case record.

    The full record (names, policy numbers, contact details) lives in the
    external record store; the kernel only reads and rewrites the fields
    below.  ``version`` is the optimistic-concurrency token.
    """

    id: UUID
    record_number: str
    status: CaseStatus
    progress_percentage: int
    version: int
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", STATUS_CATALOG.parse(self.status))
        expected = STATUS_CATALOG.percentage_for(self.status)
        if self.progress_percentage != expected:
            raise ValueError(
                f"progress_percentage {self.progress_percentage} does not match "
                f"{self.status.value} ({expected}%)"
            )
        if self.version < 1:
            raise ValueError(f"version must be >= 1, got {self.version}")

    @property
    def status_label(self) -> str:
        return STATUS_CATALOG.label_for(self.status)

    def with_status(self, status: CaseStatus, updated_at: datetime) -> CaseRecord:
        """Copy with a new status; the percentage follows the catalog."""
        return replace(
            self,
            status=status,
            progress_percentage=STATUS_CATALOG.percentage_for(status),
            updated_at=updated_at,
        )


@dataclass(frozen=True)
class DocumentAttachment:
    """Evidence that a document was on file while a status was active."""

    id: UUID
    record_id: UUID
    status_when_uploaded: CaseStatus
    document_name: str
    uploaded_at: datetime
    uploaded_by: UUID


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One immutable status change.

    Entries produced by the workflow engine have ``seq``, ``prev_hash``
    and ``hash`` unset; the audit trail fills them in on append.
    """

    id: UUID
    record_id: UUID
    old_status: CaseStatus
    new_status: CaseStatus
    old_percentage: int
    new_percentage: int
    actor_id: UUID
    occurred_at: datetime
    note: str
    seq: int | None = None
    prev_hash: str | None = None
    hash: str | None = None

    @property
    def is_appended(self) -> bool:
        return self.seq is not None and self.hash is not None

    @property
    def is_self_transition(self) -> bool:
        return self.old_status == self.new_status


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a successful transition: the new record and its history entry."""

    record: CaseRecord
    history_entry: StatusHistoryEntry

    @property
    def old_status(self) -> CaseStatus:
        return self.history_entry.old_status

    @property
    def new_status(self) -> CaseStatus:
        return self.history_entry.new_status
