"""
History replay (``case_kernel.domain.replay``).

Responsibility
--------------
Rebuilds a record's status and percentage from its status history, so
the audit trail can be checked against the record store.

Invariants enforced
-------------------
* Replaying all entries in order from ``record_created`` reproduces the
  record's current status and percentage.
* Each entry's ``old_status`` must equal the status produced by the
  previous entry (``ReplayMismatchError`` otherwise).
* Each entry's percentages must match the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from case_kernel.domain.dtos import CaseRecord, StatusHistoryEntry
from case_kernel.domain.status_catalog import INITIAL_STATUS, STATUS_CATALOG, CaseStatus
from case_kernel.exceptions import ReplayMismatchError


@dataclass(frozen=True)
class ReplayResult:
    status: CaseStatus
    percentage: int
    transitions_applied: int

    def matches(self, record: CaseRecord) -> bool:
        return (
            self.status == record.status
            and self.percentage == record.progress_percentage
        )


def replay_history(
    entries: Iterable[StatusHistoryEntry],
    initial: CaseStatus = INITIAL_STATUS,
) -> ReplayResult:
    """Fold history entries, oldest first, into a final status.

    Raises:
        ReplayMismatchError: If an entry does not continue from the
            previous status, or its percentages disagree with the catalog.
    """
    status = initial
    applied = 0
    for position, entry in enumerate(entries):
        if entry.old_status != status:
            raise ReplayMismatchError(position, status.value, entry.old_status.value)
        expected_old = STATUS_CATALOG.percentage_for(entry.old_status)
        expected_new = STATUS_CATALOG.percentage_for(entry.new_status)
        if entry.old_percentage != expected_old or entry.new_percentage != expected_new:
            raise ReplayMismatchError(
                position,
                f"{entry.new_status.value}@{expected_new}",
                f"{entry.new_status.value}@{entry.new_percentage}",
            )
        status = entry.new_status
        applied += 1

    return ReplayResult(
        status=status,
        percentage=STATUS_CATALOG.percentage_for(status),
        transitions_applied=applied,
    )


def verify_record_against_history(
    record: CaseRecord,
    entries: Iterable[StatusHistoryEntry],
) -> bool:
    """True iff the history replays to the record's current status."""
    return replay_history(entries).matches(record)
