"""Fixtures for pure domain tests (no database)."""

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from case_kernel.domain.document_ledger import LedgerSnapshot
from case_kernel.domain.dtos import CaseRecord
from case_kernel.domain.status_catalog import STATUS_CATALOG, CaseStatus

OPENED_AT = datetime(2024, 1, 1, 9, 0, 0, tzinfo=UTC)


@pytest.fixture
def make_record():
    """Factory for in-memory CaseRecord values."""

    def _make(
        status: CaseStatus = CaseStatus.RECORD_CREATED,
        version: int = 1,
        updated_at: datetime = OPENED_AT,
    ) -> CaseRecord:
        return CaseRecord(
            id=uuid4(),
            record_number="FR-00001",
            status=status,
            progress_percentage=STATUS_CATALOG.percentage_for(status),
            version=version,
            created_at=OPENED_AT,
            updated_at=updated_at,
        )

    return _make


@pytest.fixture
def ledger_for():
    """Factory for LedgerSnapshot values evidencing the given statuses."""

    def _ledger(record: CaseRecord, *statuses: CaseStatus) -> LedgerSnapshot:
        return LedgerSnapshot(record_id=record.id, evidenced=frozenset(statuses))

    return _ledger
