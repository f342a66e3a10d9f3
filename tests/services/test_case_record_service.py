"""
Tests for CaseRecordService.
"""

from uuid import uuid4

import pytest

from case_kernel.domain.status_catalog import CaseStatus
from case_kernel.exceptions import RecordAlreadyExistsError, RecordNotFoundError


class TestOpenRecord:

    def test_new_record_starts_at_record_created(self, record_service, deterministic_clock, test_actor_id):
        record = record_service.open_record("FR-2024-0001", test_actor_id)

        assert record.record_number == "FR-2024-0001"
        assert record.status == CaseStatus.RECORD_CREATED
        assert record.progress_percentage == 1
        assert record.version == 1
        assert record.created_at == deterministic_clock.now()
        assert record.status_label == "Record Created"

    def test_duplicate_number_rejected(self, record_service, test_actor_id):
        record_service.open_record("FR-2024-0002", test_actor_id)

        with pytest.raises(RecordAlreadyExistsError) as exc_info:
            record_service.open_record("FR-2024-0002", test_actor_id)
        assert exc_info.value.code == "RECORD_ALREADY_EXISTS"

    def test_open_is_logged(self, record_service, captured_logs, test_actor_id):
        record = record_service.open_record("FR-2024-0003", test_actor_id)

        opened = [r for r in captured_logs() if r["message"] == "record_opened"]
        assert opened[0]["record_id"] == str(record.id)


class TestLoad:

    def test_get(self, record_service, test_actor_id):
        record = record_service.open_record("FR-2024-0004", test_actor_id)
        assert record_service.get(record.id) == record

    def test_get_missing(self, record_service):
        with pytest.raises(RecordNotFoundError):
            record_service.get(uuid4())

    def test_find_by_number(self, record_service, test_actor_id):
        record = record_service.open_record("FR-2024-0005", test_actor_id)

        assert record_service.find_by_number("FR-2024-0005") == record
        assert record_service.find_by_number("FR-0000-0000") is None
