"""
Hash chain tamper detection for the status history.

Verifies:
- An untouched chain validates
- Rewriting a recorded field behind the ORM's back breaks the chain
- Re-linking an entry to a different predecessor breaks the chain
- Only the first entry may start a chain
- Chains are per record: tampering with one record leaves others valid

Tampering uses Core UPDATE statements, which bypass the ORM
immutability listeners the way a direct database edit would.
"""

import pytest
from sqlalchemy import update

from case_kernel.domain.status_catalog import CaseStatus
from case_kernel.exceptions import AuditChainBrokenError
from case_kernel.models.status_history import StatusHistoryModel

_history = StatusHistoryModel.__table__


def _tamper(session, entry_id, **values):
    session.execute(update(_history).where(_history.c.id == entry_id).values(**values))
    session.expire_all()


@pytest.fixture
def walked_record(open_record, move_to):
    """A record with three history entries."""
    record = open_record()
    record = move_to(record, CaseStatus.FUNERAL_ARRANGEMENT).record
    record = move_to(record, CaseStatus.QUOTATION_ACCEPTED).record
    record = move_to(record, CaseStatus.PAYMENT_MADE).record
    return record


class TestHistoryChain:
    """validate_chain detects tampering."""

    def test_untouched_chain_is_valid(self, walked_record, audit_service):
        assert audit_service.validate_chain(walked_record.id) is True

    def test_rewritten_note_detected(self, session, walked_record, audit_service):
        first = audit_service.history_for(walked_record.id)[0]
        _tamper(session, first.id, note="nothing to see here")

        with pytest.raises(AuditChainBrokenError) as exc_info:
            audit_service.validate_chain(walked_record.id)

        assert exc_info.value.seq == first.seq
        assert exc_info.value.actual_hash == first.hash

    def test_rewritten_status_detected(self, session, walked_record, audit_service):
        last = audit_service.history_for(walked_record.id)[-1]
        _tamper(session, last.id, new_status=CaseStatus.FUNERAL_COMPLETED.value, new_percentage=100)

        with pytest.raises(AuditChainBrokenError) as exc_info:
            audit_service.validate_chain(walked_record.id)

        assert exc_info.value.seq == last.seq

    def test_relinked_entry_detected(self, session, walked_record, audit_service):
        history = audit_service.history_for(walked_record.id)
        _tamper(session, history[2].id, prev_hash=history[0].hash)

        with pytest.raises(AuditChainBrokenError) as exc_info:
            audit_service.validate_chain(walked_record.id)

        assert exc_info.value.seq == history[2].seq
        assert exc_info.value.expected_hash == history[1].hash

    def test_restarted_chain_detected(self, session, walked_record, audit_service):
        history = audit_service.history_for(walked_record.id)
        _tamper(session, history[1].id, prev_hash=None)

        with pytest.raises(AuditChainBrokenError) as exc_info:
            audit_service.validate_chain(walked_record.id)

        assert exc_info.value.seq == history[1].seq
        assert exc_info.value.expected_hash == history[0].hash
        assert exc_info.value.actual_hash == "None"

    def test_broken_chain_is_logged(self, session, walked_record, audit_service, captured_logs):
        first = audit_service.history_for(walked_record.id)[0]
        _tamper(session, first.id, note="edited")

        with pytest.raises(AuditChainBrokenError):
            audit_service.validate_chain(walked_record.id)

        broken = [r for r in captured_logs() if r["message"] == "audit_chain_broken"]
        assert len(broken) == 1
        assert broken[0]["level"] == "CRITICAL"

    def test_other_records_unaffected(self, session, walked_record, open_record, move_to, audit_service):
        other = open_record()
        move_to(other, CaseStatus.FUNERAL_ARRANGEMENT)

        first = audit_service.history_for(walked_record.id)[0]
        _tamper(session, first.id, note="edited")

        assert audit_service.validate_chain(other.id) is True

    def test_only_first_entry_is_genesis(self, session, walked_record, audit_service):
        history = audit_service.history_for(walked_record.id)
        rows = [session.get(StatusHistoryModel, entry.id) for entry in history]
        assert [row.is_genesis for row in rows] == [True, False, False]
