"""
Transaction boundary tests for session_scope().

Verifies:
- A transition and its history entry commit together
- A failure inside the scope rolls both back
"""

import pytest

from case_kernel.db.engine import session_scope
from case_kernel.domain.clock import DeterministicClock
from case_kernel.domain.status_catalog import CaseStatus
from case_kernel.exceptions import DocumentRequiredError
from case_kernel.services.audit_trail_service import AuditTrailService
from case_kernel.services.case_record_service import CaseRecordService
from case_kernel.services.transition_service import TransitionService


class TestSessionScope:

    def test_commit_on_success(self, committed_session_factory, test_actor_id):
        clock = DeterministicClock()
        with session_scope() as sess:
            record = CaseRecordService(sess, clock).open_record("FR-SCOPE-1", test_actor_id)
            TransitionService(sess, clock).request_transition(
                record, CaseStatus.PAYMENT_REMINDER_1, test_actor_id
            )

        check = committed_session_factory()
        stored = CaseRecordService(check).get(record.id)
        assert stored.status == CaseStatus.PAYMENT_REMINDER_1
        assert len(AuditTrailService(check).history_for(record.id)) == 1

    def test_rollback_on_failure(self, committed_session_factory, test_actor_id):
        clock = DeterministicClock()
        with pytest.raises(DocumentRequiredError):
            with session_scope() as sess:
                record = CaseRecordService(sess, clock).open_record("FR-SCOPE-2", test_actor_id)
                service = TransitionService(sess, clock)
                record = service.request_transition(
                    record, CaseStatus.PAYMENT_REMINDER_1, test_actor_id
                ).record
                service.request_transition(record, CaseStatus.PAYMENT_MADE, test_actor_id)

        check = committed_session_factory()
        assert CaseRecordService(check).find_by_number("FR-SCOPE-2") is None
        assert AuditTrailService(check).history_for(record.id) == ()
