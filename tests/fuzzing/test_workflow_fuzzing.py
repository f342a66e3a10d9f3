"""
Hypothesis fuzzing of the pure workflow engine.

Fuzzes:
- Random walks over the catalog with random evidence on file
- Arbitrary text as the requested status

Properties:
- A transition is rejected only for an unknown status or a missing document
- Accepted transitions always carry the catalog percentage
- The accepted walk replays to exactly the final record
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from hypothesis import given, settings
from hypothesis import strategies as st

from case_kernel.domain.clock import DeterministicClock
from case_kernel.domain.document_ledger import LedgerSnapshot
from case_kernel.domain.dtos import CaseRecord
from case_kernel.domain.replay import replay_history
from case_kernel.domain.status_catalog import INITIAL_STATUS, STATUS_CATALOG, CaseStatus
from case_kernel.domain.workflow_engine import WorkflowEngine
from case_kernel.exceptions import DocumentRequiredError, UnknownStatusError

STATUS_VALUES = frozenset(s.value for s in CaseStatus)

statuses = st.sampled_from(list(CaseStatus))


def _fresh_record() -> CaseRecord:
    opened = datetime(2024, 1, 1, tzinfo=UTC)
    return CaseRecord(
        id=uuid4(),
        record_number="FR-FUZZ",
        status=INITIAL_STATUS,
        progress_percentage=STATUS_CATALOG.percentage_for(INITIAL_STATUS),
        version=1,
        created_at=opened,
        updated_at=opened,
    )


class TestRandomWalks:
    """Any sequence of requests keeps the record consistent with its history."""

    @given(
        targets=st.lists(statuses, max_size=30),
        evidenced=st.frozensets(statuses),
    )
    @settings(max_examples=200, deadline=None)
    def test_walk_replays_to_final_record(self, targets, evidenced):
        clock = DeterministicClock()
        engine = WorkflowEngine(clock=clock)
        record = _fresh_record()
        ledger = LedgerSnapshot(record_id=record.id, evidenced=evidenced)
        entries = []

        for target in targets:
            clock.tick()
            gated = STATUS_CATALOG.definition_for(target).requires_document
            try:
                result = engine.request_transition(record, target, uuid4(), ledger)
            except DocumentRequiredError:
                assert gated and target not in evidenced
                continue

            assert not gated or target in evidenced
            assert result.record.progress_percentage == STATUS_CATALOG.percentage_for(target)
            assert result.history_entry.old_status == record.status
            record = result.record
            entries.append(result.history_entry)

        replayed = replay_history(entries)
        assert replayed.matches(record)
        assert replayed.transitions_applied == len(entries)


class TestArbitraryStatusText:
    """Unknown status ids are rejected, never coerced."""

    @given(target=st.text(max_size=40))
    @settings(max_examples=200, deadline=None)
    def test_unknown_text_rejected(self, target):
        record = _fresh_record()
        ledger = LedgerSnapshot(record_id=record.id, evidenced=frozenset(CaseStatus))
        engine = WorkflowEngine(clock=DeterministicClock())

        if target in STATUS_VALUES:
            assert engine.request_transition(record, target, uuid4(), ledger).new_status.value == target
            return

        try:
            engine.request_transition(record, target, uuid4(), ledger)
        except UnknownStatusError as exc:
            assert exc.status == target
        else:
            raise AssertionError(f"{target!r} was accepted")
