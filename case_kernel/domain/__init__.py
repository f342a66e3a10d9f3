"""
Pure domain layer.

This module contains the status catalog, value objects and workflow
logic with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic; time is injected
through ``Clock``.
"""

from case_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from case_kernel.domain.document_ledger import DocumentLedger, LedgerSnapshot
from case_kernel.domain.dtos import (
    CaseRecord,
    DocumentAttachment,
    StatusHistoryEntry,
    TransitionResult,
)
from case_kernel.domain.projector import (
    is_active,
    is_overdue,
    is_payment_at_risk,
    is_terminal,
    needs_document,
)
from case_kernel.domain.replay import ReplayResult, replay_history
from case_kernel.domain.status_catalog import (
    INITIAL_STATUS,
    STATUS_CATALOG,
    CaseStatus,
    StatusCatalog,
    StatusDefinition,
)
from case_kernel.domain.transition_validator import TransitionDecision, TransitionValidator
from case_kernel.domain.workflow_engine import WorkflowEngine

__all__ = [
    "CaseRecord",
    "CaseStatus",
    "Clock",
    "DeterministicClock",
    "DocumentAttachment",
    "DocumentLedger",
    "INITIAL_STATUS",
    "LedgerSnapshot",
    "ReplayResult",
    "STATUS_CATALOG",
    "StatusCatalog",
    "StatusDefinition",
    "StatusHistoryEntry",
    "SystemClock",
    "TransitionDecision",
    "TransitionResult",
    "TransitionValidator",
    "WorkflowEngine",
    "is_active",
    "is_overdue",
    "is_payment_at_risk",
    "is_terminal",
    "needs_document",
    "replay_history",
]
