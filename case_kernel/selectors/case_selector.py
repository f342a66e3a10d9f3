"""
Module: case_kernel.selectors.case_selector
Responsibility: Read-only reporting over case records: dashboard counts,
    filtering by status, and the overdue-payment list.
Architecture position: Kernel > Selectors.  May import from models/, the
    pure domain projector and selectors/base.py.

Invariants enforced:
    - Read-only: No mutations performed on any queried data.
    - Classification (active, completed, at risk, overdue) comes from
      ``case_kernel.domain.projector`` so reports and the kernel agree.
    - Lists are ordered by record_number for deterministic output.

Failure modes:
    - Returns zero counts or empty tuples when no records exist.
"""

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from case_kernel.domain.dtos import CaseRecord
from case_kernel.domain.projector import (
    DEFAULT_REMINDER_INTERVAL_DAYS,
    is_active,
    is_overdue,
    is_payment_at_risk,
)
from case_kernel.domain.status_catalog import STATUS_CATALOG, CaseStatus
from case_kernel.models.case_record import CaseRecordModel
from case_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class CaseSummary:
    """Dashboard counts across all case records."""

    total: int
    active: int
    completed: int
    at_risk: int
    by_status: dict[CaseStatus, int] = field(default_factory=dict)

    def count_for(self, status: CaseStatus | str) -> int:
        return self.by_status.get(STATUS_CATALOG.parse(status), 0)


class CaseSelector(BaseSelector[CaseRecordModel]):
    """Selector for case record reporting."""

    def __init__(
        self,
        session: Session,
        reminder_interval_days: int = DEFAULT_REMINDER_INTERVAL_DAYS,
    ):
        super().__init__(session)
        self.reminder_interval_days = reminder_interval_days

    def summary(self) -> CaseSummary:
        """Counts per status plus the derived dashboard totals."""
        rows = self.session.execute(
            select(CaseRecordModel.status, func.count(CaseRecordModel.id))
            .group_by(CaseRecordModel.status)
        ).all()

        by_status = {definition.status: 0 for definition in STATUS_CATALOG.all_statuses()}
        for status, count in rows:
            by_status[STATUS_CATALOG.parse(status)] = count

        return CaseSummary(
            total=sum(by_status.values()),
            active=sum(n for s, n in by_status.items() if is_active(s)),
            completed=by_status[CaseStatus.FUNERAL_COMPLETED],
            at_risk=sum(n for s, n in by_status.items() if is_payment_at_risk(s)),
            by_status=by_status,
        )

    def list_by_status(self, status: CaseStatus | str | None = None) -> tuple[CaseRecord, ...]:
        """All records, or only those currently in ``status``."""
        query = select(CaseRecordModel).order_by(CaseRecordModel.record_number)
        if status is not None:
            query = query.where(CaseRecordModel.status == STATUS_CATALOG.parse(status).value)
        return tuple(row.to_dto() for row in self.session.execute(query).scalars().all())

    def overdue(
        self,
        as_of: datetime,
        reminder_interval_days: int | None = None,
    ) -> tuple[CaseRecord, ...]:
        """Records whose payment reminder has gone unanswered too long.

        ``reminder_interval_days`` defaults to the selector's configured
        interval.
        """
        if reminder_interval_days is None:
            reminder_interval_days = self.reminder_interval_days
        candidates = self.session.execute(
            select(CaseRecordModel)
            .where(
                CaseRecordModel.status.in_(
                    [d.status.value for d in STATUS_CATALOG if is_payment_at_risk(d.status)]
                )
            )
            .order_by(CaseRecordModel.record_number)
        ).scalars().all()
        records = (row.to_dto() for row in candidates)
        return tuple(
            r for r in records if is_overdue(r, as_of, reminder_interval_days)
        )
