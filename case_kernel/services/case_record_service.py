"""
CaseRecordService -- opening and loading case records.

Responsibility:
    Creates case records in the initial workflow status and loads them as
    frozen ``CaseRecord`` DTOs for the workflow engine.

Architecture position:
    Kernel > Services -- imperative shell.  The wider record store (names,
    policy numbers, contact details) is an external collaborator; this
    service only owns the workflow-relevant columns.

Invariants enforced:
    - A new record starts at record_created with the catalog percentage
      and version 1.
    - record_number is unique.

Failure modes:
    - RecordAlreadyExistsError: record_number is taken.
    - RecordNotFoundError: No record with the requested id.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from case_kernel.domain.clock import Clock, SystemClock
from case_kernel.domain.dtos import CaseRecord
from case_kernel.domain.status_catalog import INITIAL_STATUS, STATUS_CATALOG
from case_kernel.exceptions import RecordAlreadyExistsError, RecordNotFoundError
from case_kernel.logging_config import get_logger
from case_kernel.models.case_record import CaseRecordModel
from case_kernel.services.base import BaseService

logger = get_logger("services.case_record")


class CaseRecordService(BaseService[CaseRecordModel]):
    """Service for case record lifecycle outside of status transitions."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def _find_model(self, record_number: str) -> CaseRecordModel | None:
        return self.session.execute(
            select(CaseRecordModel).where(CaseRecordModel.record_number == record_number)
        ).scalar_one_or_none()

    def open_record(self, record_number: str, actor_id: UUID) -> CaseRecord:
        """
        Create a record in the initial status.

        Raises:
            RecordAlreadyExistsError: ``record_number`` is already in use.
        """
        if self._find_model(record_number) is not None:
            raise RecordAlreadyExistsError(record_number)

        now = self._clock.now()
        record = CaseRecordModel(
            record_number=record_number,
            status=INITIAL_STATUS.value,
            progress_percentage=STATUS_CATALOG.percentage_for(INITIAL_STATUS),
            version=1,
            created_at=now,
            updated_at=now,
            created_by_id=actor_id,
        )
        self.session.add(record)
        self.session.flush()

        logger.info(
            "record_opened",
            extra={
                "record_id": str(record.id),
                "record_number": record_number,
                "status": INITIAL_STATUS.value,
            },
        )
        return record.to_dto()

    def get(self, record_id: UUID) -> CaseRecord:
        """
        Load the current state of a record.

        Raises:
            RecordNotFoundError: No record with this id.
        """
        record = self.session.execute(
            select(CaseRecordModel)
            .where(CaseRecordModel.id == record_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if record is None:
            raise RecordNotFoundError(str(record_id))
        return record.to_dto()

    def find_by_number(self, record_number: str) -> CaseRecord | None:
        record = self._find_model(record_number)
        return record.to_dto() if record else None
