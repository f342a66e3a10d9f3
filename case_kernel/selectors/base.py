"""
Module: case_kernel.selectors.base
Responsibility: Common base for the read side of the kernel (dashboard
    counts, status filters, overdue reminders).
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    the pure domain projector.  MUST NOT import from services/.

Invariants enforced:
    - Read-only: a selector never adds, deletes, flushes or commits.
    - Results are frozen DTOs, never ORM rows.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from case_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """Read-only queries over ``ModelType`` rows in the caller's session."""

    def __init__(self, session: Session):
        self.session = session
