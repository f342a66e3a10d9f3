"""
BaseService -- shared shape of the case kernel's write services.

Responsibility:
    Holds the caller's ``Session``.  Services write with ``flush()`` so the
    record update and its history entry stay in one open transaction.

Architecture position:
    Kernel > Services.

Invariants enforced:
    The caller commits or rolls back (a request handler, ``session_scope()``
    or the test harness).  A service that committed on its own could leave
    a status change on disk without its history entry.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from case_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """Base for services that own writes to ``ModelType`` rows.

    Non-goals:
        - Does NOT commit or roll back.
        - Does NOT answer dashboard queries; see ``case_kernel.selectors``.
    """

    def __init__(self, session: Session):
        self.session = session
