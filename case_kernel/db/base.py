"""
Module: case_kernel.db.base
Responsibility: Declarative bases for the case kernel's ORM models.
Architecture position: Kernel > DB.  Every model file imports from here;
    this module MUST NOT import from models/, services/, selectors/ or
    domain/.

Invariants enforced:
    - Every row is keyed by a uuid4 ``id``.
    - Annotated ``datetime`` and ``UUID`` attributes get the portable
      column types from ``db/types.py`` unless a model says otherwise.
    - Case records carry who created them and who last moved them
      (TrackedBase).
"""

from datetime import datetime
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from case_kernel.db.types import UTCDateTime, UUIDString


class Base(DeclarativeBase):
    """Declarative base: uuid4 primary key, UTC timestamps, string UUIDs."""

    type_annotation_map: ClassVar[dict] = {
        datetime: UTCDateTime(),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Abstract base for rows that people edit over time.

    Guarantees:
        - ``created_at``/``updated_at`` fall back to the database clock,
          but services always pass the injected clock's time so replay and
          tests stay deterministic.
        - ``created_by_id`` is required; ``updated_by_id`` is the actor of
          the most recent transition and NULL until the first one.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    created_by_id: Mapped[UUID] = mapped_column(nullable=False)

    updated_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
