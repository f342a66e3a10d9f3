"""
Status catalog (``case_kernel.domain.status_catalog``).

Responsibility
--------------
Defines the closed set of case statuses and the immutable table that maps
each one to its display label, colour, completion percentage, and whether a
gating document is required before the status may be entered.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``services/``, ``selectors/``, or outer layers.

Invariants enforced
-------------------
* Every ``CaseStatus`` member has exactly one ``StatusDefinition``.
* The table is built once at import time and never mutated; concurrent
  reads need no locking.
* ``all_statuses()`` returns canonical workflow order, NOT percentage
  order (payment_reminder_final and agreement_breached share 70%).

Failure modes
-------------
* ``UnknownStatusError`` for any identifier outside the enum.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping

from case_kernel.exceptions import UnknownStatusError


class CaseStatus(str, Enum):
    """Lifecycle states of a funeral-service case, in workflow order."""

    RECORD_CREATED = "record_created"
    FUNERAL_ARRANGEMENT = "funeral_arrangement"
    DOCUMENTS_SENT_HOME_AFFAIRS = "documents_sent_home_affairs"
    QUOTATION_ACCEPTED = "quotation_accepted"
    PAYMENT_MADE = "payment_made"
    PAYMENT_ARRANGEMENT = "payment_arrangement"
    PAYMENT_REMINDER_1 = "payment_reminder_1"
    PAYMENT_REMINDER_2 = "payment_reminder_2"
    PAYMENT_REMINDER_FINAL = "payment_reminder_final"
    AGREEMENT_BREACHED = "agreement_breached"
    FUNERAL_COMPLETED = "funeral_completed"


INITIAL_STATUS = CaseStatus.RECORD_CREATED


@dataclass(frozen=True)
class StatusDefinition:
    """Associated data for one ``CaseStatus``.

    Contract: frozen; ``percentage`` is within 0..100.
    Non-goals: does not know which statuses may follow it -- transitions
    are permissive and gated only by evidence.
    """

    status: CaseStatus
    label: str
    percentage: int
    color: str
    requires_document: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.percentage <= 100:
            raise ValueError(
                f"percentage for {self.status.value} must be within 0..100, "
                f"got {self.percentage}"
            )
        if not self.label:
            raise ValueError(f"label for {self.status.value} must be non-empty")


_DEFINITIONS: tuple[StatusDefinition, ...] = (
    StatusDefinition(CaseStatus.RECORD_CREATED, "Record Created", 1, "gray"),
    StatusDefinition(
        CaseStatus.FUNERAL_ARRANGEMENT, "Funeral Arrangement", 10, "blue",
        requires_document=True,
    ),
    StatusDefinition(
        CaseStatus.DOCUMENTS_SENT_HOME_AFFAIRS, "Documents Sent to Home Affairs",
        15, "indigo", requires_document=True,
    ),
    StatusDefinition(
        CaseStatus.QUOTATION_ACCEPTED, "Quotation Accepted", 20, "purple",
        requires_document=True,
    ),
    StatusDefinition(
        CaseStatus.PAYMENT_MADE, "Payment Made", 30, "green",
        requires_document=True,
    ),
    StatusDefinition(
        CaseStatus.PAYMENT_ARRANGEMENT, "Payment Arrangement", 40, "yellow",
        requires_document=True,
    ),
    StatusDefinition(CaseStatus.PAYMENT_REMINDER_1, "Payment Reminder 1", 50, "orange"),
    StatusDefinition(CaseStatus.PAYMENT_REMINDER_2, "Payment Reminder 2", 60, "red"),
    StatusDefinition(
        CaseStatus.PAYMENT_REMINDER_FINAL, "Final Payment Reminder", 70, "dark-red",
    ),
    StatusDefinition(CaseStatus.AGREEMENT_BREACHED, "Agreement Breached", 70, "maroon"),
    StatusDefinition(CaseStatus.FUNERAL_COMPLETED, "Funeral Completed", 100, "dark-green"),
)


class StatusCatalog:
    """
    Immutable registry of status definitions.

    Contract:
        Built from a complete sequence of definitions, one per
        ``CaseStatus`` member.  Lookups never mutate state.

    Guarantees:
        - ``definition_for`` is a pure lookup; repeated calls return the
          same object.
        - ``all_statuses`` preserves construction order.
    """

    def __init__(self, definitions: tuple[StatusDefinition, ...]):
        by_status = {d.status: d for d in definitions}
        if len(by_status) != len(definitions):
            raise ValueError("duplicate status in catalog definitions")
        missing = set(CaseStatus) - set(by_status)
        if missing:
            raise ValueError(
                "catalog is missing definitions for: "
                + ", ".join(sorted(s.value for s in missing))
            )
        self._ordered = tuple(definitions)
        self._by_status: Mapping[CaseStatus, StatusDefinition] = MappingProxyType(by_status)

    @staticmethod
    def parse(status_id: CaseStatus | str) -> CaseStatus:
        """Normalise a status identifier into a ``CaseStatus`` member.

        Raises:
            UnknownStatusError: If the identifier is not in the catalog.
        """
        if isinstance(status_id, CaseStatus):
            return status_id
        try:
            return CaseStatus(status_id)
        except ValueError:
            raise UnknownStatusError(str(status_id)) from None

    def definition_for(self, status_id: CaseStatus | str) -> StatusDefinition:
        """Look up the definition for a status.

        Raises:
            UnknownStatusError: If the identifier is not in the catalog.
        """
        return self._by_status[self.parse(status_id)]

    def all_statuses(self) -> tuple[StatusDefinition, ...]:
        """All definitions in canonical workflow order."""
        return self._ordered

    def percentage_for(self, status_id: CaseStatus | str) -> int:
        return self.definition_for(status_id).percentage

    def label_for(self, status_id: CaseStatus | str) -> str:
        return self.definition_for(status_id).label

    def __iter__(self) -> Iterator[StatusDefinition]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, status_id: object) -> bool:
        try:
            self.parse(status_id)  # type: ignore[arg-type]
        except UnknownStatusError:
            return False
        return True


STATUS_CATALOG = StatusCatalog(_DEFINITIONS)
