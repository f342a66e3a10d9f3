"""
Clock -- the only source of "now" for the case kernel.

Responsibility:
    Stamps ``updated_at`` on records, ``occurred_at`` on history entries and
    ``uploaded_at`` on attachments.  Domain and service code receive a Clock
    and never read the system time themselves.

Architecture position:
    Kernel > Domain.  ``SystemClock`` is the single place the wall clock is
    read; everything else in the domain is pure.

Audit relevance:
    With a ``DeterministicClock`` a sequence of transitions always produces
    the same timestamps, so history order and hash chains are reproducible.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

DEFAULT_START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Injectable time source.  ``now()`` is always timezone-aware."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    Guarantees:
        - Repeated ``now()`` calls return the same instant.
        - ``tick()`` moves exactly one second forward, so consecutive
          transitions get distinct, ordered timestamps.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or DEFAULT_START

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def tick(self) -> datetime:
        """Advance one second and return the new instant."""
        self.advance(1)
        return self._current
