"""
Module: case_kernel.db.types
Responsibility: Column types shared by every case kernel model, so
    identifiers and timestamps behave identically on every backend.
Architecture position: Kernel > DB.  May be imported by models/ and
    services/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Identifiers are stored as their 36-character string form and always
      come back as ``uuid.UUID``.
    - Timestamps are always timezone-aware UTC when read back, on every
      backend.  SQLite drops tzinfo on storage; UTCDateTime restores it.
"""

from datetime import timezone
from uuid import UUID

from sqlalchemy import DateTime, String
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID stored as String(36).

    Record ids, actor ids and attachment ids cross the boundary to the
    external record store and file store as strings; keeping the column a
    plain string lets both backends compare them the same way.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime normalised to UTC.

    Guarantees:
        - process_bind_param: aware datetime -> UTC; naive values rejected.
        - process_result_value: naive values from the driver are tagged UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"naive datetime not allowed: {value!r}")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
