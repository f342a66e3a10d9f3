"""
Hashing for the status history chain.

Each history entry is hashed over its canonical JSON form, which includes
the hash of the record's previous entry.  Changing any stored field, or
re-linking an entry to another predecessor, changes every hash after it.
"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any
from uuid import UUID


def _encode(obj: Any) -> str:
    if isinstance(obj, datetime):
        return obj.astimezone(timezone.utc).isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    raise TypeError(f"cannot hash value of type {type(obj).__name__}")


def canonical_json(data: dict[str, Any]) -> str:
    """Sorted keys, no whitespace; datetimes in UTC ISO form."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), default=_encode)


def hash_status_entry(
    record_id: str,
    old_status: str,
    new_status: str,
    old_percentage: int,
    new_percentage: int,
    actor_id: str,
    occurred_at: datetime,
    note: str,
    prev_hash: str | None,
) -> str:
    """SHA-256 hex digest of one history entry linked to its predecessor."""
    document = canonical_json(
        {
            "record_id": str(record_id),
            "old_status": old_status,
            "new_status": new_status,
            "old_percentage": old_percentage,
            "new_percentage": new_percentage,
            "actor_id": str(actor_id),
            "occurred_at": occurred_at,
            "note": note,
            "prev_hash": prev_hash,
        }
    )
    return hashlib.sha256(document.encode("utf-8")).hexdigest()
