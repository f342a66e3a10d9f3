"""
Tests for the status history entry hash.

Verifies:
- Deterministic for equal inputs
- Sensitive to every recorded field and to the predecessor link
- The same instant in another timezone hashes the same
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from case_kernel.utils.hashing import canonical_json, hash_status_entry

BASE = {
    "record_id": "0b5c1f7e-6a1e-4f43-9d6a-2f3f3c1e9a10",
    "old_status": "record_created",
    "new_status": "funeral_arrangement",
    "old_percentage": 1,
    "new_percentage": 10,
    "actor_id": "5d0f1b1c-2a9e-4d7b-8f55-0c6a3f7e2b44",
    "occurred_at": datetime(2024, 3, 1, 9, 30, tzinfo=UTC),
    "note": "Status changed from Record Created to Funeral Arrangement",
    "prev_hash": None,
}


class TestHashStatusEntry:

    def test_deterministic(self):
        assert hash_status_entry(**BASE) == hash_status_entry(**BASE)
        assert len(hash_status_entry(**BASE)) == 64

    @pytest.mark.parametrize(
        "field,value",
        [
            ("record_id", "7e9f6a43-1111-4c2d-9e0a-7b5c3d2e1f00"),
            ("old_status", "payment_made"),
            ("new_status", "funeral_completed"),
            ("old_percentage", 2),
            ("new_percentage", 100),
            ("actor_id", "00000000-0000-4000-8000-000000000000"),
            ("occurred_at", datetime(2024, 3, 1, 9, 31, tzinfo=UTC)),
            ("note", "edited"),
            ("prev_hash", "a" * 64),
        ],
    )
    def test_every_field_counts(self, field, value):
        assert hash_status_entry(**{**BASE, field: value}) != hash_status_entry(**BASE)

    def test_timezone_normalised(self):
        plus_two = BASE["occurred_at"].astimezone(timezone(timedelta(hours=2)))
        assert hash_status_entry(**{**BASE, "occurred_at": plus_two}) == hash_status_entry(**BASE)


class TestCanonicalJson:

    def test_key_order_irrelevant(self):
        assert canonical_json({"b": 1, "a": 2}) == canonical_json({"a": 2, "b": 1})

    def test_unsupported_type_rejected(self):
        with pytest.raises(TypeError):
            canonical_json({"value": object()})
