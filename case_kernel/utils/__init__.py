"""Utility modules for the case kernel."""

from case_kernel.utils.hashing import canonical_json, hash_status_entry

__all__ = [
    "canonical_json",
    "hash_status_entry",
]
