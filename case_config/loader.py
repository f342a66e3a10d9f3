"""
Settings loader (``case_config.loader``).

Responsibility
--------------
Loads the YAML settings file and parses it into a frozen
``KernelSettings``.  Runtime callers go through
``case_config.get_active_settings()``; this module is its internal
tooling.

Invariants enforced
-------------------
* Missing required keys raise ``KeyError``; wrongly typed values raise
  ``ValueError``.  There are no silent defaults for required fields.
* ``compute_checksum`` is deterministic: the same settings always hash
  to the same value, whatever the key order in the file.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from case_config.schema import KernelSettings


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_settings(data: dict[str, Any]) -> KernelSettings:
    """Parse the settings document into ``KernelSettings``."""
    database = data["database"]
    logging_section = data.get("logging", {})
    workflow = data.get("workflow", {})

    fields = {
        "settings_id": str(data["settings_id"]),
        "version": _as_int(data["version"], "version"),
        "database_url": str(database["url"]),
        "echo_sql": _as_bool(database.get("echo_sql", False), "database.echo_sql"),
        "pool_size": _as_int(database.get("pool_size", 20), "database.pool_size"),
        "max_overflow": _as_int(database.get("max_overflow", 10), "database.max_overflow"),
        "log_level": str(logging_section.get("level", "INFO")).upper(),
        "reminder_interval_days": _as_int(
            workflow.get("reminder_interval_days", 7),
            "workflow.reminder_interval_days",
        ),
    }
    return KernelSettings(**fields, checksum=compute_checksum(fields))
