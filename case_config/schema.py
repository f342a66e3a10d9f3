"""
KernelSettings schema.

The typed form of the YAML settings file.  The loader parses YAML into
this frozen dataclass; the validator checks ranges; bridges hand the
values to the kernel.
"""

from __future__ import annotations

from dataclasses import dataclass

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class KernelSettings:
    """Runtime settings for one deployment of the case kernel."""

    settings_id: str
    version: int
    database_url: str
    echo_sql: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    log_level: str = "INFO"
    reminder_interval_days: int = 7
    checksum: str = ""
