"""
Settings validator (``case_config.validator``).

Checks a parsed ``KernelSettings`` before it is handed to the kernel.
Every problem is collected so a broken file is reported in one pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from case_config.schema import LOG_LEVELS, KernelSettings


@dataclass
class SettingsValidationResult:
    """``is_valid`` is ``True`` only when ``errors`` is empty."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)


def validate_settings(settings: KernelSettings) -> SettingsValidationResult:
    result = SettingsValidationResult()

    if not settings.settings_id:
        result.add_error("settings_id must not be empty")
    if settings.version < 1:
        result.add_error(f"version must be >= 1, got {settings.version}")
    if not settings.database_url:
        result.add_error("database.url must not be empty")
    if settings.pool_size < 1:
        result.add_error(f"database.pool_size must be >= 1, got {settings.pool_size}")
    if settings.max_overflow < 0:
        result.add_error(
            f"database.max_overflow must be >= 0, got {settings.max_overflow}"
        )
    if settings.log_level not in LOG_LEVELS:
        result.add_error(
            f"logging.level must be one of {', '.join(LOG_LEVELS)}, "
            f"got {settings.log_level!r}"
        )
    if settings.reminder_interval_days < 1:
        result.add_error(
            "workflow.reminder_interval_days must be >= 1, "
            f"got {settings.reminder_interval_days}"
        )

    return result
