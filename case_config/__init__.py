"""
case_config -- single public entrypoint for kernel settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  No other component may read settings
    files or environment variables directly.  Returns a frozen
    ``KernelSettings``.

Architecture position:
    Configuration -- sits above ``case_kernel``.  The kernel MUST NEVER
    import from ``case_config``; ``case_config.bridges`` translates
    settings into kernel calls.

Invariants enforced:
    - Single entrypoint: all runtime settings flow through
      ``get_active_settings()``.
    - Validation before use: a settings file with any error is rejected
      as a whole.
    - Deterministic checksum: the same settings always produce the same
      ``KernelSettings.checksum``.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``KeyError`` -- a required key is missing.
    - ``ValueError`` -- a value has the wrong type or is out of range.

Audit relevance:
    Every successful call emits a ``CASE_CONFIG_TRACE`` log entry with the
    settings id, version and checksum, tying kernel behaviour to the exact
    settings that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from case_config.loader import load_yaml_file, parse_settings
from case_config.schema import KernelSettings
from case_config.validator import validate_settings

_logger = logging.getLogger("case_kernel.config")

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_settings(config_path: Path | str | None = None) -> KernelSettings:
    """The ONLY public settings entrypoint.

    Args:
        config_path: Override path to a settings YAML file.
            Defaults to case_config/defaults.yaml.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        KeyError: If a required key is missing.
        ValueError: If validation fails.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_SETTINGS_PATH
    settings = parse_settings(load_yaml_file(path))

    validation = validate_settings(settings)
    if not validation.is_valid:
        raise ValueError(
            "Settings validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )

    _logger.info(
        "CASE_CONFIG_TRACE",
        extra={
            "trace_type": "CASE_CONFIG_TRACE",
            "settings_id": settings.settings_id,
            "settings_version": settings.version,
            "checksum": settings.checksum,
            "source": str(path),
        },
    )
    return settings


__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "KernelSettings",
    "get_active_settings",
]
