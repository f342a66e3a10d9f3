"""
Config -> Kernel bridges.

Functions that hand ``KernelSettings`` values to the kernel.  They live in
case_config (the producer) because the kernel must NEVER import
case_config.

Usage:
    from case_config import get_active_settings
    from case_config.bridges import case_selector, init_kernel

    settings = get_active_settings()
    engine = init_kernel(settings)
    selector = case_selector(session, settings)
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from case_config.schema import KernelSettings
from case_kernel.db.engine import init_engine_from_url
from case_kernel.db.immutability import register_immutability_listeners
from case_kernel.logging_config import configure_logging
from case_kernel.selectors.case_selector import CaseSelector


def init_kernel(settings: KernelSettings) -> Engine:
    """Configure logging, open the engine and arm the immutability listeners."""
    configure_logging(level=logging.getLevelName(settings.log_level))
    engine = init_engine_from_url(
        settings.database_url,
        echo=settings.echo_sql,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )
    register_immutability_listeners()
    return engine


def case_selector(session: Session, settings: KernelSettings) -> CaseSelector:
    """Case selector using the configured payment reminder interval."""
    return CaseSelector(session, reminder_interval_days=settings.reminder_interval_days)
