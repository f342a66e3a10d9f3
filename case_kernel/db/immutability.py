"""
ORM-level protection of audit-relevant rows.

Rules
-----

Table                 | Rule
----------------------|-----------------------------------------------------
case_status_history   | never updated, never deleted
case_documents        | record_id and status_when_uploaded are write-once;
                      | the document name may be corrected
case_records          | progress_percentage always equals the catalog
                      | percentage of status (on insert and update)

Each rule is a mapper event (``before_update``, ``before_delete``,
``before_insert``) that raises ``ImmutabilityViolationError`` during
``session.flush()``, before any SQL is sent.

Core ``update()``/``delete()`` statements do not fire mapper events.  The
kernel issues one: the version compare-and-swap on case_records in
TransitionService, which writes status and percentage from the catalog.

Usage::

    from case_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once, at startup

``unregister_immutability_listeners()`` exists for test teardown only.
"""

from sqlalchemy import event, inspect

from case_kernel.exceptions import ImmutabilityViolationError
from case_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

ATTACHMENT_FROZEN_FIELDS = frozenset({"record_id", "status_when_uploaded"})


def _block(entity_type: str, target, operation: str, reason: str, **details) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
            **details,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _history_update(mapper, connection, target):
    _block(
        "StatusHistory", target, "UPDATE",
        "Status history entries are immutable and cannot be modified",
    )


def _history_delete(mapper, connection, target):
    _block("StatusHistory", target, "DELETE", "Status history entries cannot be deleted")


def _attachment_update(mapper, connection, target):
    state = inspect(target)
    changed = sorted(
        name for name in ATTACHMENT_FROZEN_FIELDS
        if state.attrs[name].history.has_changes()
    )
    if changed:
        _block(
            "DocumentAttachment",
            target,
            "UPDATE",
            f"Fields {changed} are captured at upload time",
            fields=changed,
        )


def _record_percentage(mapper, connection, target):
    from case_kernel.domain.status_catalog import STATUS_CATALOG

    expected = STATUS_CATALOG.percentage_for(target.status)
    if target.progress_percentage != expected:
        _block(
            "CaseRecord",
            target,
            "WRITE",
            (
                f"progress_percentage {target.progress_percentage} is derived from "
                f"status {target.status} and must be {expected}"
            ),
            status=target.status,
            progress_percentage=target.progress_percentage,
            expected=expected,
        )


def _listeners():
    from case_kernel.models.case_record import CaseRecordModel
    from case_kernel.models.document_attachment import DocumentAttachmentModel
    from case_kernel.models.status_history import StatusHistoryModel

    return (
        (StatusHistoryModel, "before_update", _history_update),
        (StatusHistoryModel, "before_delete", _history_delete),
        (DocumentAttachmentModel, "before_update", _attachment_update),
        (CaseRecordModel, "before_insert", _record_percentage),
        (CaseRecordModel, "before_update", _record_percentage),
    )


def register_immutability_listeners():
    """Install every rule.  Idempotent; call after the models are importable."""
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """Remove every rule.  Test teardown only."""
    for target, event_name, listener_fn in _listeners():
        if event.contains(target, event_name, listener_fn):
            event.remove(target, event_name, listener_fn)
