"""
Typed Exception Hierarchy for the Case Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the workflow kernel (an API layer, an upload handler, a report
exporter) must react differently to different failures.  A missing gating
document is an actionable prompt for the user; an optimistic-lock conflict is
a refetch-and-retry; an unknown status is a programming error.  Parsing
message strings to tell these apart is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        result = transitions.request_transition(record, target, actor_id)
    except DocumentRequiredError as e:
        prompt_upload(e.status)                  # Structured data
    except ConcurrentModificationError:
        record = records.get(record.id)          # Refetch, then retry

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from CaseKernelError:

    CaseKernelError (base)
    |
    +-- StatusError
    |   +-- UnknownStatusError
    |
    +-- TransitionError
    |   +-- DocumentRequiredError
    |
    +-- RecordError
    |   +-- RecordNotFoundError
    |   +-- RecordAlreadyExistsError
    |
    +-- DocumentError
    |   +-- AttachmentNotFoundError
    |
    +-- ConcurrencyError
    |   +-- ConcurrentModificationError
    |
    +-- PersistenceError
    |   +-- PersistenceFailureError
    |
    +-- AuditError
    |   +-- AuditChainBrokenError
    |   +-- ReplayMismatchError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Status          | UNKNOWN_STATUS              | Identifier not in the fixed catalog
----------------|-----------------------------|-----------------------------------------
Transition      | DOCUMENT_REQUIRED           | Target status needs evidence on file
----------------|-----------------------------|-----------------------------------------
Record          | UNKNOWN_RECORD              | Record ID doesn't exist
                | RECORD_ALREADY_EXISTS       | Duplicate record number
----------------|-----------------------------|-----------------------------------------
Document        | ATTACHMENT_NOT_FOUND        | Attachment ID doesn't exist
----------------|-----------------------------|-----------------------------------------
Concurrency     | CONCURRENT_MODIFICATION     | Record version moved under the caller
----------------|-----------------------------|-----------------------------------------
Persistence     | PERSISTENCE_FAILURE         | Store failed to write record/history
----------------|-----------------------------|-----------------------------------------
Audit           | AUDIT_CHAIN_BROKEN          | History hash chain validation failed
                | REPLAY_MISMATCH             | History does not replay cleanly
----------------|-----------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION      | Modifying an append-only row

===============================================================================
HANDLING PATTERNS
===============================================================================

1. ONLY DocumentRequiredError IS USER-ACTIONABLE.  It carries
   ``user_actionable = True``; surface it as "attach a document, then retry".
   Every other error is shown as a generic failure notice.

2. ConcurrencyError -> refetch the record and retry with the fresh version.

3. PersistenceError -> the caller's transaction must be rolled back; no
   partial record update or history entry survives the rollback.

4. AuditError -> investigate; do not continue writing to a broken trail.
"""


class CaseKernelError(Exception):
    """
    Base exception for all case kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CASE_KERNEL_ERROR"
    user_actionable: bool = False


# Status-related exceptions


class StatusError(CaseKernelError):
    """Base exception for status catalog errors."""

    code: str = "STATUS_ERROR"


class UnknownStatusError(StatusError):
    """Status identifier is not one of the fixed catalog entries."""

    code: str = "UNKNOWN_STATUS"

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Unknown status: {status!r}")


# Transition-related exceptions


class TransitionError(CaseKernelError):
    """Base exception for rejected status transitions."""

    code: str = "TRANSITION_ERROR"


class DocumentRequiredError(TransitionError):
    """
    Target status requires a document captured at that status.

    This is a business-rule violation the user can resolve: attach a
    document while the record is in (or for) the target status, then retry.
    """

    code: str = "DOCUMENT_REQUIRED"
    user_actionable: bool = True

    def __init__(self, record_id: str, status: str, label: str):
        self.record_id = record_id
        self.status = status
        self.label = label
        super().__init__(
            f"Please upload a document before changing to \"{label}\" status"
        )


# Record-related exceptions


class RecordError(CaseKernelError):
    """Base exception for case record errors."""

    code: str = "RECORD_ERROR"


class RecordNotFoundError(RecordError):
    """Referenced case record does not exist."""

    code: str = "UNKNOWN_RECORD"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Case record not found: {record_id}")


class RecordAlreadyExistsError(RecordError):
    """A case record with this record number already exists."""

    code: str = "RECORD_ALREADY_EXISTS"

    def __init__(self, record_number: str):
        self.record_number = record_number
        super().__init__(f"Case record already exists: {record_number}")


# Document-related exceptions


class DocumentError(CaseKernelError):
    """Base exception for document ledger errors."""

    code: str = "DOCUMENT_ERROR"


class AttachmentNotFoundError(DocumentError):
    """Attachment with given ID was not found."""

    code: str = "ATTACHMENT_NOT_FOUND"

    def __init__(self, attachment_id: str):
        self.attachment_id = attachment_id
        super().__init__(f"Attachment not found: {attachment_id}")


# Concurrency-related exceptions


class ConcurrencyError(CaseKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class ConcurrentModificationError(ConcurrencyError):
    """The record changed after the caller read it (optimistic lock lost)."""

    code: str = "CONCURRENT_MODIFICATION"

    def __init__(self, record_id: str, expected_version: int):
        self.record_id = record_id
        self.expected_version = expected_version
        super().__init__(
            f"Concurrent modification on case record {record_id}: "
            f"version {expected_version} is no longer current"
        )


# Persistence-related exceptions


class PersistenceError(CaseKernelError):
    """Base exception for record store failures."""

    code: str = "PERSISTENCE_ERROR"


class PersistenceFailureError(PersistenceError):
    """The record store failed to durably write a transition."""

    code: str = "PERSISTENCE_FAILURE"

    def __init__(self, record_id: str, operation: str, reason: str):
        self.record_id = record_id
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"Persistence failure during {operation} for case record "
            f"{record_id}: {reason}"
        )


# Audit-related exceptions


class AuditError(CaseKernelError):
    """Base exception for audit trail errors."""

    code: str = "AUDIT_ERROR"


class AuditChainBrokenError(AuditError):
    """History hash chain validation failed."""

    code: str = "AUDIT_CHAIN_BROKEN"

    def __init__(self, record_id: str, seq: int, expected_hash: str, actual_hash: str):
        self.record_id = record_id
        self.seq = seq
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"Status history chain broken for record {record_id} at seq {seq}: "
            f"expected {expected_hash}, got {actual_hash}"
        )


class ReplayMismatchError(AuditError):
    """History entries do not replay into a consistent status sequence."""

    code: str = "REPLAY_MISMATCH"

    def __init__(self, position: int, expected_status: str, found_status: str):
        self.position = position
        self.expected_status = expected_status
        self.found_status = found_status
        super().__init__(
            f"History replay mismatch at entry {position}: "
            f"expected old status {expected_status}, found {found_status}"
        )


# Immutability-related exceptions


class ImmutabilityError(CaseKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted to modify an append-only or write-once record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: {reason}"
        )
