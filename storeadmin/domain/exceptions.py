"""Domain exceptions.

All catalog-level errors raised by the store, the batch executor and
the edit session. They are caught at the console action boundary and
turned into user-visible notifications.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# State Machine Errors
# ============================================================================


class InvalidStateTransitionError(DomainError):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of entity (e.g., "EditSession").
            entity_id: ID of the entity.
            current_state: Current state of the entity.
            target_state: Attempted target state.
            allowed_transitions: List of allowed target states from current state.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition {entity_type}({entity_id}) "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(DomainError):
    """Raised when local input fails validation.

    Recoverable: the edit session stays open and the field errors are
    reported back to the user.
    """

    def __init__(self, message: str, fields: dict[str, str] | None = None) -> None:
        """Initialize validation error.

        Args:
            message: Summary message.
            fields: Map of field name to error message.
        """
        field_errors = fields or {}
        super().__init__(message, details={"fields": field_errors})
        self.fields = field_errors


class ImageRejectedError(ValidationError):
    """Raised when a selected image violates type or size constraints."""

    def __init__(self, filename: str, reason: str) -> None:
        """Initialize image rejected error.

        Args:
            filename: Name of the rejected file.
            reason: Why the file was rejected.
        """
        super().__init__(reason, fields={"image": reason})
        self.details["filename"] = filename
        self.filename = filename


# ============================================================================
# Remote Operation Errors
# ============================================================================


class FetchError(DomainError):
    """Raised when reading the catalog from the gateway fails.

    The previous snapshot is preserved.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "FETCH_FAILED",
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            message,
            details={"error_code": error_code, "status_code": status_code},
        )
        self.error_code = error_code
        self.status_code = status_code


class MutationError(DomainError):
    """Raised when a create/update/delete/patch call fails.

    Local state for the affected entry is left unmutated.
    """

    def __init__(
        self,
        entry_id: str | None,
        operation: str,
        message: str,
        error_code: str = "MUTATION_FAILED",
        status_code: int | None = None,
    ) -> None:
        """Initialize mutation error.

        Args:
            entry_id: Affected entry, None for creations.
            operation: Gateway operation name.
            message: Error message from the gateway.
            error_code: Gateway error code.
            status_code: HTTP status code when known.
        """
        super().__init__(
            f"{operation} failed for {entry_id or 'new entry'}: {message}",
            details={
                "entry_id": entry_id,
                "operation": operation,
                "error_code": error_code,
                "status_code": status_code,
            },
        )
        self.entry_id = entry_id
        self.operation = operation
        self.error_code = error_code
        self.status_code = status_code


class SessionExpiredError(DomainError):
    """Raised when the gateway rejected the session credential (401)."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            "Session expired, please sign in again",
            details={"operation": operation},
        )
        self.operation = operation


class AggregateBatchError(DomainError):
    """Raised when one or more sub-operations of a batch failed.

    Succeeded sub-operations are not rolled back.
    """

    def __init__(
        self,
        operation: str,
        succeeded: list[str],
        failed: dict[str, str],
    ) -> None:
        """Initialize aggregate batch error.

        Args:
            operation: Batch operation name.
            succeeded: IDs whose sub-operation succeeded.
            failed: Map of failed ID to error message.
        """
        super().__init__(
            f"{operation}: {len(failed)} of {len(succeeded) + len(failed)} "
            f"failed ({', '.join(sorted(failed))})",
            details={
                "operation": operation,
                "succeeded": list(succeeded),
                "failed": dict(failed),
            },
        )
        self.operation = operation
        self.succeeded = list(succeeded)
        self.failed = dict(failed)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def failed_ids(self) -> list[str]:
        return list(self.failed)


# ============================================================================
# Lookup Errors
# ============================================================================


class EntryNotFoundError(DomainError):
    """Raised when an entry is not present in the current snapshot."""

    def __init__(self, entry_id: str) -> None:
        super().__init__(
            f"Catalog entry {entry_id} not found",
            details={"entry_id": entry_id},
        )
        self.entry_id = entry_id
