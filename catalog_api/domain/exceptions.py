"""Domain exceptions.

All domain-level errors raised by the catalog and credential services.
The API layer maps each class to an HTTP status and error code.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the API layer.
    """

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """Raised when a required field is missing or malformed."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        """Initialize validation error.

        Args:
            message: Human-readable error message.
            fields: Names of the offending fields.
        """
        super().__init__(message, details={"fields": fields or []})
        self.fields = fields or []


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Product", "User").
            entity_id: ID that was looked up.
        """
        super().__init__(
            f"{entity_type} not found",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidIdentifierError(NotFoundError):
    """Raised when an id does not have the store's identifier shape.

    Callers treat it exactly like a missing record.
    """

    error_code = "INVALID_IDENTIFIER"


class ForbiddenError(DomainError):
    """Raised when the caller may not mutate the target record."""

    error_code = "FORBIDDEN"

    def __init__(self, action: str, entity_type: str = "product") -> None:
        """Initialize forbidden error.

        Args:
            action: Attempted action (e.g., "update", "delete").
            entity_type: Type of the protected entity.
        """
        super().__init__(
            f"Not authorized to {action} this {entity_type}",
            details={"action": action},
        )
        self.action = action


class AuthenticationError(DomainError):
    """Raised when credentials or bearer tokens are invalid."""

    error_code = "UNAUTHORIZED"


class ConflictError(DomainError):
    """Raised when a unique attribute is already taken."""

    error_code = "CONFLICT"


class TransientStoreError(DomainError):
    """Raised on store timeouts or connectivity failures.

    The underlying exception is kept as ``cause`` (and chained) for
    diagnostics. It must not be shown to untrusted callers.
    """

    error_code = "SERVICE_UNAVAILABLE"

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        """Initialize transient store error.

        Args:
            operation: Store operation that failed.
            cause: Underlying exception.
        """
        super().__init__(
            f"Store operation '{operation}' failed, try again later",
            details={"operation": operation},
        )
        self.operation = operation
        self.cause = cause
