"""
Domain Exceptions for Domain-Driven Design

These exceptions represent business rule violations and domain-specific errors.
Each one carries a stable ErrorKind that the API layer maps to an HTTP status.
"""

from typing import Any

from medbook.core.domain.value_objects import StatusEnum


class ErrorKind(StatusEnum):
    """Stable error categories exposed to callers."""

    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    FORBIDDEN = "forbidden"
    SLOT_UNAVAILABLE = "slot_unavailable"
    CONFIGURATION = "configuration"
    INTEGRATION = "integration"


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate business rule violations.
    """

    kind: ErrorKind = ErrorKind.BAD_REQUEST

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "DUPLICATE_BOOKING")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "kind": self.kind.value,
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """
    Raised when input validation fails.

    Use for malformed schedules, out-of-range query parameters, etc.
    """

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class BusinessRuleViolationException(DomainException):
    """
    Raised when a business rule is violated.

    Use for duplicate bookings, unsupported consultation types, etc.
    """

    def __init__(self, rule: str, message: str | None = None, details: dict[str, Any] | None = None):
        self.rule = rule
        msg = message or f"Business rule violated: {rule}"
        details = details or {}
        details["rule"] = rule
        super().__init__(msg, "BUSINESS_RULE_VIOLATION", details)


class InvalidTransitionException(DomainException):
    """Raised when a status change has no edge from the current status."""

    def __init__(self, current_state: str, requested_state: str, message: str | None = None):
        self.current_state = current_state
        self.requested_state = requested_state
        msg = message or f"Cannot transition from '{current_state}' to '{requested_state}'"
        super().__init__(
            msg,
            "INVALID_TRANSITION",
            {"current_state": current_state, "requested_state": requested_state},
        )


class AuthorizationException(DomainException):
    """Raised when an actor is not authorized to perform an operation."""

    kind = ErrorKind.FORBIDDEN

    def __init__(self, operation: str, resource: str | None = None, message: str | None = None):
        self.operation = operation
        self.resource = resource
        msg = message or f"Not authorized to perform '{operation}'"
        if resource and not message:
            msg += f" on '{resource}'"
        super().__init__(
            msg,
            "AUTHORIZATION_ERROR",
            {
                "operation": operation,
                "resource": resource,
            },
        )


class SlotUnavailableError(DomainException):
    """Raised when a slot does not exist or has no remaining capacity."""

    kind = ErrorKind.SLOT_UNAVAILABLE

    def __init__(
        self,
        doctor_id: Any | None = None,
        time_slot: str | None = None,
        message: str | None = None,
    ):
        self.doctor_id = doctor_id
        self.time_slot = time_slot
        msg = message or "Selected time slot is not available"
        details: dict[str, Any] = {}
        if doctor_id:
            details["doctor_id"] = str(doctor_id)
        if time_slot:
            details["time_slot"] = time_slot
        super().__init__(msg, "SLOT_UNAVAILABLE", details)


class ConfigurationError(DomainException):
    """Raised when schedule data cannot produce a finite slot sequence."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "SCHEDULE_CONFIGURATION_ERROR", details)


class IntegrationException(DomainException):
    """Raised when an external collaborator fails."""

    kind = ErrorKind.INTEGRATION

    def __init__(self, service: str, message: str, original_error: Exception | None = None):
        self.service = service
        self.original_error = original_error
        details: dict[str, Any] = {"service": service}
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(message, "INTEGRATION_ERROR", details)
