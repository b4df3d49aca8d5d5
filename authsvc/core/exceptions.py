"""
Custom exception hierarchy for the application.
"""

from typing import Any

from fastapi import HTTPException, status


class AuthServiceException(Exception):
    """Base exception for all application exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(AuthServiceException):
    """Raised when authentication fails."""
    pass


class AuthorizationError(AuthServiceException):
    """Raised when user lacks permissions."""
    pass


class PrivacyDenied(AuthorizationError):
    """Raised when a privacy rule denies a query or mutation."""

    def __init__(self, entity: str, rule: str, reason: str):
        self.entity = entity
        self.rule = rule
        super().__init__(
            f"{entity}: {reason}",
            details={"entity": entity, "rule": rule},
        )


class ResourceNotFoundError(AuthServiceException):
    """Raised when a requested resource doesn't exist."""
    pass


class ConflictError(AuthServiceException):
    """Raised when a write violates a uniqueness constraint."""
    pass


class ValidationError(AuthServiceException):
    """Raised when input validation fails."""
    pass


class ImmutableFieldError(ValidationError):
    """Raised when an update tries to change a field fixed at creation."""

    def __init__(self, entity: str, field: str):
        self.entity = entity
        self.field = field
        super().__init__(
            f"{entity}.{field} is immutable",
            details={"entity": entity, "field": field},
        )


class MutationError(AuthServiceException):
    """Raised by a mutation hook to abort the mutation before persistence."""

    def __init__(self, entity: str, operation: str, message: str):
        self.entity = entity
        self.operation = operation
        super().__init__(
            message,
            details={"entity": entity, "operation": operation},
        )


class MissingTenantContext(MutationError):
    """The tenant ID is neither on the mutation nor in the invocation context."""

    def __init__(self, entity: str, operation: str = "create"):
        super().__init__(entity, operation, "tenant_id is missing from context")


class MissingTenantForCodeGeneration(MutationError):
    """A name is present but no tenant ID is available to derive the code."""

    def __init__(self, entity: str, operation: str = "create"):
        super().__init__(entity, operation, "tenant_id is required for code generation")


class MissingNameForCodeGeneration(MutationError):
    """The entity requires a name to derive its code and none was given."""

    def __init__(self, entity: str, operation: str = "create"):
        super().__init__(entity, operation, "name is required for code generation")


# HTTP Exception helpers
def unauthorized(detail: str = "Not authenticated") -> HTTPException:
    """Return 401 Unauthorized exception."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden(detail: str = "Insufficient permissions") -> HTTPException:
    """Return 403 Forbidden exception."""
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=detail,
    )


def not_found(detail: str = "Resource not found") -> HTTPException:
    """Return 404 Not Found exception."""
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail,
    )


def bad_request(detail: str = "Bad request") -> HTTPException:
    """Return 400 Bad Request exception."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail,
    )


def conflict(detail: str = "Resource already exists") -> HTTPException:
    """Return 409 Conflict exception."""
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=detail,
    )


# Application exception -> HTTP status
EXCEPTION_STATUS_CODES: dict[type[AuthServiceException], int] = {
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    ResourceNotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    MutationError: status.HTTP_400_BAD_REQUEST,
}


def status_code_for(exc: AuthServiceException) -> int:
    """Resolve the HTTP status for an application exception (most specific class wins)."""
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_CODES:
            return EXCEPTION_STATUS_CODES[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR
