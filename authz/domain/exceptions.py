"""Domain exceptions for the authorization engine.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class AuthzException(Exception):
    """Base exception for all authorization engine errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an HTTP error body."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidScopeException(AuthzException):
    """Raised when a scope value is not one of own, team, all."""

    def __init__(self, scope: object) -> None:
        super().__init__(
            f"Invalid permission scope: {scope!r}",
            "INVALID_SCOPE",
            {"scope": str(scope), "allowed": ["own", "team", "all"]},
        )


class BatchValidationException(AuthzException):
    """Raised when one or more updates in a permission batch are invalid.

    Nothing is written when this is raised; errors lists each offending
    update by its position in the batch.
    """

    def __init__(self, role_id: int, errors: list[dict[str, Any]]) -> None:
        """Initialize with the target role and per-update errors.

        Args:
            role_id: Role the batch was addressed to.
            errors: One dict per rejected update (index, field, message).
        """
        super().__init__(
            f"Permission batch for role {role_id} rejected: {len(errors)} invalid update(s)",
            "BATCH_VALIDATION_ERROR",
            {"role_id": role_id, "errors": errors},
        )
        self.errors = errors


class UnknownPermissionTargetException(AuthzException):
    """Raised when a check names a resource or action that does not exist.

    This is a caller programming error, not a denial.
    """

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(
            f"Unknown {kind}: {name}",
            "UNKNOWN_PERMISSION_TARGET",
            {"kind": kind, "name": name},
        )


class AuthenticationException(AuthzException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        """Initialize with optional message.

        Args:
            message: Description of the authentication failure.
        """
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(AuthzException):
    """Raised when the caller lacks the required permission for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
        required_scope: str | None = None,
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource name (e.g. 'entries', 'settings').
            action: Optional action that was attempted (e.g. 'create', 'read').
            message: Human-readable message; default used when resource/action omitted.
            required_scope: Minimum scope the operation needed, if any.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        if required_scope:
            details["required_scope"] = required_scope
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(AuthzException):
    """Raised when a requested record is not found."""

    def __init__(self, resource_type: str, resource_id: str | int) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of record (e.g. 'role', 'resource').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class SqlNotConfiguredException(AuthzException):
    """Raised when the database is not configured (DATABASE_URL missing)."""

    def __init__(self) -> None:
        super().__init__(
            "Database is not configured. Set DATABASE_URL.",
            "SERVICE_UNAVAILABLE",
        )


class CacheInvalidationException(AuthzException):
    """Raised when a committed permission change could not be evicted from the cache.

    The change itself is durable. Cached capabilities for the role may still
    be served until their TTL expires.
    """

    def __init__(self, role_id: int, stale_for_seconds: int) -> None:
        super().__init__(
            f"Permissions for role {role_id} were saved but the capability cache "
            f"could not be invalidated; checks may use stale data for up to "
            f"{stale_for_seconds}s",
            "CACHE_INVALIDATION_FAILED",
            {"role_id": role_id, "stale_for_seconds": stale_for_seconds},
        )
