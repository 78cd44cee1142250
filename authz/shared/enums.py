"""Shared enumerations for the authorization engine.

Cross-cutting enums used by application and infrastructure (e.g. audit,
actor type). Domain-specific enums (e.g. PermissionScope) live in
authz.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Actor type for audit tracking (who performed the action)."""

    USER = "user"
    SYSTEM = "system"


class AuditAction(_ValuesMixin, str, Enum):
    """Kind of permission change recorded in the audit log."""

    GRANTED = "granted"
    REVOKED = "revoked"
    UPDATED = "updated"
    CREATED = "created"
    DELETED = "deleted"
