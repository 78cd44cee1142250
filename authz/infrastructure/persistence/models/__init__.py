"""Persistence models: ORM entities and mixins."""

from authz.infrastructure.persistence.models.audit_log import PermissionAuditLog
from authz.infrastructure.persistence.models.mixins import (
    ActiveMixin,
    CreatedAtMixin,
    CuidMixin,
    IntIdMixin,
    ReferenceModel,
    TimestampMixin,
)
from authz.infrastructure.persistence.models.permission import Permission
from authz.infrastructure.persistence.models.role import Action, Resource, Role

__all__ = [
    "Action",
    "ActiveMixin",
    "CreatedAtMixin",
    "CuidMixin",
    "IntIdMixin",
    "Permission",
    "PermissionAuditLog",
    "ReferenceModel",
    "Resource",
    "Role",
    "TimestampMixin",
]
