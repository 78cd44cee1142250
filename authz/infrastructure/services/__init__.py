"""Infrastructure services: capability resolution, permission audit, RBAC seed."""

from authz.infrastructure.services.permission_audit_service import (
    PermissionAuditService,
    classify_change,
)
from authz.infrastructure.services.permission_resolver import PermissionResolver
from authz.infrastructure.services.rbac_seed import RbacSeedService

__all__ = [
    "PermissionAuditService",
    "PermissionResolver",
    "RbacSeedService",
    "classify_change",
]
