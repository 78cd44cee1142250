"""Application ports (Protocols) implemented by infrastructure."""

from authz.application.interfaces.repositories import (
    IAuditLogRepository,
    IPermissionRepository,
)
from authz.application.interfaces.services import (
    ICacheService,
    IPermissionAuditService,
    IPermissionResolver,
)

__all__ = [
    "IAuditLogRepository",
    "ICacheService",
    "IPermissionAuditService",
    "IPermissionRepository",
    "IPermissionResolver",
]
