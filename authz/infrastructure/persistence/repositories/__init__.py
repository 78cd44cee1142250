"""Repositories: permission store and append-only audit log."""

from authz.infrastructure.persistence.repositories.audit_log_repo import (
    AuditLogRepository,
)
from authz.infrastructure.persistence.repositories.base import BaseRepository
from authz.infrastructure.persistence.repositories.permission_repo import (
    PermissionRepository,
)

__all__ = ["AuditLogRepository", "BaseRepository", "PermissionRepository"]
