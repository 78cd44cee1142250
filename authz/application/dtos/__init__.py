"""Application DTOs (frozen dataclasses; no ORM dependency)."""

from authz.application.dtos.audit_log import (
    AuditLogEntryCreate,
    AuditLogFilters,
    AuditLogResult,
    ChainVerification,
)
from authz.application.dtos.permission import (
    AccessDecision,
    BatchResult,
    CallerIdentity,
    MatrixCell,
    PermissionChange,
    PermissionMatrix,
    PermissionResult,
    PermissionStatistics,
    PermissionUpdate,
    RolePermissions,
    RoleSummary,
    VocabularyItem,
)

__all__ = [
    "AccessDecision",
    "AuditLogEntryCreate",
    "AuditLogFilters",
    "AuditLogResult",
    "BatchResult",
    "CallerIdentity",
    "ChainVerification",
    "MatrixCell",
    "PermissionChange",
    "PermissionMatrix",
    "PermissionResult",
    "PermissionStatistics",
    "PermissionUpdate",
    "RolePermissions",
    "RoleSummary",
    "VocabularyItem",
]
