"""Application services: authorization checks, permission matrix, audit export."""

from authz.application.services.audit_export import CSV_HEADERS, export_audit_csv
from authz.application.services.authorization_service import (
    AuthorizationService,
    permission_code,
)
from authz.application.services.hash_service import HashService, SHA256Algorithm
from authz.application.services.permission_matrix_service import (
    PermissionMatrixService,
)

__all__ = [
    "AuthorizationService",
    "CSV_HEADERS",
    "HashService",
    "PermissionMatrixService",
    "SHA256Algorithm",
    "export_audit_csv",
    "permission_code",
]
