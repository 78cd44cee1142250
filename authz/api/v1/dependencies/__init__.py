"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, not on infrastructure directly.
"""

from authz.api.v1.dependencies.auth import get_current_caller
from authz.api.v1.dependencies.db import (
    get_audit_log_repo,
    get_db_session_factory,
)
from authz.api.v1.dependencies.rbac import (
    get_authorization_service,
    get_permission_matrix_service,
    require_permission,
)

__all__ = [
    "get_audit_log_repo",
    "get_authorization_service",
    "get_current_caller",
    "get_db_session_factory",
    "get_permission_matrix_service",
    "require_permission",
]
