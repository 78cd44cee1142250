"""Domain layer: scope model, enums, and exceptions.

No dependencies on persistence or presentation. Used by application
and infrastructure layers.
"""

from authz.domain.enums import DEFAULT_SCOPE, PermissionScope
from authz.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    AuthzException,
    BatchValidationException,
    CacheInvalidationException,
    InvalidScopeException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    UnknownPermissionTargetException,
)
from authz.domain.scope import (
    FilterKind,
    ScopeFilter,
    parse_scope,
    resolve_filter,
    scope_satisfies,
)

__all__ = [
    "DEFAULT_SCOPE",
    "PermissionScope",
    "AuthzException",
    "AuthenticationException",
    "AuthorizationException",
    "BatchValidationException",
    "CacheInvalidationException",
    "InvalidScopeException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "UnknownPermissionTargetException",
    "FilterKind",
    "ScopeFilter",
    "parse_scope",
    "resolve_filter",
    "scope_satisfies",
]
