"""Authorization and permission matrix dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authz.application.dtos.permission import CallerIdentity
from authz.application.services.authorization_service import AuthorizationService
from authz.application.services.hash_service import HashService
from authz.application.services.permission_matrix_service import (
    PermissionMatrixService,
)
from authz.core.config import get_settings
from authz.domain.enums import PermissionScope
from authz.infrastructure.persistence.database import get_db
from authz.infrastructure.persistence.repositories import (
    AuditLogRepository,
    PermissionRepository,
)
from authz.infrastructure.services import PermissionAuditService, PermissionResolver

from .auth import get_current_caller
from .db import get_db_session_factory


async def get_authorization_service(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthorizationService:
    """Build AuthorizationService with permission resolver and optional cache.

    Cache is set in app lifespan (app.state.cache) when Redis is enabled;
    otherwise cache is None and permission checks hit the DB only.
    """
    settings = get_settings()
    cache = getattr(request.app.state, "cache", None)
    return AuthorizationService(
        permission_resolver=PermissionResolver(db),
        cache=cache,
        cache_ttl=settings.cache_ttl_permissions,
        vocabulary_ttl=settings.cache_ttl_vocabulary,
    )


def _audit_service_factory(session: AsyncSession) -> PermissionAuditService:
    return PermissionAuditService(AuditLogRepository(session, HashService()))


def get_permission_matrix_service(
    session_factory: Annotated[
        async_sessionmaker[AsyncSession], Depends(get_db_session_factory)
    ],
    auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
) -> PermissionMatrixService:
    """Permission matrix service; invalidates the role cache after each commit."""
    return PermissionMatrixService(
        session_factory=session_factory,
        permission_repo_factory=PermissionRepository,
        audit_service_factory=_audit_service_factory,
        invalidate_role_cache=auth_svc.invalidate_role_cache,
    )


def require_permission(
    resource: str,
    action: str,
    required_scope: PermissionScope | None = None,
):
    """Dependency factory: require bearer auth and that the caller's role grants resource:action."""

    async def _require(
        caller: Annotated[CallerIdentity, Depends(get_current_caller)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> CallerIdentity:
        await auth_svc.require(caller, resource, action, required_scope)
        return caller

    return _require
