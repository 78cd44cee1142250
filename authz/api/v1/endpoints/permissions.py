"""Permissions API: caller capabilities, checks, matrix, and statistics."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from authz.api.v1.dependencies import (
    get_authorization_service,
    get_current_caller,
    get_permission_matrix_service,
    require_permission,
)
from authz.application.dtos.permission import CallerIdentity, PermissionUpdate
from authz.application.services.authorization_service import AuthorizationService
from authz.application.services.permission_matrix_service import (
    PermissionMatrixService,
)
from authz.core.constants import SETTINGS_RESOURCE
from authz.core.limiter import limit_writes
from authz.schemas.permission import (
    BatchResultResponse,
    CapabilitiesResponse,
    PermissionBatchRequest,
    PermissionCheckRequest,
    PermissionCheckResponse,
    PermissionMatrixResponse,
    PermissionStatisticsResponse,
)
from authz.shared.context import get_actor_context

router = APIRouter()


@router.get("/me", response_model=CapabilitiesResponse)
async def get_my_permissions(
    caller: Annotated[CallerIdentity, Depends(get_current_caller)],
    auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    matrix_svc: Annotated[PermissionMatrixService, Depends(get_permission_matrix_service)],
):
    """Return the caller's role and capability set ("resource:action" -> scope)."""
    capabilities = await auth_svc.get_role_capabilities(caller.role_id)
    role = await matrix_svc.get_role(caller.role_id)
    return CapabilitiesResponse(
        user_id=caller.user_id,
        role_id=caller.role_id,
        role_name=role.name if role else None,
        role_hierarchy=role.hierarchy if role else None,
        team_id=caller.team_id,
        permissions=capabilities,
    )


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permissions(
    body: PermissionCheckRequest,
    caller: Annotated[CallerIdentity, Depends(get_current_caller)],
    auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
):
    """Check several (resource, action) pairs for the caller."""
    results = await auth_svc.check_many(
        caller, [(item.resource, item.action) for item in body.checks]
    )
    return PermissionCheckResponse(results=results)


@router.get("/matrix", response_model=PermissionMatrixResponse)
async def get_permission_matrix(
    matrix_svc: Annotated[PermissionMatrixService, Depends(get_permission_matrix_service)],
    _: Annotated[object, Depends(require_permission(SETTINGS_RESOURCE, "update"))] = None,
):
    """Return the full roles x resources x actions grid."""
    matrix = await matrix_svc.get_full_matrix()
    return PermissionMatrixResponse.model_validate(matrix)


@router.patch("/matrix", response_model=BatchResultResponse)
@limit_writes
async def update_permission_matrix(
    request: Request,
    body: PermissionBatchRequest,
    matrix_svc: Annotated[PermissionMatrixService, Depends(get_permission_matrix_service)],
    _: Annotated[object, Depends(require_permission(SETTINGS_RESOURCE, "update"))] = None,
):
    """Apply a batch of cell updates to one role atomically."""
    result = await matrix_svc.apply_batch(
        body.role_id,
        [
            PermissionUpdate(
                resource_id=u.resource_id,
                action_id=u.action_id,
                granted=u.granted,
                scope=u.scope,
            )
            for u in body.updates
        ],
        actor=get_actor_context(),
    )
    return BatchResultResponse.model_validate(result)


@router.get("/statistics", response_model=PermissionStatisticsResponse)
async def get_permission_statistics(
    matrix_svc: Annotated[PermissionMatrixService, Depends(get_permission_matrix_service)],
    _: Annotated[object, Depends(require_permission(SETTINGS_RESOURCE, "read"))] = None,
):
    """Return totals of roles, resources, actions and granted permissions."""
    stats = await matrix_svc.get_statistics()
    return PermissionStatisticsResponse.model_validate(stats)
