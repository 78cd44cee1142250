"""Roles API: list roles, role detail, and per-role permission batches."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from authz.api.v1.dependencies import get_permission_matrix_service, require_permission
from authz.application.dtos.permission import PermissionUpdate
from authz.application.services.permission_matrix_service import (
    PermissionMatrixService,
)
from authz.core.constants import SETTINGS_RESOURCE
from authz.core.limiter import limit_writes
from authz.schemas.permission import (
    BatchResultResponse,
    RoleDetailResponse,
    RolePermissionsUpdateRequest,
    RoleResponse,
)
from authz.shared.context import get_actor_context

router = APIRouter()


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    matrix_svc: Annotated[PermissionMatrixService, Depends(get_permission_matrix_service)],
    _: Annotated[object, Depends(require_permission(SETTINGS_RESOURCE, "read"))] = None,
):
    """List roles (highest hierarchy first) with granted permission counts."""
    roles = await matrix_svc.list_roles()
    return [RoleResponse.model_validate(r) for r in roles]


@router.get("/{role_id}", response_model=RoleDetailResponse)
async def get_role(
    role_id: int,
    matrix_svc: Annotated[PermissionMatrixService, Depends(get_permission_matrix_service)],
    _: Annotated[object, Depends(require_permission(SETTINGS_RESOURCE, "read"))] = None,
):
    """Get a role and its permission rows."""
    detail = await matrix_svc.get_role_permissions(role_id)
    return RoleDetailResponse.model_validate(detail)


@router.patch("/{role_id}/permissions", response_model=BatchResultResponse)
@limit_writes
async def update_role_permissions(
    request: Request,
    role_id: int,
    body: RolePermissionsUpdateRequest,
    matrix_svc: Annotated[PermissionMatrixService, Depends(get_permission_matrix_service)],
    _: Annotated[object, Depends(require_permission(SETTINGS_RESOURCE, "update"))] = None,
):
    """Apply a batch of permission updates to the role atomically."""
    result = await matrix_svc.apply_batch(
        role_id,
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
