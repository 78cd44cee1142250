"""Permission audit API: history, CSV export, and chain verification."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from authz.api.v1.dependencies import get_audit_log_repo, require_permission
from authz.application.dtos.audit_log import AuditLogFilters
from authz.application.services.audit_export import export_audit_csv
from authz.core.constants import SETTINGS_RESOURCE
from authz.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from authz.schemas.audit_log import (
    AuditLogEntryResponse,
    AuditLogListResponse,
    ChainVerificationResponse,
)
from authz.shared.utils.datetime import utc_now

router = APIRouter()


def _filters(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    role_id: int | None = Query(None, description="Filter by affected role"),
    actor_id: int | None = Query(None, description="Filter by acting user"),
    action: str | None = Query(None, description="granted, revoked, updated, created, deleted"),
    resource_type: str | None = Query(None, description="Filter by resource name"),
    start_date: datetime | None = Query(None, description="From (inclusive) ISO8601"),
    end_date: datetime | None = Query(None, description="To (inclusive) ISO8601"),
) -> AuditLogFilters:
    return AuditLogFilters(
        role_id=role_id,
        actor_id=actor_id,
        action=action,
        resource_type=resource_type,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )


@router.get("", response_model=AuditLogListResponse)
async def list_audit_log(
    filters: Annotated[AuditLogFilters, Depends(_filters)],
    audit_repo: Annotated[AuditLogRepository, Depends(get_audit_log_repo)],
    _: Annotated[object, Depends(require_permission(SETTINGS_RESOURCE, "read"))] = None,
):
    """List permission changes (newest first, paginated, optional filters)."""
    items = await audit_repo.query(filters)
    total = await audit_repo.count(filters)
    return AuditLogListResponse(
        items=[AuditLogEntryResponse.model_validate(e) for e in items],
        skip=filters.skip,
        limit=filters.limit,
        total=total,
    )


@router.get("/export")
async def export_audit_log(
    filters: Annotated[AuditLogFilters, Depends(_filters)],
    audit_repo: Annotated[AuditLogRepository, Depends(get_audit_log_repo)],
    _: Annotated[object, Depends(require_permission(SETTINGS_RESOURCE, "read"))] = None,
) -> Response:
    """Download the same entries list_audit_log returns, as CSV."""
    items = await audit_repo.query(filters)
    filename = f"permission-audit-{utc_now().strftime('%Y%m%d%H%M%S')}.csv"
    return Response(
        content=export_audit_csv(items),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/verify", response_model=ChainVerificationResponse)
async def verify_audit_chain(
    audit_repo: Annotated[AuditLogRepository, Depends(get_audit_log_repo)],
    _: Annotated[object, Depends(require_permission(SETTINGS_RESOURCE, "read"))] = None,
):
    """Recompute the audit hash chain and report the first broken entry, if any."""
    result = await audit_repo.verify_chain()
    return ChainVerificationResponse.model_validate(result)
