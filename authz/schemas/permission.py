"""Request/response schemas for permissions API (checks, matrix, batches)."""

from pydantic import BaseModel, ConfigDict, Field

from authz.domain.enums import PermissionScope


class CapabilitiesResponse(BaseModel):
    """The caller's identity and capability set."""

    user_id: int
    role_id: int
    role_name: str | None = None
    role_hierarchy: int | None = None
    team_id: int | None = None
    permissions: dict[str, PermissionScope] = Field(
        default_factory=dict, description='"resource:action" -> granted scope'
    )


class PermissionCheckItem(BaseModel):
    """One (resource, action) pair to check."""

    resource: str = Field(..., min_length=1, max_length=64)
    action: str = Field(..., min_length=1, max_length=64)


class PermissionCheckRequest(BaseModel):
    """Body for POST /permissions/check."""

    checks: list[PermissionCheckItem] = Field(..., min_length=1, max_length=100)


class PermissionCheckResponse(BaseModel):
    """Results keyed by "resource:action"."""

    results: dict[str, bool]


class VocabularyItemResponse(BaseModel):
    """Resource or action."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str
    description: str | None = None
    is_active: bool


class RoleResponse(BaseModel):
    """Role with its granted permission count."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str
    description: str | None = None
    hierarchy: int
    is_active: bool
    permission_count: int = 0


class MatrixCellResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role_id: int
    resource_id: int
    action_id: int
    granted: bool
    scope: PermissionScope
    permission_id: int | None = None


class PermissionMatrixResponse(BaseModel):
    """Full roles x resources x actions grid."""

    model_config = ConfigDict(from_attributes=True)

    roles: list[RoleResponse]
    resources: list[VocabularyItemResponse]
    actions: list[VocabularyItemResponse]
    cells: list[MatrixCellResponse]


class PermissionUpdateItem(BaseModel):
    """Requested state of one cell. scope is validated with the whole batch."""

    resource_id: int
    action_id: int
    granted: bool
    scope: str = PermissionScope.OWN.value


class RolePermissionsUpdateRequest(BaseModel):
    """Body for PATCH /roles/{role_id}/permissions."""

    updates: list[PermissionUpdateItem] = Field(..., max_length=500)


class PermissionBatchRequest(RolePermissionsUpdateRequest):
    """Body for PATCH /permissions/matrix."""

    role_id: int


class PermissionChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    resource_id: int
    action_id: int
    resource: str
    action: str
    old_granted: bool | None = None
    old_scope: PermissionScope | None = None
    new_granted: bool
    new_scope: PermissionScope


class BatchResultResponse(BaseModel):
    """Outcome of a permission batch; updated_count excludes no-ops."""

    model_config = ConfigDict(from_attributes=True)

    role_id: int
    updated_count: int
    changes: list[PermissionChangeResponse] = Field(default_factory=list)


class PermissionResponse(BaseModel):
    """Permission row with resource/action names."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    resource_id: int
    resource: str
    action_id: int
    action: str
    granted: bool
    scope: PermissionScope


class RoleDetailResponse(BaseModel):
    """Role and its permission rows."""

    model_config = ConfigDict(from_attributes=True)

    role: RoleResponse
    permissions: list[PermissionResponse]


class PermissionStatisticsResponse(BaseModel):
    """Totals for the administration dashboard."""

    model_config = ConfigDict(from_attributes=True)

    total_roles: int
    total_resources: int
    total_actions: int
    total_permissions: int
    scope_counts: dict[str, int]
    roles: list[RoleResponse]
