"""DTOs for permission use cases (no dependency on ORM)."""

from dataclasses import dataclass, field

from authz.domain.enums import DEFAULT_SCOPE, PermissionScope
from authz.domain.scope import ScopeFilter


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller as supplied by the identity collaborator."""

    user_id: int
    role_id: int
    team_id: int | None = None


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a permission check.

    scope is the granted scope when allowed; filter restricts which records
    the caller may touch and is the match-nothing filter on deny.
    """

    allowed: bool
    scope: PermissionScope | None
    filter: ScopeFilter

    @classmethod
    def deny(cls) -> "AccessDecision":
        return cls(allowed=False, scope=None, filter=ScopeFilter.nothing())


@dataclass(frozen=True)
class PermissionResult:
    """Permission read-model with resource and action names resolved."""

    id: int
    role_id: int
    resource_id: int
    resource: str
    action_id: int
    action: str
    granted: bool
    scope: PermissionScope

    @property
    def code(self) -> str:
        return f"{self.resource}:{self.action}"


@dataclass(frozen=True)
class VocabularyItem:
    """Resource or action read-model."""

    id: int
    name: str
    display_name: str
    description: str | None
    is_active: bool


@dataclass(frozen=True)
class RoleSummary:
    """Role read-model; permission_count is the number of granted rows."""

    id: int
    name: str
    display_name: str
    description: str | None
    hierarchy: int
    is_active: bool
    permission_count: int = 0


@dataclass(frozen=True)
class MatrixCell:
    """One (role, resource, action) cell; absent rows default to not granted, own."""

    role_id: int
    resource_id: int
    action_id: int
    granted: bool = False
    scope: PermissionScope = DEFAULT_SCOPE
    permission_id: int | None = None


@dataclass(frozen=True)
class PermissionMatrix:
    """Full roles x resources x actions view for the administration screen."""

    roles: list[RoleSummary]
    resources: list[VocabularyItem]
    actions: list[VocabularyItem]
    cells: list[MatrixCell]


@dataclass(frozen=True)
class PermissionUpdate:
    """Requested state for one cell of a role's row in the matrix."""

    resource_id: int
    action_id: int
    granted: bool
    scope: PermissionScope | str = DEFAULT_SCOPE


@dataclass(frozen=True)
class PermissionChange:
    """A cell that actually changed during a batch (for response and audit)."""

    resource_id: int
    action_id: int
    resource: str
    action: str
    old_granted: bool | None
    old_scope: PermissionScope | None
    new_granted: bool
    new_scope: PermissionScope


@dataclass(frozen=True)
class BatchResult:
    """Outcome of apply_batch. updated_count excludes no-op updates."""

    role_id: int
    updated_count: int
    changes: list[PermissionChange] = field(default_factory=list)


@dataclass(frozen=True)
class RolePermissions:
    """Role detail: the role and every permission row it holds."""

    role: RoleSummary
    permissions: list[PermissionResult]


@dataclass(frozen=True)
class PermissionStatistics:
    """Totals for the administration dashboard."""

    total_roles: int
    total_resources: int
    total_actions: int
    total_permissions: int
    scope_counts: dict[str, int]
    roles: list[RoleSummary]
