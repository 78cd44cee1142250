"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from authz.application.dtos.audit_log import (
        AuditLogEntryCreate,
        AuditLogFilters,
        AuditLogResult,
        ChainVerification,
    )
    from authz.application.dtos.permission import (
        MatrixCell,
        PermissionResult,
        RoleSummary,
        VocabularyItem,
    )
    from authz.domain.enums import PermissionScope


class IPermissionRepository(Protocol):
    """Protocol for the permission store (DIP)."""

    async def get_role_summary(self, role_id: int) -> RoleSummary | None:
        """Return the role with its granted count, or None."""

    async def list_roles(self, *, include_inactive: bool = True) -> list[RoleSummary]:
        """Return roles ordered by hierarchy, highest first."""

    async def list_resources(self, *, include_inactive: bool = False) -> list[VocabularyItem]:
        """Return resources."""

    async def list_actions(self, *, include_inactive: bool = False) -> list[VocabularyItem]:
        """Return actions."""

    async def get_resources_by_ids(self, ids: set[int]) -> dict[int, VocabularyItem]:
        """Return resources keyed by id (missing ids are absent)."""

    async def get_actions_by_ids(self, ids: set[int]) -> dict[int, VocabularyItem]:
        """Return actions keyed by id (missing ids are absent)."""

    async def get_permissions_for_role(self, role_id: int) -> list[PermissionResult]:
        """Return the role's active rows."""

    async def lock_role_permissions(self, role_id: int) -> dict[tuple[int, int], Any]:
        """Lock and return the role's rows keyed by (resource_id, action_id)."""

    async def upsert_permission(
        self,
        role_id: int,
        resource_id: int,
        action_id: int,
        *,
        granted: bool,
        scope: PermissionScope,
        existing: Any = None,
    ) -> Any:
        """Create or update the row for the triple."""

    async def get_full_matrix(self) -> list[MatrixCell]:
        """Return every roles x resources x actions cell."""

    async def count_granted_by_role(self) -> dict[int, int]:
        """Return granted row counts per role."""

    async def count_granted_by_scope(self) -> dict[str, int]:
        """Return granted row counts per scope."""

    async def count_vocabulary(self) -> tuple[int, int, int]:
        """Return (roles, resources, actions) counts."""


class IAuditLogRepository(Protocol):
    """Protocol for the append-only audit log (DIP)."""

    async def append(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one entry to the hash chain."""

    async def query(self, filters: AuditLogFilters) -> list[AuditLogResult]:
        """Return entries matching filters, newest first."""

    async def count(self, filters: AuditLogFilters) -> int:
        """Return the number of matching entries."""

    async def verify_chain(self) -> ChainVerification:
        """Recompute and check every entry hash."""
