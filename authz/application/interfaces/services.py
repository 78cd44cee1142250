"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from authz.application.dtos.audit_log import AuditLogResult
    from authz.application.dtos.permission import PermissionChange
    from authz.shared.context import ActorContext


class IPermissionResolver(Protocol):
    """Protocol for capability resolution (DIP)."""

    async def get_role_capabilities(self, role_id: int) -> dict[str, str]:
        """Return {"resource:action": scope} for the role's granted rows."""

    async def get_vocabulary(self) -> dict[str, list[str]]:
        """Return known resource and action names."""


class IPermissionAuditService(Protocol):
    """Protocol for recording permission changes (DIP)."""

    async def record_change(
        self,
        role_id: int,
        change: PermissionChange,
        actor: ActorContext | None = None,
    ) -> AuditLogResult:
        """Append an audit entry for one changed row."""


class ICacheService(Protocol):
    """Protocol for cache (get, set, delete, delete_pattern)."""

    def is_available(self) -> bool:
        """Return True if cache is usable."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL."""

    async def delete(self, key: str) -> bool:
        """Remove key."""

    async def delete_pattern(self, pattern: str) -> int:
        """Remove keys matching pattern."""
