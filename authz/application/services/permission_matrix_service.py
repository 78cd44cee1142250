"""Permission matrix service: full grid reads and atomic batch updates.

apply_batch is the only multi-row mutation of the permission store. It owns
its unit of work: one session, one transaction spanning every permission
write and every audit append. The whole batch is validated before the first
write; any failure rolls everything back. Capability caches are invalidated
only after commit.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authz.application.dtos.permission import (
    BatchResult,
    PermissionChange,
    PermissionMatrix,
    PermissionStatistics,
    PermissionUpdate,
    RolePermissions,
    RoleSummary,
)
from authz.application.interfaces.repositories import IPermissionRepository
from authz.application.interfaces.services import IPermissionAuditService
from authz.domain.enums import DEFAULT_SCOPE, PermissionScope
from authz.domain.exceptions import (
    BatchValidationException,
    InvalidScopeException,
    ResourceNotFoundException,
)
from authz.domain.scope import parse_scope
from authz.shared.context import ActorContext, get_actor_context
from authz.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

PermissionRepoFactory = Callable[[AsyncSession], IPermissionRepository]
AuditServiceFactory = Callable[[AsyncSession], IPermissionAuditService]
RoleCacheInvalidator = Callable[[int], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class _ValidatedUpdate:
    resource_id: int
    action_id: int
    resource: str
    action: str
    granted: bool
    scope: PermissionScope


class PermissionMatrixService:
    """Administrative surface over the permission store."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        permission_repo_factory: PermissionRepoFactory,
        audit_service_factory: AuditServiceFactory,
        invalidate_role_cache: RoleCacheInvalidator | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._permission_repo_factory = permission_repo_factory
        self._audit_service_factory = audit_service_factory
        self._invalidate_role_cache = invalidate_role_cache

    async def get_full_matrix(self) -> PermissionMatrix:
        """Return roles, active resources and actions, and every cell of the grid."""
        async with self._session_factory() as session:
            repo = self._permission_repo_factory(session)
            return PermissionMatrix(
                roles=await repo.list_roles(),
                resources=await repo.list_resources(),
                actions=await repo.list_actions(),
                cells=await repo.get_full_matrix(),
            )

    async def list_roles(self) -> list[RoleSummary]:
        async with self._session_factory() as session:
            return await self._permission_repo_factory(session).list_roles()

    async def get_role(self, role_id: int) -> RoleSummary | None:
        """Return the role summary, or None when the role does not exist."""
        async with self._session_factory() as session:
            return await self._permission_repo_factory(session).get_role_summary(role_id)

    async def get_role_permissions(self, role_id: int) -> RolePermissions:
        """Return the role and its permission rows.

        Raises:
            ResourceNotFoundException: role does not exist.
        """
        async with self._session_factory() as session:
            repo = self._permission_repo_factory(session)
            role = await repo.get_role_summary(role_id)
            if role is None:
                raise ResourceNotFoundException("role", role_id)
            return RolePermissions(
                role=role, permissions=await repo.get_permissions_for_role(role_id)
            )

    async def get_statistics(self) -> PermissionStatistics:
        async with self._session_factory() as session:
            repo = self._permission_repo_factory(session)
            total_roles, total_resources, total_actions = await repo.count_vocabulary()
            scope_counts = await repo.count_granted_by_scope()
            return PermissionStatistics(
                total_roles=total_roles,
                total_resources=total_resources,
                total_actions=total_actions,
                total_permissions=sum(scope_counts.values()),
                scope_counts=scope_counts,
                roles=await repo.list_roles(),
            )

    async def _validate(
        self,
        repo: IPermissionRepository,
        role_id: int,
        updates: list[PermissionUpdate],
    ) -> list[_ValidatedUpdate]:
        """Validate every update; raise once with all errors, before any write."""
        if await repo.get_role_summary(role_id) is None:
            raise ResourceNotFoundException("role", role_id)

        resources = await repo.get_resources_by_ids({u.resource_id for u in updates})
        actions = await repo.get_actions_by_ids({u.action_id for u in updates})

        errors: list[dict[str, Any]] = []
        seen: set[tuple[int, int]] = set()
        validated: list[_ValidatedUpdate] = []
        for index, update in enumerate(updates):
            resource = resources.get(update.resource_id)
            action = actions.get(update.action_id)
            if resource is None or not resource.is_active:
                errors.append(
                    {
                        "index": index,
                        "field": "resource_id",
                        "message": f"Unknown or inactive resource: {update.resource_id}",
                    }
                )
            if action is None or not action.is_active:
                errors.append(
                    {
                        "index": index,
                        "field": "action_id",
                        "message": f"Unknown or inactive action: {update.action_id}",
                    }
                )
            try:
                scope = parse_scope(update.scope)
            except InvalidScopeException as exc:
                errors.append({"index": index, "field": "scope", "message": exc.message})
                continue
            key = (update.resource_id, update.action_id)
            if key in seen:
                errors.append(
                    {
                        "index": index,
                        "field": "resource_id",
                        "message": "Duplicate (resource_id, action_id) in batch",
                    }
                )
                continue
            seen.add(key)
            if resource is None or action is None:
                continue
            validated.append(
                _ValidatedUpdate(
                    resource_id=update.resource_id,
                    action_id=update.action_id,
                    resource=resource.name,
                    action=action.name,
                    granted=update.granted,
                    scope=scope if update.granted else DEFAULT_SCOPE,
                )
            )
        if errors:
            logger.warning(
                "Rejected permission batch for role %s: %d error(s)", role_id, len(errors)
            )
            raise BatchValidationException(role_id, errors)
        return validated

    async def apply_batch(
        self,
        role_id: int,
        updates: list[PermissionUpdate],
        actor: ActorContext | None = None,
    ) -> BatchResult:
        """Apply every update for the role atomically; return the changed count.

        Updates matching the stored granted/scope are no-ops: not written,
        not counted, not audited.

        Raises:
            ResourceNotFoundException: role does not exist.
            BatchValidationException: one or more updates are invalid (nothing written).
            SQLAlchemyError: the transaction could not commit (nothing written).
            CacheInvalidationException: the batch committed but the role's
                cached capabilities could not be evicted.
        """
        actor = actor or get_actor_context()
        changes: list[PermissionChange] = []
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    repo = self._permission_repo_factory(session)
                    audit = self._audit_service_factory(session)
                    validated = await self._validate(repo, role_id, updates)
                    current = await repo.lock_role_permissions(role_id)
                    for update in validated:
                        row = current.get((update.resource_id, update.action_id))
                        existing = row if row is not None and row.is_active else None
                        if (
                            existing is not None
                            and existing.granted == update.granted
                            and existing.scope == update.scope.value
                        ):
                            continue
                        if existing is None and not update.granted:
                            # Absent and denied are the same state.
                            continue
                        change = PermissionChange(
                            resource_id=update.resource_id,
                            action_id=update.action_id,
                            resource=update.resource,
                            action=update.action,
                            old_granted=existing.granted if existing is not None else None,
                            old_scope=PermissionScope(existing.scope)
                            if existing is not None
                            else None,
                            new_granted=update.granted,
                            new_scope=update.scope,
                        )
                        await repo.upsert_permission(
                            role_id,
                            update.resource_id,
                            update.action_id,
                            granted=update.granted,
                            scope=update.scope,
                            existing=row,
                        )
                        await audit.record_change(role_id, change, actor)
                        changes.append(change)
        except SQLAlchemyError:
            logger.exception(
                "Permission batch for role %s failed to commit; rolled back", role_id
            )
            raise

        if changes and self._invalidate_role_cache is not None:
            await self._invalidate_role_cache(role_id)
        logger.info(
            "Applied permission batch for role %s: %d of %d update(s) changed",
            role_id,
            len(changes),
            len(updates),
        )
        return BatchResult(role_id=role_id, updated_count=len(changes), changes=changes)
