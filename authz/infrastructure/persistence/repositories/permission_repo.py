"""Permission store: roles, resources, actions, and permission rows."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from authz.application.dtos.permission import (
    MatrixCell,
    PermissionResult,
    RoleSummary,
    VocabularyItem,
)
from authz.domain.enums import PermissionScope
from authz.infrastructure.persistence.models.permission import Permission
from authz.infrastructure.persistence.models.role import Action, Resource, Role
from authz.infrastructure.persistence.repositories.base import BaseRepository


PermissionKey = tuple[int, int]


def _role_to_summary(role: Role, permission_count: int = 0) -> RoleSummary:
    return RoleSummary(
        id=role.id,
        name=role.name,
        display_name=role.display_name,
        description=role.description,
        hierarchy=role.hierarchy,
        is_active=role.is_active,
        permission_count=permission_count,
    )


def _vocab_to_item(row: Resource | Action) -> VocabularyItem:
    return VocabularyItem(
        id=row.id,
        name=row.name,
        display_name=row.display_name,
        description=row.description,
        is_active=row.is_active,
    )


class PermissionRepository(BaseRepository[Permission]):
    """Permission rows keyed by (role, resource, action), plus vocabulary reads.

    One row per triple; upsert_permission is idempotent and backed by the
    unique constraint. Does not commit; callers own the transaction.
    """

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Permission)

    # Vocabulary

    async def get_role(self, role_id: int) -> Role | None:
        result = await self.db.execute(select(Role).where(Role.id == role_id))
        return result.scalar_one_or_none()

    async def list_roles(self, *, include_inactive: bool = True) -> list[RoleSummary]:
        """Return roles ordered by hierarchy (highest first) with granted counts."""
        stmt = select(Role).order_by(Role.hierarchy.desc(), Role.id)
        if not include_inactive:
            stmt = stmt.where(Role.is_active.is_(True))
        roles = (await self.db.execute(stmt)).scalars().all()
        counts = await self.count_granted_by_role()
        return [_role_to_summary(r, counts.get(r.id, 0)) for r in roles]

    async def get_role_summary(self, role_id: int) -> RoleSummary | None:
        role = await self.get_role(role_id)
        if role is None:
            return None
        counts = await self.count_granted_by_role()
        return _role_to_summary(role, counts.get(role.id, 0))

    async def list_resources(self, *, include_inactive: bool = False) -> list[VocabularyItem]:
        stmt = select(Resource).order_by(Resource.id)
        if not include_inactive:
            stmt = stmt.where(Resource.is_active.is_(True))
        return [_vocab_to_item(r) for r in (await self.db.execute(stmt)).scalars().all()]

    async def list_actions(self, *, include_inactive: bool = False) -> list[VocabularyItem]:
        stmt = select(Action).order_by(Action.id)
        if not include_inactive:
            stmt = stmt.where(Action.is_active.is_(True))
        return [_vocab_to_item(a) for a in (await self.db.execute(stmt)).scalars().all()]

    async def get_resources_by_ids(self, ids: set[int]) -> dict[int, VocabularyItem]:
        if not ids:
            return {}
        result = await self.db.execute(select(Resource).where(Resource.id.in_(ids)))
        return {r.id: _vocab_to_item(r) for r in result.scalars().all()}

    async def get_actions_by_ids(self, ids: set[int]) -> dict[int, VocabularyItem]:
        if not ids:
            return {}
        result = await self.db.execute(select(Action).where(Action.id.in_(ids)))
        return {a.id: _vocab_to_item(a) for a in result.scalars().all()}

    # Permission rows

    async def get_permission(
        self, role_id: int, resource_id: int, action_id: int
    ) -> Permission | None:
        result = await self.db.execute(
            select(Permission).where(
                Permission.role_id == role_id,
                Permission.resource_id == resource_id,
                Permission.action_id == action_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_permissions_for_role(self, role_id: int) -> list[PermissionResult]:
        """Return the role's active rows with resource/action names (granted or not)."""
        stmt = (
            select(Permission, Resource.name, Action.name)
            .join(Resource, Resource.id == Permission.resource_id)
            .join(Action, Action.id == Permission.action_id)
            .where(Permission.role_id == role_id, Permission.is_active.is_(True))
            .order_by(Resource.id, Action.id)
        )
        result = await self.db.execute(stmt)
        return [
            PermissionResult(
                id=p.id,
                role_id=p.role_id,
                resource_id=p.resource_id,
                resource=resource_name,
                action_id=p.action_id,
                action=action_name,
                granted=p.granted,
                scope=PermissionScope(p.scope),
            )
            for p, resource_name, action_name in result.all()
        ]

    async def lock_role_permissions(self, role_id: int) -> dict[PermissionKey, Permission]:
        """Lock the role and its rows (SELECT ... FOR UPDATE), keyed by (resource, action).

        Locking the role row serializes concurrent batches on the same role,
        including ones that insert rows not yet present. SQLite ignores the
        lock clause; its single writer gives the same guarantee.
        """
        await self.db.execute(select(Role.id).where(Role.id == role_id).with_for_update())
        result = await self.db.execute(
            select(Permission)
            .where(Permission.role_id == role_id)
            .with_for_update()
        )
        return {(p.resource_id, p.action_id): p for p in result.scalars().all()}

    async def upsert_permission(
        self,
        role_id: int,
        resource_id: int,
        action_id: int,
        *,
        granted: bool,
        scope: PermissionScope,
        existing: Permission | None = None,
    ) -> Permission:
        """Create or update the row for the triple; idempotent.

        When existing is omitted it is looked up. The unique constraint on
        (role_id, resource_id, action_id) rejects a duplicate insert.
        """
        row = existing or await self.get_permission(role_id, resource_id, action_id)
        if row is None:
            row = Permission(
                role_id=role_id,
                resource_id=resource_id,
                action_id=action_id,
                granted=granted,
                scope=scope.value,
                is_active=True,
            )
            self.db.add(row)
        else:
            row.granted = granted
            row.scope = scope.value
            row.is_active = True
        await self.db.flush()
        return row

    async def get_full_matrix(self) -> list[MatrixCell]:
        """Return every roles x resources x actions cell.

        Cells with no stored row default to granted=False, scope own.
        Inactive resources and actions are omitted.
        """
        role_ids = (await self.db.execute(select(Role.id).order_by(Role.id))).scalars().all()
        resource_ids = (
            await self.db.execute(
                select(Resource.id).where(Resource.is_active.is_(True)).order_by(Resource.id)
            )
        ).scalars().all()
        action_ids = (
            await self.db.execute(
                select(Action.id).where(Action.is_active.is_(True)).order_by(Action.id)
            )
        ).scalars().all()
        stored: dict[tuple[int, int, int], Permission] = {
            (p.role_id, p.resource_id, p.action_id): p
            for p in (
                await self.db.execute(select(Permission).where(Permission.is_active.is_(True)))
            ).scalars().all()
        }
        cells: list[MatrixCell] = []
        for role_id in role_ids:
            for resource_id in resource_ids:
                for action_id in action_ids:
                    row = stored.get((role_id, resource_id, action_id))
                    if row is None:
                        cells.append(MatrixCell(role_id, resource_id, action_id))
                    else:
                        cells.append(
                            MatrixCell(
                                role_id=role_id,
                                resource_id=resource_id,
                                action_id=action_id,
                                granted=row.granted,
                                scope=PermissionScope(row.scope),
                                permission_id=row.id,
                            )
                        )
        return cells

    # Statistics

    async def count_granted_by_role(self) -> dict[int, int]:
        result = await self.db.execute(
            select(Permission.role_id, func.count(Permission.id))
            .where(Permission.granted.is_(True), Permission.is_active.is_(True))
            .group_by(Permission.role_id)
        )
        return {role_id: int(n) for role_id, n in result.all()}

    async def count_granted_by_scope(self) -> dict[str, int]:
        result = await self.db.execute(
            select(Permission.scope, func.count(Permission.id))
            .where(Permission.granted.is_(True), Permission.is_active.is_(True))
            .group_by(Permission.scope)
        )
        counts: dict[str, Any] = {scope: 0 for scope in PermissionScope.values()}
        counts.update({scope: int(n) for scope, n in result.all()})
        return counts

    async def count_vocabulary(self) -> tuple[int, int, int]:
        """Return (roles, active resources, active actions)."""
        roles = await self.db.execute(select(func.count()).select_from(Role))
        resources = await self.db.execute(
            select(func.count()).select_from(Resource).where(Resource.is_active.is_(True))
        )
        actions = await self.db.execute(
            select(func.count()).select_from(Action).where(Action.is_active.is_(True))
        )
        return int(roles.scalar_one()), int(resources.scalar_one()), int(actions.scalar_one())
