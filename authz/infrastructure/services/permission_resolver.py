"""Resolves role capability sets from the DB (implements IPermissionResolver)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from authz.infrastructure.persistence.models.permission import Permission
from authz.infrastructure.persistence.models.role import Action, Resource, Role


class PermissionResolver:
    """Resolves capabilities by joining permission, role, resource and action."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_role_capabilities(self, role_id: int) -> dict[str, str]:
        """Return {"resource:action": scope} for granted, active rows of an active role.

        An inactive role, resource or action contributes nothing.
        """
        query = (
            select(Resource.name, Action.name, Permission.scope)
            .select_from(Permission)
            .join(Role, Role.id == Permission.role_id)
            .join(Resource, Resource.id == Permission.resource_id)
            .join(Action, Action.id == Permission.action_id)
            .where(
                Permission.role_id == role_id,
                Permission.granted.is_(True),
                Permission.is_active.is_(True),
                Role.is_active.is_(True),
                Resource.is_active.is_(True),
                Action.is_active.is_(True),
            )
        )
        result = await self.db.execute(query)
        return {f"{resource}:{action}": scope for resource, action, scope in result.all()}

    async def get_vocabulary(self) -> dict[str, list[str]]:
        """Return every known resource and action name (active or not)."""
        resources = (await self.db.execute(select(Resource.name))).scalars().all()
        actions = (await self.db.execute(select(Action.name))).scalars().all()
        return {"resources": sorted(resources), "actions": sorted(actions)}
