"""Default RBAC vocabulary and grants (roles, resources, actions, permissions).

Idempotent: existing rows are left as they are, so re-running never
overwrites changes an administrator made through the matrix.
"""

from __future__ import annotations

from typing import TypedDict, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from authz.infrastructure.persistence.models.permission import Permission
from authz.infrastructure.persistence.models.role import Action, Resource, Role
from authz.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", Role, Resource, Action)


class RoleData(TypedDict):
    """Role configuration for default roles."""

    display_name: str
    description: str
    hierarchy: int
    grants: dict[str, dict[str, str]]


DEFAULT_RESOURCES: list[tuple[str, str, str]] = [
    ("users", "Users", "User management"),
    ("teams", "Teams", "Team management"),
    ("schedules", "Schedules", "Work schedules"),
    ("entries", "Entries", "Data entries"),
    ("evaluations", "Evaluations", "Quality evaluations"),
    ("reports", "Reports", "Analytics and reports"),
    ("settings", "Settings", "System settings and permissions"),
]

DEFAULT_ACTIONS: list[tuple[str, str, str]] = [
    ("create", "Create", "Create new items"),
    ("read", "Read", "View items"),
    ("update", "Update", "Modify items"),
    ("delete", "Delete", "Remove items"),
    ("approve", "Approve", "Approve requests"),
    ("reject", "Reject", "Reject requests"),
    ("evaluate", "Evaluate", "Perform evaluations"),
]

_CRUD_ALL = {"create": "all", "read": "all", "update": "all", "delete": "all"}

DEFAULT_ROLES: dict[str, RoleData] = {
    "admin": {
        "display_name": "Administrator",
        "description": "Full system access - can manage all users, teams, and data",
        "hierarchy": 3,
        "grants": {
            "users": dict(_CRUD_ALL),
            "teams": dict(_CRUD_ALL),
            "schedules": {**_CRUD_ALL, "approve": "all", "reject": "all"},
            "entries": dict(_CRUD_ALL),
            "evaluations": dict(_CRUD_ALL),
            "reports": {"read": "all"},
            "settings": dict(_CRUD_ALL),
        },
    },
    "team_leader": {
        "display_name": "Team Leader",
        "description": "Manages team members - can create schedules and evaluate performance",
        "hierarchy": 2,
        "grants": {
            "users": {"read": "team"},
            "teams": {"read": "own"},
            "schedules": {"create": "team", "read": "team", "update": "team"},
            "entries": {"read": "team"},
            "evaluations": {"create": "team", "read": "team", "update": "team"},
            "reports": {"read": "team"},
        },
    },
    "employee": {
        "display_name": "Employee",
        "description": "Basic access - can enter data and view personal schedules",
        "hierarchy": 1,
        "grants": {
            "users": {"read": "own", "update": "own"},
            "teams": {"read": "own"},
            "schedules": {"read": "own"},
            "entries": {"create": "own", "read": "own", "update": "own"},
            "evaluations": {"read": "own"},
            "reports": {"read": "own"},
        },
    },
}


class RbacSeedService:
    """Seeds default roles, resources, actions and role permissions."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def seed(self) -> dict[str, int]:
        """Insert missing defaults; return counts of rows created per table."""
        created = {"roles": 0, "resources": 0, "actions": 0, "permissions": 0}

        resource_ids: dict[str, int] = {}
        for name, display_name, description in DEFAULT_RESOURCES:
            row = await self._get_or_none(Resource, name)
            if row is None:
                row = Resource(name=name, display_name=display_name, description=description)
                self.db.add(row)
                await self.db.flush()
                created["resources"] += 1
            resource_ids[name] = row.id

        action_ids: dict[str, int] = {}
        for name, display_name, description in DEFAULT_ACTIONS:
            row = await self._get_or_none(Action, name)
            if row is None:
                row = Action(name=name, display_name=display_name, description=description)
                self.db.add(row)
                await self.db.flush()
                created["actions"] += 1
            action_ids[name] = row.id

        for role_name, data in DEFAULT_ROLES.items():
            role = await self._get_or_none(Role, role_name)
            if role is None:
                role = Role(
                    name=role_name,
                    display_name=data["display_name"],
                    description=data["description"],
                    hierarchy=data["hierarchy"],
                )
                self.db.add(role)
                await self.db.flush()
                created["roles"] += 1
            existing = set(
                (
                    await self.db.execute(
                        select(Permission.resource_id, Permission.action_id).where(
                            Permission.role_id == role.id
                        )
                    )
                ).tuples().all()
            )
            for resource_name, actions in data["grants"].items():
                for action_name, scope in actions.items():
                    key = (resource_ids[resource_name], action_ids[action_name])
                    if key in existing:
                        continue
                    self.db.add(
                        Permission(
                            role_id=role.id,
                            resource_id=key[0],
                            action_id=key[1],
                            granted=True,
                            scope=scope,
                        )
                    )
                    created["permissions"] += 1
        await self.db.flush()
        logger.info("RBAC seed complete: %s", created)
        return created

    async def _get_or_none(
        self, model: type[T], name: str
    ) -> T | None:
        result = await self.db.execute(select(model).where(model.name == name))
        return result.scalar_one_or_none()
