"""Seed default RBAC data (roles, resources, actions, role permissions).

Usage:
    python -m scripts.seed_rbac
Requires DATABASE_URL and an up-to-date schema (alembic upgrade head).
Idempotent: rows that already exist are left untouched.
"""

import asyncio
import sys

from authz.core.config import get_settings
from authz.domain.exceptions import SqlNotConfiguredException
from authz.infrastructure.persistence.database import get_session_factory
from authz.infrastructure.services import RbacSeedService
from authz.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Seed RBAC defaults in one transaction."""
    get_settings()
    setup_logging()
    try:
        session_factory = get_session_factory()
    except SqlNotConfiguredException as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)

    async with session_factory() as session:
        async with session.begin():
            created = await RbacSeedService(session).seed()
    print(f"Seeded RBAC defaults: {created}")


if __name__ == "__main__":
    asyncio.run(main())
