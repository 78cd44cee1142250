"""DB session and repository dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authz.application.services.hash_service import HashService
from authz.infrastructure.persistence.database import get_db, get_session_factory
from authz.infrastructure.persistence.repositories import AuditLogRepository


def get_db_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for services that own their transaction."""
    return get_session_factory()


async def get_audit_log_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuditLogRepository:
    """Audit log repository for query, export and chain verification."""
    return AuditLogRepository(db, HashService())
