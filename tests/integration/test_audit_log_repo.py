"""Audit log repository integration tests: append, chain, immutability, queries."""

from datetime import timedelta

import pytest
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authz.application.dtos.audit_log import AuditLogEntryCreate, AuditLogFilters
from authz.infrastructure.persistence.models import PermissionAuditLog
from authz.infrastructure.persistence.repositories import AuditLogRepository
from authz.shared.utils.datetime import utc_now


def _entry(role_id: int, action: str = "granted", resource: str = "entries", actor_id: int = 1):
    return AuditLogEntryCreate(
        action=action,
        resource_type=resource,
        resource_action="read",
        role_id=role_id,
        old_value=None,
        new_value={"granted": True, "scope": "own"},
        actor_id=actor_id,
        actor_type="user",
        actor_name="Ada",
        actor_email="ada@example.com",
    )


async def _append_all(session_factory, entries) -> None:
    async with session_factory() as session:
        async with session.begin():
            repo = AuditLogRepository(session)
            for entry in entries:
                await repo.append(entry)


async def test_append_chains_entries(db_session: AsyncSession) -> None:
    repo = AuditLogRepository(db_session)
    first = await repo.append(_entry(1))
    second = await repo.append(_entry(2))
    assert first.sequence == 1
    assert first.previous_hash is None
    assert second.sequence == 2
    assert second.previous_hash == first.entry_hash
    assert first.entry_hash != second.entry_hash


async def test_verify_chain_valid(session_factory: async_sessionmaker[AsyncSession]) -> None:
    await _append_all(session_factory, [_entry(1), _entry(2), _entry(3)])
    async with session_factory() as session:
        result = await AuditLogRepository(session).verify_chain()
    assert result.valid
    assert result.total_entries == 3
    assert result.verified_entries == 3
    assert result.first_invalid_id is None


async def test_verify_chain_empty_is_valid(db_session: AsyncSession) -> None:
    result = await AuditLogRepository(db_session).verify_chain()
    assert result.valid
    assert result.total_entries == 0


async def test_verify_chain_detects_tampering(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    """Editing a stored entry behind the ORM breaks its hash."""
    await _append_all(session_factory, [_entry(1), _entry(2), _entry(3)])
    async with session_factory() as session:
        async with session.begin():
            await session.execute(
                text("UPDATE permission_audit_log SET role_id = 99 WHERE sequence = 2")
            )
        tampered_id = (
            await session.execute(
                select(PermissionAuditLog.id).where(PermissionAuditLog.sequence == 2)
            )
        ).scalar_one()
    async with session_factory() as session:
        result = await AuditLogRepository(session).verify_chain()
    assert not result.valid
    assert result.verified_entries == 1
    assert result.first_invalid_id == tampered_id
    assert result.reason == "entry_hash mismatch"


async def test_verify_chain_detects_rewritten_actor_and_origin(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    """Rewriting who made a change, or from where, breaks the hash."""
    await _append_all(session_factory, [_entry(1), _entry(2)])
    async with session_factory() as session:
        async with session.begin():
            await session.execute(
                text(
                    "UPDATE permission_audit_log "
                    "SET ip_address = '6.6.6.6', actor_name = 'Mallory' WHERE sequence = 1"
                )
            )
    async with session_factory() as session:
        result = await AuditLogRepository(session).verify_chain()
    assert not result.valid
    assert result.verified_entries == 0
    assert result.reason == "entry_hash mismatch"


async def test_orm_update_is_rejected(session_factory: async_sessionmaker[AsyncSession]) -> None:
    await _append_all(session_factory, [_entry(1)])
    async with session_factory() as session:
        row = (await session.execute(select(PermissionAuditLog))).scalar_one()
        row.action = "revoked"
        with pytest.raises(ValueError, match="immutable"):
            await session.flush()
        await session.rollback()


async def test_orm_delete_is_rejected(session_factory: async_sessionmaker[AsyncSession]) -> None:
    await _append_all(session_factory, [_entry(1)])
    async with session_factory() as session:
        row = (await session.execute(select(PermissionAuditLog))).scalar_one()
        await session.delete(row)
        with pytest.raises(ValueError, match="cannot be deleted"):
            await session.flush()
        await session.rollback()


async def test_query_newest_first_with_filters(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    await _append_all(
        session_factory,
        [
            _entry(1, action="granted", resource="entries"),
            _entry(2, action="revoked", resource="teams", actor_id=2),
            _entry(1, action="updated", resource="teams"),
        ],
    )
    async with session_factory() as session:
        repo = AuditLogRepository(session)
        everything = await repo.query(AuditLogFilters())
        assert [e.sequence for e in everything] == [3, 2, 1]

        role_one = await repo.query(AuditLogFilters(role_id=1))
        assert [e.action for e in role_one] == ["updated", "granted"]
        assert await repo.count(AuditLogFilters(role_id=1)) == 2

        teams = await repo.query(AuditLogFilters(resource_type="teams", actor_id=2))
        assert [e.action for e in teams] == ["revoked"]

        page = await repo.query(AuditLogFilters(skip=1, limit=1))
        assert [e.sequence for e in page] == [2]
        assert await repo.count(AuditLogFilters(skip=1, limit=1)) == 3


async def test_query_date_range(session_factory: async_sessionmaker[AsyncSession]) -> None:
    await _append_all(session_factory, [_entry(1)])
    now = utc_now()
    async with session_factory() as session:
        repo = AuditLogRepository(session)
        assert len(await repo.query(AuditLogFilters(start_date=now - timedelta(hours=1)))) == 1
        assert await repo.query(AuditLogFilters(start_date=now + timedelta(hours=1))) == []
        assert await repo.query(AuditLogFilters(end_date=now - timedelta(hours=1))) == []
