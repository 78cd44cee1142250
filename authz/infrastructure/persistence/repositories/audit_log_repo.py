"""Permission audit log repository. Append-only, hash-chained."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from authz.application.dtos.audit_log import (
    AuditLogEntryCreate,
    AuditLogFilters,
    AuditLogResult,
    ChainVerification,
)
from authz.application.services.hash_service import HashService
from authz.infrastructure.persistence.models.audit_log import PermissionAuditLog
from authz.shared.utils.datetime import ensure_utc, utc_now
from authz.shared.utils.generators import generate_cuid

# Advisory lock key serializing chain appends across concurrent transactions.
AUDIT_CHAIN_LOCK_KEY = 804_201_117


def _orm_to_result(row: PermissionAuditLog) -> AuditLogResult:
    """Map ORM to application DTO."""
    return AuditLogResult(
        id=row.id,
        actor_id=row.actor_id,
        actor_type=row.actor_type,
        actor_name=row.actor_name,
        actor_email=row.actor_email,
        action=row.action,
        resource_type=row.resource_type,
        resource_action=row.resource_action,
        role_id=row.role_id,
        target_user_id=row.target_user_id,
        old_value=row.old_value,
        new_value=row.new_value,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        request_id=row.request_id,
        timestamp=ensure_utc(row.timestamp) or row.timestamp,
        sequence=row.sequence,
        previous_hash=row.previous_hash,
        entry_hash=row.entry_hash,
    )


def _conditions(filters: AuditLogFilters) -> list[Any]:
    conditions: list[Any] = []
    if filters.role_id is not None:
        conditions.append(PermissionAuditLog.role_id == filters.role_id)
    if filters.actor_id is not None:
        conditions.append(PermissionAuditLog.actor_id == filters.actor_id)
    if filters.action is not None:
        conditions.append(PermissionAuditLog.action == filters.action)
    if filters.resource_type is not None:
        conditions.append(PermissionAuditLog.resource_type == filters.resource_type)
    if filters.start_date is not None:
        conditions.append(PermissionAuditLog.timestamp >= ensure_utc(filters.start_date))
    if filters.end_date is not None:
        conditions.append(PermissionAuditLog.timestamp <= ensure_utc(filters.end_date))
    return conditions


class AuditLogRepository:
    """Append-only audit log repository. No update/delete.

    Does not commit: append() participates in the caller's transaction so a
    permission change and its audit entry commit or roll back together.
    """

    def __init__(self, db: AsyncSession, hash_service: HashService | None = None) -> None:
        self.db = db
        self.hash_service = hash_service or HashService()

    async def _lock_chain(self) -> None:
        """Serialize appends on PostgreSQL; released at transaction end."""
        if self.db.get_bind().dialect.name == "postgresql":
            await self.db.execute(
                text("SELECT pg_advisory_xact_lock(:key)"),
                {"key": AUDIT_CHAIN_LOCK_KEY},
            )

    async def _get_chain_head(self) -> tuple[int, str | None]:
        """Return (last sequence, last entry hash); (0, None) when empty."""
        result = await self.db.execute(
            select(PermissionAuditLog.sequence, PermissionAuditLog.entry_hash)
            .order_by(PermissionAuditLog.sequence.desc())
            .limit(1)
        )
        head = result.first()
        if head is None:
            return 0, None
        return int(head[0]), head[1]

    async def append(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry chained to the current head; return it."""
        await self._lock_chain()
        last_sequence, previous_hash = await self._get_chain_head()
        sequence = last_sequence + 1
        timestamp = utc_now()
        entry_hash = self.hash_service.compute_entry_hash(
            sequence=sequence,
            timestamp=timestamp,
            actor_id=entry.actor_id,
            actor_type=entry.actor_type,
            actor_name=entry.actor_name,
            actor_email=entry.actor_email,
            action=entry.action,
            resource_type=entry.resource_type,
            resource_action=entry.resource_action,
            role_id=entry.role_id,
            target_user_id=entry.target_user_id,
            old_value=entry.old_value,
            new_value=entry.new_value,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            request_id=entry.request_id,
            previous_hash=previous_hash,
        )
        row = PermissionAuditLog(
            id=generate_cuid(),
            actor_id=entry.actor_id,
            actor_type=entry.actor_type,
            actor_name=entry.actor_name,
            actor_email=entry.actor_email,
            action=entry.action,
            resource_type=entry.resource_type,
            resource_action=entry.resource_action,
            role_id=entry.role_id,
            target_user_id=entry.target_user_id,
            old_value=entry.old_value,
            new_value=entry.new_value,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            request_id=entry.request_id,
            timestamp=timestamp,
            sequence=sequence,
            previous_hash=previous_hash,
            entry_hash=entry_hash,
        )
        self.db.add(row)
        await self.db.flush()
        return _orm_to_result(row)

    async def query(self, filters: AuditLogFilters) -> list[AuditLogResult]:
        """List audit entries matching filters (newest first)."""
        stmt = (
            select(PermissionAuditLog)
            .where(*_conditions(filters))
            .order_by(PermissionAuditLog.sequence.desc())
            .offset(filters.skip)
            .limit(filters.limit)
        )
        result = await self.db.execute(stmt)
        return [_orm_to_result(r) for r in result.scalars().all()]

    async def count(self, filters: AuditLogFilters) -> int:
        """Return the number of entries matching filters (ignores skip/limit)."""
        stmt = (
            select(func.count())
            .select_from(PermissionAuditLog)
            .where(*_conditions(filters))
        )
        return int((await self.db.execute(stmt)).scalar_one())

    async def verify_chain(self) -> ChainVerification:
        """Recompute every entry hash oldest-first and check the links."""
        result = await self.db.execute(
            select(PermissionAuditLog).order_by(PermissionAuditLog.sequence.asc())
        )
        rows = result.scalars().all()
        expected_previous: str | None = None
        verified = 0
        for row in rows:
            if row.previous_hash != expected_previous:
                return ChainVerification(
                    valid=False,
                    total_entries=len(rows),
                    verified_entries=verified,
                    first_invalid_id=row.id,
                    reason="previous_hash does not match preceding entry",
                )
            recomputed = self.hash_service.compute_entry_hash(
                sequence=row.sequence,
                timestamp=row.timestamp,
                actor_id=row.actor_id,
                actor_type=row.actor_type,
                actor_name=row.actor_name,
                actor_email=row.actor_email,
                action=row.action,
                resource_type=row.resource_type,
                resource_action=row.resource_action,
                role_id=row.role_id,
                target_user_id=row.target_user_id,
                old_value=row.old_value,
                new_value=row.new_value,
                ip_address=row.ip_address,
                user_agent=row.user_agent,
                request_id=row.request_id,
                previous_hash=row.previous_hash,
            )
            if recomputed != row.entry_hash:
                return ChainVerification(
                    valid=False,
                    total_entries=len(rows),
                    verified_entries=verified,
                    first_invalid_id=row.id,
                    reason="entry_hash mismatch",
                )
            expected_previous = row.entry_hash
            verified += 1
        return ChainVerification(
            valid=True, total_entries=len(rows), verified_entries=verified
        )
