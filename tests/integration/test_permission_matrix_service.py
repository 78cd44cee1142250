"""Permission matrix service integration tests: atomic batches, no-ops, audit, cache."""

import pytest
from sqlalchemy import select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authz.application.dtos.audit_log import AuditLogFilters
from authz.application.dtos.permission import PermissionUpdate
from authz.application.services.hash_service import HashService
from authz.application.services.permission_matrix_service import PermissionMatrixService
from authz.domain.enums import PermissionScope
from authz.domain.exceptions import (
    BatchValidationException,
    CacheInvalidationException,
    ResourceNotFoundException,
)
from authz.infrastructure.persistence.models import Permission, Resource
from authz.infrastructure.persistence.repositories import (
    AuditLogRepository,
    PermissionRepository,
)
from authz.infrastructure.services import PermissionAuditService
from authz.shared.context import ActorContext
from authz.shared.enums import ActorType

ADMIN_ACTOR = ActorContext(
    user_id=1,
    actor_type=ActorType.USER,
    name="Ada Admin",
    email="ada@example.com",
    ip_address="10.0.0.1",
)


def _audit_service(session: AsyncSession) -> PermissionAuditService:
    return PermissionAuditService(AuditLogRepository(session, HashService()))


class FailingAuditService:
    """Audit writer whose append fails as a storage error would."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def record_change(self, role_id, change, actor=None):
        raise OperationalError("INSERT INTO permission_audit_log", {}, Exception("disk I/O error"))


@pytest.fixture
def invalidated() -> list[int]:
    return []


@pytest.fixture
def service(
    session_factory: async_sessionmaker[AsyncSession], invalidated: list[int]
) -> PermissionMatrixService:
    async def _invalidate(role_id: int) -> None:
        invalidated.append(role_id)

    return PermissionMatrixService(
        session_factory=session_factory,
        permission_repo_factory=PermissionRepository,
        audit_service_factory=_audit_service,
        invalidate_role_cache=_invalidate,
    )


async def _audit_entries(session_factory):
    async with session_factory() as session:
        return await AuditLogRepository(session).query(AuditLogFilters())


async def _row(session_factory, role_id: int, resource_id: int, action_id: int):
    async with session_factory() as session:
        return await PermissionRepository(session).get_permission(
            role_id, resource_id, action_id
        )


async def _permission_snapshot(session_factory) -> set[tuple]:
    async with session_factory() as session:
        result = await session.execute(
            select(
                Permission.role_id,
                Permission.resource_id,
                Permission.action_id,
                Permission.granted,
                Permission.scope,
            )
        )
        return set(result.tuples().all())


class TestApplyBatch:
    async def test_unchanged_row_is_a_no_op(
        self, service, session_factory, seeded, invalidated
    ) -> None:
        """Admin already holds entries:delete at all scope: nothing changes, nothing audited."""
        result = await service.apply_batch(
            seeded.roles["admin"],
            [
                PermissionUpdate(
                    resource_id=seeded.resources["entries"],
                    action_id=seeded.actions["delete"],
                    granted=True,
                    scope="all",
                )
            ],
            actor=ADMIN_ACTOR,
        )
        assert result.updated_count == 0
        assert result.changes == []
        assert await _audit_entries(session_factory) == []
        assert invalidated == []

    async def test_changes_are_written_counted_and_audited(
        self, service, session_factory, seeded, invalidated
    ) -> None:
        employee = seeded.roles["employee"]
        updates = [
            PermissionUpdate(seeded.resources["teams"], seeded.actions["delete"], True, "own"),
            PermissionUpdate(seeded.resources["entries"], seeded.actions["read"], True, "team"),
            PermissionUpdate(seeded.resources["entries"], seeded.actions["create"], False),
            PermissionUpdate(seeded.resources["users"], seeded.actions["read"], True, "own"),
        ]
        result = await service.apply_batch(employee, updates, actor=ADMIN_ACTOR)

        assert result.updated_count == 3
        assert {(c.resource, c.action) for c in result.changes} == {
            ("teams", "delete"),
            ("entries", "read"),
            ("entries", "create"),
        }
        assert invalidated == [employee]

        teams_delete = await _row(
            session_factory, employee, seeded.resources["teams"], seeded.actions["delete"]
        )
        assert teams_delete is not None
        assert (teams_delete.granted, teams_delete.scope) == (True, "own")
        entries_create = await _row(
            session_factory, employee, seeded.resources["entries"], seeded.actions["create"]
        )
        assert entries_create is not None
        assert entries_create.granted is False

        entries = await _audit_entries(session_factory)
        assert len(entries) == 3
        by_target = {(e.resource_type, e.resource_action): e for e in entries}
        granted = by_target[("teams", "delete")]
        assert granted.action == "granted"
        assert granted.old_value is None
        assert granted.new_value == {"granted": True, "scope": "own"}
        updated = by_target[("entries", "read")]
        assert updated.action == "updated"
        assert updated.old_value == {"granted": True, "scope": "own"}
        assert updated.new_value == {"granted": True, "scope": "team"}
        revoked = by_target[("entries", "create")]
        assert revoked.action == "revoked"
        for entry in entries:
            assert entry.role_id == employee
            assert entry.actor_id == 1
            assert entry.actor_name == "Ada Admin"
            assert entry.actor_email == "ada@example.com"
            assert entry.ip_address == "10.0.0.1"

    async def test_invalid_update_rejects_whole_batch(
        self, service, session_factory, seeded, invalidated
    ) -> None:
        """A valid update next to an invalid one is not written."""
        before = await _permission_snapshot(session_factory)
        with pytest.raises(BatchValidationException) as exc_info:
            await service.apply_batch(
                seeded.roles["employee"],
                [
                    PermissionUpdate(
                        seeded.resources["teams"], seeded.actions["delete"], True, "own"
                    ),
                    PermissionUpdate(
                        seeded.resources["entries"], seeded.actions["read"], True, "global"
                    ),
                ],
                actor=ADMIN_ACTOR,
            )
        assert exc_info.value.errors == [
            {
                "index": 1,
                "field": "scope",
                "message": "Invalid permission scope: 'global'",
            }
        ]
        assert await _permission_snapshot(session_factory) == before
        assert await _audit_entries(session_factory) == []
        assert invalidated == []

    async def test_unknown_resource_and_action_reported(self, service, seeded) -> None:
        with pytest.raises(BatchValidationException) as exc_info:
            await service.apply_batch(
                seeded.roles["employee"],
                [PermissionUpdate(9999, 8888, True, "own")],
            )
        fields = [e["field"] for e in exc_info.value.errors]
        assert fields == ["resource_id", "action_id"]

    async def test_inactive_resource_rejected(self, service, session_factory, seeded) -> None:
        async with session_factory() as session:
            async with session.begin():
                await session.execute(
                    update(Resource)
                    .where(Resource.id == seeded.resources["reports"])
                    .values(is_active=False)
                )
        with pytest.raises(BatchValidationException):
            await service.apply_batch(
                seeded.roles["employee"],
                [
                    PermissionUpdate(
                        seeded.resources["reports"], seeded.actions["read"], True, "all"
                    )
                ],
            )

    async def test_duplicate_triple_rejected(self, service, seeded) -> None:
        update_ = PermissionUpdate(
            seeded.resources["teams"], seeded.actions["delete"], True, "own"
        )
        with pytest.raises(BatchValidationException) as exc_info:
            await service.apply_batch(seeded.roles["employee"], [update_, update_])
        assert exc_info.value.errors[0]["index"] == 1

    async def test_unknown_role_raises_not_found(self, service, seeded) -> None:
        with pytest.raises(ResourceNotFoundException):
            await service.apply_batch(
                9999,
                [PermissionUpdate(seeded.resources["teams"], seeded.actions["read"], True)],
            )

    async def test_storage_failure_rolls_back_everything(
        self, session_factory, seeded, invalidated
    ) -> None:
        """A failing audit append undoes the permission writes of the same batch."""

        async def _invalidate(role_id: int) -> None:
            invalidated.append(role_id)

        service = PermissionMatrixService(
            session_factory=session_factory,
            permission_repo_factory=PermissionRepository,
            audit_service_factory=FailingAuditService,
            invalidate_role_cache=_invalidate,
        )
        before = await _permission_snapshot(session_factory)
        with pytest.raises(OperationalError):
            await service.apply_batch(
                seeded.roles["employee"],
                [
                    PermissionUpdate(
                        seeded.resources["teams"], seeded.actions["delete"], True, "own"
                    ),
                    PermissionUpdate(
                        seeded.resources["entries"], seeded.actions["read"], True, "all"
                    ),
                ],
            )
        assert await _permission_snapshot(session_factory) == before
        assert invalidated == []

    async def test_failed_invalidation_surfaces_after_commit(
        self, session_factory, seeded
    ) -> None:
        """The batch stays committed and audited; the caller still sees the error."""

        async def _invalidate(role_id: int) -> None:
            raise CacheInvalidationException(role_id, 300)

        service = PermissionMatrixService(
            session_factory=session_factory,
            permission_repo_factory=PermissionRepository,
            audit_service_factory=_audit_service,
            invalidate_role_cache=_invalidate,
        )
        employee = seeded.roles["employee"]
        with pytest.raises(CacheInvalidationException):
            await service.apply_batch(
                employee,
                [PermissionUpdate(seeded.resources["entries"], seeded.actions["read"], False)],
            )
        row = await _row(
            session_factory, employee, seeded.resources["entries"], seeded.actions["read"]
        )
        assert row is not None
        assert row.granted is False
        assert len(await _audit_entries(session_factory)) == 1

    async def test_absent_and_denied_is_a_no_op(self, service, session_factory, seeded) -> None:
        employee = seeded.roles["employee"]
        result = await service.apply_batch(
            employee,
            [PermissionUpdate(seeded.resources["teams"], seeded.actions["delete"], False)],
        )
        assert result.updated_count == 0
        assert (
            await _row(
                session_factory, employee, seeded.resources["teams"], seeded.actions["delete"]
            )
            is None
        )

    async def test_denied_update_stores_default_scope(
        self, service, session_factory, seeded
    ) -> None:
        employee = seeded.roles["employee"]
        result = await service.apply_batch(
            employee,
            [PermissionUpdate(seeded.resources["entries"], seeded.actions["read"], False, "all")],
        )
        assert result.changes[0].new_scope is PermissionScope.OWN
        row = await _row(
            session_factory, employee, seeded.resources["entries"], seeded.actions["read"]
        )
        assert row is not None
        assert (row.granted, row.scope) == (False, "own")

    async def test_empty_batch(self, service, seeded, invalidated) -> None:
        result = await service.apply_batch(seeded.roles["employee"], [])
        assert result.updated_count == 0
        assert invalidated == []

    async def test_audit_chain_valid_after_batches(self, service, session_factory, seeded) -> None:
        employee = seeded.roles["employee"]
        for scope in ("team", "all", "own"):
            await service.apply_batch(
                employee,
                [PermissionUpdate(seeded.resources["entries"], seeded.actions["read"], True, scope)],
            )
        async with session_factory() as session:
            verification = await AuditLogRepository(session).verify_chain()
        assert verification.valid
        assert verification.total_entries == 3


class TestReads:
    async def test_full_matrix(self, service, seeded) -> None:
        matrix = await service.get_full_matrix()
        assert [r.name for r in matrix.roles] == ["admin", "team_leader", "employee"]
        assert len(matrix.resources) == 7
        assert len(matrix.actions) == 7
        assert len(matrix.cells) == 3 * 7 * 7

    async def test_role_permissions(self, service, seeded) -> None:
        detail = await service.get_role_permissions(seeded.roles["employee"])
        assert detail.role.name == "employee"
        assert {p.code for p in detail.permissions} >= {"entries:create", "teams:read"}

    async def test_role_permissions_unknown_role(self, service, seeded) -> None:
        with pytest.raises(ResourceNotFoundException):
            await service.get_role_permissions(9999)

    async def test_statistics(self, service, seeded) -> None:
        stats = await service.get_statistics()
        assert stats.total_roles == 3
        assert stats.total_permissions == 46
        assert stats.scope_counts["all"] == 27
