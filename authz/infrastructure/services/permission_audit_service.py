"""Permission audit service: turns permission changes into audit entries."""

from __future__ import annotations

from typing import Any

from authz.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
from authz.application.dtos.permission import PermissionChange
from authz.application.interfaces.repositories import IAuditLogRepository
from authz.shared.context import ActorContext, get_actor_context
from authz.shared.enums import AuditAction
from authz.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def classify_change(change: PermissionChange) -> AuditAction:
    """Name the kind of change from its before/after state.

    No prior row -> created (or granted when the new row grants access).
    Grant flips -> granted / revoked. Same grant, new scope -> updated.
    """
    if change.old_granted is None:
        return AuditAction.GRANTED if change.new_granted else AuditAction.CREATED
    if change.old_granted != change.new_granted:
        return AuditAction.GRANTED if change.new_granted else AuditAction.REVOKED
    return AuditAction.UPDATED


def _value(granted: bool | None, scope: Any) -> dict[str, Any] | None:
    if granted is None:
        return None
    return {"granted": granted, "scope": getattr(scope, "value", scope)}


class PermissionAuditService:
    """Appends one hash-chained audit entry per changed permission row.

    The acting user is read from the request context at write time and
    denormalized into the entry. Runs inside the caller's transaction;
    append failures propagate so the enclosing batch rolls back.
    """

    def __init__(self, audit_repo: IAuditLogRepository) -> None:
        self.audit_repo = audit_repo

    async def record_change(
        self,
        role_id: int,
        change: PermissionChange,
        actor: ActorContext | None = None,
    ) -> AuditLogResult:
        actor = actor or get_actor_context()
        action = classify_change(change)
        entry = AuditLogEntryCreate(
            action=action.value,
            resource_type=change.resource,
            resource_action=change.action,
            role_id=role_id,
            old_value=_value(change.old_granted, change.old_scope),
            new_value=_value(change.new_granted, change.new_scope),
            actor_id=actor.user_id,
            actor_type=actor.actor_type.value,
            actor_name=actor.name,
            actor_email=actor.email,
            ip_address=actor.ip_address,
            user_agent=actor.user_agent,
            request_id=actor.request_id,
        )
        result = await self.audit_repo.append(entry)
        logger.debug(
            "Audited %s %s:%s for role %s (entry %s)",
            action.value,
            change.resource,
            change.action,
            role_id,
            result.id,
        )
        return result
