"""Permission audit log ORM model. Append-only, hash-chained change history."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Connection, DateTime, Integer, String, Text, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from authz.infrastructure.persistence.database import Base
from authz.infrastructure.persistence.models.mixins import CuidMixin

_JsonType = JSON().with_variant(JSONB(), "postgresql")


class PermissionAuditLog(CuidMixin, Base):
    """Permission change record. Who changed what, when, from what to what.

    Actor name and email are denormalized so history survives user deletion.
    entry_hash chains to the previous entry's hash. No update/delete.
    """

    __tablename__ = "permission_audit_log"

    actor_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    actor_type: Mapped[str] = mapped_column(String(16), nullable=False)
    actor_name: Mapped[str | None] = mapped_column(String, nullable=True)
    actor_email: Mapped[str | None] = mapped_column(String, nullable=True)
    action: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    resource_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    resource_action: Mapped[str | None] = mapped_column(String(64), nullable=True)
    role_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    target_user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    old_value: Mapped[dict[str, Any] | None] = mapped_column(_JsonType, nullable=True)
    new_value: Mapped[dict[str, Any] | None] = mapped_column(_JsonType, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    request_id: Mapped[str | None] = mapped_column(String, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    previous_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    entry_hash: Mapped[str] = mapped_column(String(64), nullable=False)


@event.listens_for(PermissionAuditLog, "before_update")
def _prevent_audit_log_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: PermissionAuditLog
) -> None:
    """Audit log entries are append-only; updates are forbidden."""
    raise ValueError("Audit log entries are immutable and cannot be updated.")


@event.listens_for(PermissionAuditLog, "before_delete")
def _prevent_audit_log_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: PermissionAuditLog
) -> None:
    """Audit log entries cannot be deleted."""
    raise ValueError("Audit log entries cannot be deleted.")
