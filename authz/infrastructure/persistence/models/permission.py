"""Permission ORM model: one row per (role, resource, action) triple."""

from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from authz.domain.enums import DEFAULT_SCOPE
from authz.infrastructure.persistence.database import Base
from authz.infrastructure.persistence.models.mixins import (
    ActiveMixin,
    IntIdMixin,
    TimestampMixin,
)


class Permission(IntIdMixin, ActiveMixin, TimestampMixin, Base):
    """Permission. Table: permission. Unique (role_id, resource_id, action_id).

    granted=False is equivalent to the row being absent. conditions is an
    unused extension point and is never evaluated.
    """

    __tablename__ = "permission"

    role_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("role.id", ondelete="CASCADE"), nullable=False
    )
    resource_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("resource.id", ondelete="CASCADE"), nullable=False
    )
    action_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("action.id", ondelete="CASCADE"), nullable=False
    )
    granted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    scope: Mapped[str] = mapped_column(
        String(8), nullable=False, default=DEFAULT_SCOPE.value
    )
    conditions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "role_id", "resource_id", "action_id", name="uq_permission_role_resource_action"
        ),
        CheckConstraint("scope IN ('own', 'team', 'all')", name="ck_permission_scope"),
        Index("ix_permission_role", "role_id"),
    )
