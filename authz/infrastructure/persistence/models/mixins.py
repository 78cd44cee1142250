"""SQLAlchemy mixins for common model patterns (DRY).

Provides: IntIdMixin, CuidMixin, CreatedAtMixin, TimestampMixin, ActiveMixin,
and the combined ReferenceModel used by Role, Resource, and Action.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from authz.shared.utils.datetime import utc_now
from authz.shared.utils.generators import generate_cuid


class IntIdMixin:
    """Mixin for models with an autoincrement integer primary key."""

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(Integer, primary_key=True, autoincrement=True)


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class CreatedAtMixin:
    """Mixin for created_at (client-side UTC default, server default for migrations)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            nullable=False,
        )


class TimestampMixin(CreatedAtMixin):
    """Mixin for created_at and updated_at (timezone-aware)."""

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            onupdate=utc_now,
            server_default=func.now(),
            nullable=False,
        )


class ActiveMixin:
    """Mixin for is_active flag. Inactive rows are excluded from checks and batches."""

    @declared_attr
    def is_active(cls) -> Mapped[bool]:
        return mapped_column(Boolean, nullable=False, default=True)


class ReferenceModel(IntIdMixin, ActiveMixin, CreatedAtMixin):
    """Combined mixin: int id + unique name + display fields + is_active + created_at."""

    __abstract__ = True

    @declared_attr
    def name(cls) -> Mapped[str]:
        return mapped_column(String(64), nullable=False, unique=True)

    @declared_attr
    def display_name(cls) -> Mapped[str]:
        return mapped_column(String(128), nullable=False)

    @declared_attr
    def description(cls) -> Mapped[str | None]:
        return mapped_column(Text, nullable=True)
