"""Role, Resource, and Action ORM models (permission vocabulary)."""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from authz.infrastructure.persistence.database import Base
from authz.infrastructure.persistence.models.mixins import ReferenceModel, TimestampMixin


class Role(ReferenceModel, TimestampMixin, Base):
    """Role. Table: role. Unique name (admin, team_leader, employee).

    hierarchy is display ordering only; authorization never compares it.
    """

    __tablename__ = "role"

    hierarchy: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Resource(ReferenceModel, Base):
    """Protected resource kind (entries, evaluations, settings). Table: resource."""

    __tablename__ = "resource"


class Action(ReferenceModel, Base):
    """Verb on a resource (create, read, approve). Table: action."""

    __tablename__ = "action"
