"""Create role, resource, action, permission and permission_audit_log tables."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_rbac_schema"
down_revision = None
branch_labels = None
depends_on = None

JSON_VALUE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _reference_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    """Create the permission store and audit log."""
    op.create_table(
        "role",
        *_reference_columns(),
        sa.Column("hierarchy", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("name", name="uq_role_name"),
    )
    op.create_table(
        "resource",
        *_reference_columns(),
        sa.UniqueConstraint("name", name="uq_resource_name"),
    )
    op.create_table(
        "action",
        *_reference_columns(),
        sa.UniqueConstraint("name", name="uq_action_name"),
    )

    op.create_table(
        "permission",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "role_id",
            sa.Integer(),
            sa.ForeignKey("role.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "resource_id",
            sa.Integer(),
            sa.ForeignKey("resource.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "action_id",
            sa.Integer(),
            sa.ForeignKey("action.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("granted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("scope", sa.String(length=8), nullable=False, server_default="own"),
        sa.Column("conditions", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint(
            "role_id", "resource_id", "action_id", name="uq_permission_role_resource_action"
        ),
        sa.CheckConstraint("scope IN ('own', 'team', 'all')", name="ck_permission_scope"),
    )
    op.create_index("ix_permission_role", "permission", ["role_id"])

    op.create_table(
        "permission_audit_log",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("actor_type", sa.String(length=16), nullable=False),
        sa.Column("actor_name", sa.String(), nullable=True),
        sa.Column("actor_email", sa.String(), nullable=True),
        sa.Column("action", sa.String(length=16), nullable=False),
        sa.Column("resource_type", sa.String(length=64), nullable=False),
        sa.Column("resource_action", sa.String(length=64), nullable=True),
        sa.Column("role_id", sa.Integer(), nullable=True),
        sa.Column("target_user_id", sa.Integer(), nullable=True),
        sa.Column("old_value", JSON_VALUE, nullable=True),
        sa.Column("new_value", JSON_VALUE, nullable=True),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("request_id", sa.String(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("previous_hash", sa.String(length=64), nullable=True),
        sa.Column("entry_hash", sa.String(length=64), nullable=False),
        sa.UniqueConstraint("sequence", name="uq_permission_audit_log_sequence"),
    )
    for column in ("actor_id", "action", "resource_type", "role_id", "timestamp"):
        op.create_index(
            f"ix_permission_audit_log_{column}", "permission_audit_log", [column]
        )


def downgrade() -> None:
    """Drop all tables (audit log last-created, first-dropped)."""
    for column in ("actor_id", "action", "resource_type", "role_id", "timestamp"):
        op.drop_index(f"ix_permission_audit_log_{column}", table_name="permission_audit_log")
    op.drop_table("permission_audit_log")
    op.drop_index("ix_permission_role", table_name="permission")
    op.drop_table("permission")
    op.drop_table("action")
    op.drop_table("resource")
    op.drop_table("role")
