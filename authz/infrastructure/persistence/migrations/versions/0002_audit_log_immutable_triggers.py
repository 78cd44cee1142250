"""Add triggers to enforce immutability of permission_audit_log.

Revision ID: 0002_audit_log_immutable_triggers
Revises: 0001_rbac_schema

The audit log is append-only. These triggers reject UPDATE and DELETE at the
database level, in addition to the ORM guards, so raw SQL cannot rewrite
history either. Migrations and admin scripts that must modify the table should
drop the trigger explicitly.
"""

from __future__ import annotations

from alembic import op

# revision identifiers, used by Alembic.
revision = "0002_audit_log_immutable_triggers"
down_revision = "0001_rbac_schema"
branch_labels = None
depends_on = None

MUTATION_MESSAGE = "permission_audit_log rows are append-only and cannot be updated or deleted"


def _trigger_function_audit_log() -> str:
    """Return SQL for trigger function that blocks permission_audit_log UPDATE/DELETE."""
    return f"""
    CREATE OR REPLACE FUNCTION prevent_permission_audit_log_mutation()
    RETURNS TRIGGER
    LANGUAGE plpgsql
    AS $$
    BEGIN
        RAISE EXCEPTION '{MUTATION_MESSAGE}'
            USING ERRCODE = 'integrity_constraint_violation';
    END;
    $$
    """


def _sqlite_trigger(event: str) -> str:
    return (
        f"CREATE TRIGGER prevent_permission_audit_log_{event.lower()} "
        f"BEFORE {event} ON permission_audit_log "
        f"BEGIN SELECT RAISE(ABORT, '{MUTATION_MESSAGE}'); END"
    )


def upgrade() -> None:
    dialect = op.get_context().dialect.name
    if dialect == "postgresql":
        op.execute(_trigger_function_audit_log())
        op.execute(
            "CREATE TRIGGER prevent_permission_audit_log_update_delete "
            "BEFORE UPDATE OR DELETE ON permission_audit_log "
            "FOR EACH ROW EXECUTE PROCEDURE prevent_permission_audit_log_mutation()"
        )
    elif dialect == "sqlite":
        # SQLite triggers fire on one event each.
        op.execute(_sqlite_trigger("UPDATE"))
        op.execute(_sqlite_trigger("DELETE"))


def downgrade() -> None:
    dialect = op.get_context().dialect.name
    if dialect == "postgresql":
        op.execute(
            "DROP TRIGGER IF EXISTS prevent_permission_audit_log_update_delete "
            "ON permission_audit_log"
        )
        op.execute("DROP FUNCTION IF EXISTS prevent_permission_audit_log_mutation()")
    elif dialect == "sqlite":
        op.execute("DROP TRIGGER IF EXISTS prevent_permission_audit_log_update")
        op.execute("DROP TRIGGER IF EXISTS prevent_permission_audit_log_delete")
