"""DTOs for the permission audit log."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditLogEntryCreate:
    """Input for appending one audit log record. Append-only; no update."""

    action: str
    resource_type: str
    resource_action: str | None
    role_id: int | None
    old_value: dict[str, Any] | None
    new_value: dict[str, Any] | None
    actor_id: int | None = None
    actor_type: str = "system"
    actor_name: str | None = None
    actor_email: str | None = None
    target_user_id: int | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None


@dataclass(frozen=True)
class AuditLogResult:
    """Single audit log entry (read-model for list/export)."""

    id: str
    actor_id: int | None
    actor_type: str
    actor_name: str | None
    actor_email: str | None
    action: str
    resource_type: str
    resource_action: str | None
    role_id: int | None
    target_user_id: int | None
    old_value: dict[str, Any] | None
    new_value: dict[str, Any] | None
    ip_address: str | None
    user_agent: str | None
    request_id: str | None
    timestamp: datetime
    sequence: int
    previous_hash: str | None
    entry_hash: str


@dataclass(frozen=True)
class AuditLogFilters:
    """Query filters for audit history. All optional; combined with AND."""

    role_id: int | None = None
    actor_id: int | None = None
    action: str | None = None
    resource_type: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    skip: int = 0
    limit: int = 100


@dataclass(frozen=True)
class ChainVerification:
    """Result of recomputing the audit hash chain oldest-first."""

    valid: bool
    total_entries: int
    verified_entries: int
    first_invalid_id: str | None = None
    reason: str | None = None
