"""Request/response schemas for permission audit log API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuditLogEntryResponse(BaseModel):
    """Single audit log entry (read)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    actor_id: int | None
    actor_type: str
    actor_name: str | None = None
    actor_email: str | None = None
    action: str
    resource_type: str
    resource_action: str | None = None
    role_id: int | None = None
    target_user_id: int | None = None
    old_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None
    timestamp: datetime
    sequence: int
    entry_hash: str


class AuditLogListResponse(BaseModel):
    """Paginated list of audit log entries (newest first)."""

    items: list[AuditLogEntryResponse]
    skip: int
    limit: int
    total: int


class ChainVerificationResponse(BaseModel):
    """Result of verifying the audit hash chain."""

    model_config = ConfigDict(from_attributes=True)

    valid: bool
    total_entries: int
    verified_entries: int
    first_invalid_id: str | None = None
    reason: str | None = None
