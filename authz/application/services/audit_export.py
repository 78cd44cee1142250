"""CSV export of audit history. Serializes exactly what the query returned."""

import csv
import io
import json
from collections.abc import Iterable
from typing import Any

from authz.application.dtos.audit_log import AuditLogResult

CSV_HEADERS: list[str] = [
    "Timestamp",
    "User",
    "Email",
    "Action",
    "Resource Type",
    "Resource Action",
    "Role",
    "Target User",
    "Old Value",
    "New Value",
    "IP Address",
]


def _json_cell(value: dict[str, Any] | None) -> str:
    return json.dumps(value, sort_keys=True) if value is not None else ""


def _text(value: object) -> str:
    return "" if value is None else str(value)


def export_audit_csv(entries: Iterable[AuditLogResult]) -> str:
    """Render entries as CSV with a header row, in the order given."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADERS)
    for entry in entries:
        writer.writerow(
            [
                entry.timestamp.isoformat(),
                _text(entry.actor_name) or _text(entry.actor_id) or "System",
                _text(entry.actor_email),
                entry.action,
                entry.resource_type,
                _text(entry.resource_action),
                _text(entry.role_id),
                _text(entry.target_user_id),
                _json_cell(entry.old_value),
                _json_cell(entry.new_value),
                _text(entry.ip_address),
            ]
        )
    return buffer.getvalue()
