"""Shared utilities: context, enums, logging, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from authz.shared.context import (
    ActorContext,
    clear_current_user,
    get_actor_context,
    get_current_actor_id,
    get_current_actor_type,
    set_current_request_id,
    set_current_user,
)
from authz.shared.enums import ActorType, AuditAction
from authz.shared.utils import ensure_utc, generate_cuid, utc_now

__all__ = [
    "set_current_user",
    "set_current_request_id",
    "clear_current_user",
    "get_current_actor_id",
    "get_current_actor_type",
    "get_actor_context",
    "ActorContext",
    "ActorType",
    "AuditAction",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
