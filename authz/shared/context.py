"""Request context management using contextvars.

Provides async-safe storage for request-scoped data such as the current
actor. Audit entries read the actor snapshot at write time so the acting
user's name and email are denormalized into each record.

Usage:
    set_current_user(user_id=12, name="Ada", email="ada@example.com")
    actor = get_actor_context()
"""

from contextvars import ContextVar
from dataclasses import dataclass

from authz.shared.enums import ActorType

_current_user_id: ContextVar[int | None] = ContextVar("current_user_id", default=None)
_current_user_name: ContextVar[str | None] = ContextVar(
    "current_user_name", default=None
)
_current_user_email: ContextVar[str | None] = ContextVar(
    "current_user_email", default=None
)
_current_actor_type: ContextVar[ActorType] = ContextVar(
    "current_actor_type", default=ActorType.SYSTEM
)
_current_ip_address: ContextVar[str | None] = ContextVar(
    "current_ip_address", default=None
)
_current_user_agent: ContextVar[str | None] = ContextVar(
    "current_user_agent", default=None
)
_current_request_id: ContextVar[str | None] = ContextVar(
    "current_request_id", default=None
)


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the current actor context."""

    user_id: int | None
    actor_type: ActorType
    name: str | None = None
    email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None


def set_current_user(
    user_id: int | None,
    actor_type: ActorType = ActorType.USER,
    name: str | None = None,
    email: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Set the current actor context for this request.

    Call in a dependency after authentication. Context is scoped to the
    current async task.

    Raises:
        ValueError: If actor_type is USER and user_id is None.
    """
    if actor_type == ActorType.USER and user_id is None:
        raise ValueError("user_id is required when actor_type is USER")
    _current_user_id.set(user_id)
    _current_actor_type.set(actor_type)
    _current_user_name.set(name)
    _current_user_email.set(email)
    _current_ip_address.set(ip_address)
    _current_user_agent.set(user_agent)


def set_current_request_id(request_id: str | None) -> None:
    """Record the request id (set by RequestIDMiddleware)."""
    _current_request_id.set(request_id)


def clear_current_user() -> None:
    """Clear the current actor context."""
    _current_user_id.set(None)
    _current_actor_type.set(ActorType.SYSTEM)
    _current_user_name.set(None)
    _current_user_email.set(None)
    _current_ip_address.set(None)
    _current_user_agent.set(None)


def get_current_actor_id() -> int | None:
    """Return the current user ID, or None if not authenticated."""
    return _current_user_id.get()


def get_current_actor_type() -> ActorType:
    """Return the current actor type (defaults to SYSTEM if not set)."""
    return _current_actor_type.get()


def get_actor_context() -> ActorContext:
    """Return a snapshot of the current actor context."""
    return ActorContext(
        user_id=_current_user_id.get(),
        actor_type=_current_actor_type.get(),
        name=_current_user_name.get(),
        email=_current_user_email.get(),
        ip_address=_current_ip_address.get(),
        user_agent=_current_user_agent.get(),
        request_id=_current_request_id.get(),
    )
