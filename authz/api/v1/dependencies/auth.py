"""Bearer authentication: turn a verified token into a CallerIdentity."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from authz.application.dtos.permission import CallerIdentity
from authz.domain.exceptions import AuthenticationException
from authz.infrastructure.security.jwt import verify_token
from authz.shared.context import set_current_user

logger = logging.getLogger(__name__)

_http_bearer = HTTPBearer(auto_error=False)


def _optional_int(value: object) -> int | None:
    if value is None or value == "":
        return None
    return int(value)  # type: ignore[arg-type]


async def get_current_caller(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> CallerIdentity:
    """Return the caller from the bearer token; raise 401 if missing or invalid.

    Also records the actor (id, name, email, IP, user agent) in the request
    context so audit entries written during this request carry it.
    """
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        payload = verify_token(credentials.credentials)
        caller = CallerIdentity(
            user_id=int(payload["sub"]),
            role_id=int(payload["role_id"]),
            team_id=_optional_int(payload.get("team_id")),
        )
    except (ValueError, KeyError, TypeError) as e:
        logger.info("Rejected bearer token: %s", e)
        raise AuthenticationException("Invalid or expired token") from e

    set_current_user(
        caller.user_id,
        name=payload.get("name"),
        email=payload.get("email"),
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return caller
