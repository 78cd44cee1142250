"""Security helpers: bearer token verification."""

from authz.infrastructure.security.jwt import create_access_token, verify_token

__all__ = ["create_access_token", "verify_token"]
