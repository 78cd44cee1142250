"""Authorization service: the single entry point for permission decisions.

Default deny: a (role, resource, action) with no granted, active row is
denied. Capability sets are cached per role when a cache is available and
invalidated explicitly after every committed permission batch.
"""

from __future__ import annotations

import logging

from authz.application.dtos.permission import AccessDecision, CallerIdentity
from authz.application.interfaces.services import ICacheService, IPermissionResolver
from authz.core.constants import PERMISSION_CODE_SEP
from authz.domain.enums import PermissionScope
from authz.domain.exceptions import (
    AuthorizationException,
    CacheInvalidationException,
    UnknownPermissionTargetException,
)
from authz.domain.scope import FilterKind, parse_scope, resolve_filter, scope_satisfies
from authz.infrastructure.cache.keys import (
    role_capabilities_key,
    role_capabilities_pattern,
    vocabulary_key,
)

logger = logging.getLogger(__name__)

INVALIDATION_ATTEMPTS = 3


def permission_code(resource: str, action: str) -> str:
    return f"{resource}{PERMISSION_CODE_SEP}{action}"


class AuthorizationService:
    """Centralized permission checking; uses cache when available (5 min TTL typical).

    check() is a pure read: it never writes audit entries.
    """

    def __init__(
        self,
        permission_resolver: IPermissionResolver,
        cache: ICacheService | None = None,
        cache_ttl: int = 300,
        vocabulary_ttl: int = 900,
    ) -> None:
        self.permission_resolver = permission_resolver
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.vocabulary_ttl = vocabulary_ttl

    def _cache_usable(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    async def get_role_capabilities(self, role_id: int) -> dict[str, PermissionScope]:
        """Return the role's capability set ("resource:action" -> scope). Uses cache if available."""
        key = role_capabilities_key(role_id)
        if self.cache is not None and self._cache_usable():
            cached = await self.cache.get(key)
            if cached is not None:
                return {code: PermissionScope(scope) for code, scope in cached.items()}

        capabilities = await self.permission_resolver.get_role_capabilities(role_id)
        if self.cache is not None and self._cache_usable():
            await self.cache.set(key, capabilities, ttl=self.cache_ttl)
        return {code: PermissionScope(scope) for code, scope in capabilities.items()}

    async def _get_vocabulary(self) -> tuple[set[str], set[str]]:
        key = vocabulary_key()
        vocabulary = None
        if self.cache is not None and self._cache_usable():
            vocabulary = await self.cache.get(key)
        if vocabulary is None:
            vocabulary = await self.permission_resolver.get_vocabulary()
            if self.cache is not None and self._cache_usable():
                await self.cache.set(key, vocabulary, ttl=self.vocabulary_ttl)
        return set(vocabulary["resources"]), set(vocabulary["actions"])

    async def _ensure_known(self, resource: str, action: str) -> None:
        """Raise UnknownPermissionTargetException for names outside the vocabulary."""
        resources, actions = await self._get_vocabulary()
        if resource not in resources:
            raise UnknownPermissionTargetException("resource", resource)
        if action not in actions:
            raise UnknownPermissionTargetException("action", action)

    async def check(
        self,
        caller: CallerIdentity,
        resource: str,
        action: str,
        required_scope: PermissionScope | str | None = None,
    ) -> AccessDecision:
        """Decide whether caller may perform action on resource.

        Denies when the role has no granted row, when the granted scope is
        narrower than required_scope, and when a team scope meets a caller
        with no team. On allow, the decision carries the filter the caller
        must apply to its own queries.

        Raises:
            UnknownPermissionTargetException: resource or action name is unknown.
            InvalidScopeException: required_scope is not own/team/all.
        """
        required = parse_scope(required_scope) if required_scope is not None else None
        await self._ensure_known(resource, action)

        capabilities = await self.get_role_capabilities(caller.role_id)
        scope = capabilities.get(permission_code(resource, action))
        if scope is None:
            return AccessDecision.deny()
        if required is not None and not scope_satisfies(scope, required):
            logger.debug(
                "Scope %s below required %s for %s:%s (role %s)",
                scope.value,
                required.value,
                resource,
                action,
                caller.role_id,
            )
            return AccessDecision.deny()

        scope_filter = resolve_filter(scope, caller.user_id, caller.team_id)
        if scope_filter.kind is FilterKind.NOTHING:
            return AccessDecision(allowed=False, scope=scope, filter=scope_filter)
        return AccessDecision(allowed=True, scope=scope, filter=scope_filter)

    async def require(
        self,
        caller: CallerIdentity,
        resource: str,
        action: str,
        required_scope: PermissionScope | str | None = None,
    ) -> AccessDecision:
        """Return the allowing decision or raise AuthorizationException."""
        decision = await self.check(caller, resource, action, required_scope)
        if not decision.allowed:
            raise AuthorizationException(
                resource=resource,
                action=action,
                required_scope=str(getattr(required_scope, "value", required_scope))
                if required_scope
                else None,
            )
        return decision

    async def check_many(
        self, caller: CallerIdentity, checks: list[tuple[str, str]]
    ) -> dict[str, bool]:
        """Evaluate several (resource, action) pairs; return {"resource:action": allowed}."""
        results: dict[str, bool] = {}
        for resource, action in checks:
            decision = await self.check(caller, resource, action)
            results[permission_code(resource, action)] = decision.allowed
        return results

    async def get_accessible_resources(
        self, caller: CallerIdentity, action: str
    ) -> list[str]:
        """Return resource names on which the caller's role may perform action."""
        resources, actions = await self._get_vocabulary()
        if action not in actions:
            raise UnknownPermissionTargetException("action", action)
        capabilities = await self.get_role_capabilities(caller.role_id)
        suffix = f"{PERMISSION_CODE_SEP}{action}"
        return sorted(
            code[: -len(suffix)]
            for code in capabilities
            if code.endswith(suffix) and code[: -len(suffix)] in resources
        )

    async def invalidate_role_cache(self, role_id: int) -> None:
        """Invalidate the cached capability set for one role.

        Called after a committed batch. An unreachable cache counts as a
        failed delete. The delete is retried before giving up.

        Raises:
            CacheInvalidationException: the key could not be removed.
        """
        if self.cache is None:
            return
        key = role_capabilities_key(role_id)
        for attempt in range(1, INVALIDATION_ATTEMPTS + 1):
            if await self.cache.delete(key):
                return
            logger.warning(
                "Cache invalidation attempt %d/%d failed for %s",
                attempt,
                INVALIDATION_ATTEMPTS,
                key,
            )
        logger.error(
            "Could not invalidate capabilities for role %s; cache may be stale for up to %ss",
            role_id,
            self.cache_ttl,
        )
        raise CacheInvalidationException(role_id, self.cache_ttl)

    async def invalidate_all(self) -> None:
        """Invalidate every cached capability set and the vocabulary."""
        if self.cache is not None and self._cache_usable():
            await self.cache.delete_pattern(role_capabilities_pattern())
            await self.cache.delete(vocabulary_key())
