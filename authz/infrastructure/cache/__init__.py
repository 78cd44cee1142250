"""Cache infrastructure: Redis CacheService and key builders."""

from authz.infrastructure.cache.keys import (
    role_capabilities_key,
    role_capabilities_pattern,
    vocabulary_key,
)
from authz.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheService",
    "role_capabilities_key",
    "role_capabilities_pattern",
    "vocabulary_key",
]
