"""Cache key builders. Single place for key format (DRY).

Key components must not contain CACHE_KEY_SEP to avoid ambiguous or
colliding keys.
"""

from authz.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_PERMISSION,
    CACHE_PREFIX_ROLE,
    CACHE_PREFIX_VOCABULARY,
)


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value contains the cache key separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value contains CACHE_KEY_SEP.
    """
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def role_capabilities_key(role_id: int | str) -> str:
    """Cache key for a role's capability set (permission:role:<id>)."""
    _validate_key_component(str(role_id), "role_id")
    return f"{CACHE_PREFIX_PERMISSION}{CACHE_KEY_SEP}{CACHE_PREFIX_ROLE}{CACHE_KEY_SEP}{role_id}"


def role_capabilities_pattern() -> str:
    """SCAN pattern matching every role capability key."""
    return f"{CACHE_PREFIX_PERMISSION}{CACHE_KEY_SEP}{CACHE_PREFIX_ROLE}{CACHE_KEY_SEP}*"


def vocabulary_key() -> str:
    """Cache key for the resource/action name -> id vocabulary."""
    return f"{CACHE_PREFIX_PERMISSION}{CACHE_KEY_SEP}{CACHE_PREFIX_VOCABULARY}"
