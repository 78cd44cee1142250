"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure (DRY). Used by
infrastructure cache and the authorization service.
"""

# Cache key prefixes
CACHE_PREFIX_PERMISSION = "permission"
CACHE_PREFIX_ROLE = "role"
CACHE_PREFIX_VOCABULARY = "vocabulary"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Permission code delimiter ("entries:read")
PERMISSION_CODE_SEP = ":"

# Capability required to administer the permission matrix / view audit history
SETTINGS_RESOURCE = "settings"
