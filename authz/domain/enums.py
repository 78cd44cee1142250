"""Domain enumerations for the authorization model."""

from enum import Enum

from authz.shared.enums import _ValuesMixin


class PermissionScope(_ValuesMixin, str, Enum):
    """Breadth of records a granted permission reaches.

    Ordered own < team < all; the ordering only matters when an operation
    demands a minimum scope.
    """

    OWN = "own"
    TEAM = "team"
    ALL = "all"

    @property
    def rank(self) -> int:
        return _SCOPE_RANK[self]


_SCOPE_RANK: dict[PermissionScope, int] = {
    PermissionScope.OWN: 1,
    PermissionScope.TEAM: 2,
    PermissionScope.ALL: 3,
}

DEFAULT_SCOPE = PermissionScope.OWN
