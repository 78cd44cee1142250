"""Scope resolution: turn a granted scope plus caller identity into a filter.

Pure functions, no I/O. A ScopeFilter can be evaluated against an in-memory
record (matches) or rendered as a SQLAlchemy boolean clause (as_clause) so
list endpoints can restrict their queries.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import ColumnElement, false, true

from authz.domain.enums import PermissionScope
from authz.domain.exceptions import InvalidScopeException


class FilterKind(str, Enum):
    """Shape of a resolved scope filter."""

    UNRESTRICTED = "unrestricted"
    OWNER = "owner"
    TEAM = "team"
    NOTHING = "nothing"


@dataclass(frozen=True)
class ScopeFilter:
    """Predicate describing which records a caller may touch."""

    kind: FilterKind
    value: int | None = None

    @classmethod
    def unrestricted(cls) -> "ScopeFilter":
        return cls(FilterKind.UNRESTRICTED)

    @classmethod
    def nothing(cls) -> "ScopeFilter":
        return cls(FilterKind.NOTHING)

    def matches(self, *, owner_id: int | None = None, team_id: int | None = None) -> bool:
        """Return True if a record with this owner/team passes the filter."""
        if self.kind is FilterKind.UNRESTRICTED:
            return True
        if self.kind is FilterKind.OWNER:
            return owner_id is not None and owner_id == self.value
        if self.kind is FilterKind.TEAM:
            return team_id is not None and team_id == self.value
        return False

    def as_clause(
        self,
        owner_column: ColumnElement[Any] | Any,
        team_column: ColumnElement[Any] | Any | None = None,
    ) -> ColumnElement[bool]:
        """Render as a WHERE clause over the given owner and team columns.

        A team filter against a table with no team column matches nothing.
        """
        if self.kind is FilterKind.UNRESTRICTED:
            return true()
        if self.kind is FilterKind.OWNER:
            return owner_column == self.value
        if self.kind is FilterKind.TEAM and team_column is not None:
            return team_column == self.value
        return false()

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "value": self.value}


def parse_scope(value: str | PermissionScope) -> PermissionScope:
    """Coerce a raw scope value; raise InvalidScopeException if unknown."""
    if isinstance(value, PermissionScope):
        return value
    try:
        return PermissionScope(value)
    except ValueError as exc:
        raise InvalidScopeException(value) from exc


def resolve_filter(
    scope: str | PermissionScope,
    caller_user_id: int,
    caller_team_id: int | None,
) -> ScopeFilter:
    """Resolve a granted scope into a record filter for the caller.

    own  -> records owned by the caller
    team -> records belonging to the caller's team; nothing if no team
    all  -> unrestricted
    """
    resolved = parse_scope(scope)
    if resolved is PermissionScope.ALL:
        return ScopeFilter.unrestricted()
    if resolved is PermissionScope.TEAM:
        if caller_team_id is None:
            return ScopeFilter.nothing()
        return ScopeFilter(FilterKind.TEAM, caller_team_id)
    return ScopeFilter(FilterKind.OWNER, caller_user_id)


def scope_satisfies(
    granted: str | PermissionScope, required: str | PermissionScope
) -> bool:
    """Return True if the granted scope is at least as broad as required."""
    return parse_scope(granted).rank >= parse_scope(required).rank
