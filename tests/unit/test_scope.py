"""Tests for scope parsing, resolution and filters."""

import pytest
from sqlalchemy import column
from sqlalchemy.sql.elements import False_, True_

from authz.domain.enums import PermissionScope
from authz.domain.exceptions import InvalidScopeException
from authz.domain.scope import (
    FilterKind,
    ScopeFilter,
    parse_scope,
    resolve_filter,
    scope_satisfies,
)


class TestParseScope:
    """Scope values are own, team or all; anything else is rejected."""

    @pytest.mark.parametrize("raw", ["own", "team", "all"])
    def test_known_values(self, raw: str) -> None:
        assert parse_scope(raw) is PermissionScope(raw)

    def test_enum_passthrough(self) -> None:
        assert parse_scope(PermissionScope.TEAM) is PermissionScope.TEAM

    @pytest.mark.parametrize("raw", ["global", "ALL", "", "owner"])
    def test_unknown_value_raises(self, raw: str) -> None:
        with pytest.raises(InvalidScopeException) as exc_info:
            parse_scope(raw)
        assert exc_info.value.error_code == "INVALID_SCOPE"


class TestResolveFilter:
    """Granted scope plus caller identity gives the record filter."""

    def test_own_restricts_to_caller(self) -> None:
        f = resolve_filter("own", caller_user_id=42, caller_team_id=7)
        assert f == ScopeFilter(FilterKind.OWNER, 42)

    def test_team_restricts_to_caller_team(self) -> None:
        f = resolve_filter(PermissionScope.TEAM, caller_user_id=42, caller_team_id=7)
        assert f == ScopeFilter(FilterKind.TEAM, 7)

    def test_team_without_team_matches_nothing(self) -> None:
        f = resolve_filter("team", caller_user_id=42, caller_team_id=None)
        assert f.kind is FilterKind.NOTHING
        assert not f.matches(owner_id=42, team_id=None)

    def test_all_is_unrestricted(self) -> None:
        f = resolve_filter("all", caller_user_id=42, caller_team_id=None)
        assert f == ScopeFilter.unrestricted()

    def test_invalid_scope_raises(self) -> None:
        with pytest.raises(InvalidScopeException):
            resolve_filter("everyone", caller_user_id=1, caller_team_id=None)


class TestScopeSatisfies:
    def test_ordering(self) -> None:
        assert scope_satisfies("all", "team")
        assert scope_satisfies("team", "team")
        assert scope_satisfies("team", "own")
        assert not scope_satisfies("own", "team")
        assert not scope_satisfies("team", "all")


class TestScopeFilter:
    """Filters evaluate against records and render as SQL clauses."""

    def test_owner_matches(self) -> None:
        f = ScopeFilter(FilterKind.OWNER, 5)
        assert f.matches(owner_id=5)
        assert not f.matches(owner_id=6)
        assert not f.matches(owner_id=None)

    def test_team_matches(self) -> None:
        f = ScopeFilter(FilterKind.TEAM, 7)
        assert f.matches(owner_id=1, team_id=7)
        assert not f.matches(owner_id=1, team_id=8)

    def test_unrestricted_and_nothing(self) -> None:
        assert ScopeFilter.unrestricted().matches()
        assert not ScopeFilter.nothing().matches(owner_id=1, team_id=1)

    def test_owner_clause(self) -> None:
        clause = ScopeFilter(FilterKind.OWNER, 5).as_clause(column("user_id"))
        compiled = clause.compile(compile_kwargs={"literal_binds": True})
        assert str(compiled) == "user_id = 5"

    def test_team_clause(self) -> None:
        clause = ScopeFilter(FilterKind.TEAM, 7).as_clause(column("user_id"), column("team_id"))
        compiled = clause.compile(compile_kwargs={"literal_binds": True})
        assert str(compiled) == "team_id = 7"

    def test_team_clause_without_team_column_matches_nothing(self) -> None:
        clause = ScopeFilter(FilterKind.TEAM, 7).as_clause(column("user_id"))
        assert isinstance(clause, False_)

    def test_unrestricted_and_nothing_clauses(self) -> None:
        assert isinstance(ScopeFilter.unrestricted().as_clause(column("user_id")), True_)
        assert isinstance(ScopeFilter.nothing().as_clause(column("user_id")), False_)

    def test_to_dict(self) -> None:
        assert ScopeFilter(FilterKind.TEAM, 7).to_dict() == {"kind": "team", "value": 7}
