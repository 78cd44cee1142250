"""Tests for cache key builders."""

import fnmatch

import pytest

from authz.infrastructure.cache.keys import (
    role_capabilities_key,
    role_capabilities_pattern,
    vocabulary_key,
)


def test_role_capabilities_key_format() -> None:
    assert role_capabilities_key(3) == "permission:role:3"


def test_pattern_matches_every_role_key_but_not_vocabulary() -> None:
    pattern = role_capabilities_pattern()
    assert fnmatch.fnmatch(role_capabilities_key(1), pattern)
    assert fnmatch.fnmatch(role_capabilities_key(42), pattern)
    assert not fnmatch.fnmatch(vocabulary_key(), pattern)


def test_key_component_with_separator_rejected() -> None:
    with pytest.raises(ValueError):
        role_capabilities_key("1:2")
