"""Tests for request target composition."""

import pytest

from portal_client import build_url


@pytest.mark.parametrize(
    "base_url, path, expected",
    [
        ("https://portal.example.com/api", "/users", "https://portal.example.com/api/users"),
        ("https://portal.example.com/api/", "/users", "https://portal.example.com/api/users"),
        ("https://portal.example.com/api/", "users", "https://portal.example.com/api/users"),
        ("https://portal.example.com/api", "users/42", "https://portal.example.com/api/users/42"),
        ("", "/users", "/users"),
        ("", "users", "/users"),
    ],
)
def test_build_url_joins_base_and_path(base_url, path, expected):
    assert build_url(base_url, path) == expected


def test_absolute_path_overrides_base():
    assert build_url("https://portal.example.com/api", "https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"
    assert build_url("https://portal.example.com/api", "http://legacy.local/x") == "http://legacy.local/x"


def test_only_one_leading_slash_is_stripped():
    assert build_url("https://portal.example.com", "//double") == "https://portal.example.com//double"


def test_base_gets_exactly_one_trailing_slash():
    assert build_url("https://portal.example.com//", "users") == "https://portal.example.com/users"


def test_build_url_is_deterministic():
    first = build_url("https://portal.example.com/api", "/documents?page=2")
    for _ in range(3):
        assert build_url("https://portal.example.com/api", "/documents?page=2") == first
