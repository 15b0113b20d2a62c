"""Tests for domain/query_guard.py."""

import pytest

from studio_actions.domain.errors import QueryRejected
from studio_actions.domain.query_guard import (
    MAX_QUERY_LENGTH,
    denied_pattern_labels,
    ensure_query_allowed,
    validate_query,
)


def padded_query(length: int) -> str:
    base = '*[_type == "page" && title == "'
    tail = '"]'
    return base + "a" * (length - len(base) - len(tail)) + tail


class TestPrefixes:
    @pytest.mark.parametrize("query", [
        '*[_type == "page"]',
        'count(*[_type == "post"])',
        'coalesce(*[_id == "x"][0], null)',
        '   *[_type == "page"]   ',
    ])
    def test_allowed(self, query):
        assert validate_query(query).valid is True

    @pytest.mark.parametrize("query", [
        "delete *[]",
        '[_type == "page"]',
        "",
        'select(*[_type == "page"])',
    ])
    def test_rejected(self, query):
        result = validate_query(query)
        assert result.valid is False
        assert "must start with" in result.reason


class TestDenylist:
    def test_identity_call_rejected(self):
        result = validate_query('*[_type == "user" && _id == identity()]')
        assert result.valid is False
        assert result.reason == "Query contains restricted patterns"

    def test_identity_rejected_under_any_allowed_prefix(self):
        assert validate_query("count(*[owner == identity()])").valid is False

    def test_internal_namespace_rejected(self):
        assert validate_query('*[sanity::versionOf("x")]').valid is False
        assert validate_query('*[SANITY::partOfRelease("x")]').valid is False

    def test_created_at_comparison_rejected(self):
        assert validate_query('*[_createdAt < "2020-01-01"]').valid is False

    def test_created_at_equality_allowed(self):
        assert validate_query('*[_createdAt == "2020-01-01"]').valid is True

    def test_token_parameter_rejected(self):
        assert validate_query('*[secret == $apiToken]').valid is False

    def test_labels(self):
        assert denied_pattern_labels("*[x == identity()]") == ["identity disclosure"]
        assert denied_pattern_labels('*[_type == "page"]') == []


class TestLength:
    def test_limit_default(self):
        assert MAX_QUERY_LENGTH == 5000

    def test_5001_chars_rejected(self):
        query = padded_query(5001)
        assert len(query) == 5001
        result = validate_query(query)
        assert result.valid is False
        assert "5000" in result.reason

    def test_4000_chars_accepted(self):
        query = padded_query(4000)
        assert len(query) == 4000
        assert validate_query(query).valid is True

    def test_exactly_limit_accepted(self):
        assert validate_query(padded_query(5000)).valid is True

    def test_custom_limit(self):
        assert validate_query('*[_type == "page"]', max_length=5).valid is False


class TestEnsureQueryAllowed:
    def test_returns_trimmed(self):
        assert ensure_query_allowed('  *[_type == "a"] ') == '*[_type == "a"]'

    def test_raises(self):
        with pytest.raises(QueryRejected, match="Query validation failed"):
            ensure_query_allowed("identity()")
