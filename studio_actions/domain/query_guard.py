"""Read-only query guard.

Query text is written by the LLM from user input, so it is the one channel
that can read arbitrary content. Only plain read constructors are let
through, with a denylist for privileged functions and enumeration tricks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from studio_actions.domain.errors import QueryRejected

MAX_QUERY_LENGTH = 5000

ALLOWED_PREFIXES: Tuple[str, ...] = ("*[", "count(", "coalesce(")

# (pattern, label) — label is for logs only; callers get a generic reason
DENIED_PATTERNS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"\bsanity::", re.IGNORECASE), "internal namespace"),
    (re.compile(r"_createdAt\s*<"), "creation-time comparison"),
    (re.compile(r"identity\(\)", re.IGNORECASE), "identity disclosure"),
    (re.compile(r"\$.*token", re.IGNORECASE), "token parameter"),
)


@dataclass
class QueryValidation:
    valid: bool
    reason: Optional[str] = None


def validate_query(query: str, max_length: int = MAX_QUERY_LENGTH) -> QueryValidation:
    """Check a query against prefix, denylist and length rules, in that order."""
    trimmed = (query or "").strip()

    if not trimmed.startswith(ALLOWED_PREFIXES):
        allowed = " or ".join(ALLOWED_PREFIXES)
        return QueryValidation(False, f"Query must start with {allowed}")

    for pattern, _label in DENIED_PATTERNS:
        if pattern.search(trimmed):
            return QueryValidation(False, "Query contains restricted patterns")

    if len(trimmed) > max_length:
        return QueryValidation(False, f"Query exceeds maximum length of {max_length} characters")

    return QueryValidation(True)


def denied_pattern_labels(query: str) -> list:
    """Labels of every denylist pattern the query hits."""
    return [label for pattern, label in DENIED_PATTERNS if pattern.search(query or "")]


def ensure_query_allowed(query: str, max_length: int = MAX_QUERY_LENGTH) -> str:
    """Return the trimmed query or raise QueryRejected."""
    check = validate_query(query, max_length)
    if not check.valid:
        raise QueryRejected(f"Query validation failed: {check.reason}")
    return query.strip()
