"""Fill in missing _key / _type on nested content trees before they are written.

Every object inside an array needs a unique _key. The page layout tree

    pageBuilder -> rows -> columns -> content
    (section)      (row)   (column)   (blocks)

also needs a _type on the first three levels. Block types under `content`
are open-ended, so they are never guessed.
"""

from __future__ import annotations

import random
import string
from typing import Any, Dict, Optional, Set, Tuple

KEY_LENGTH = 10
_KEY_ALPHABET = string.ascii_lowercase + string.digits

ROOT_FIELD = "pageBuilder"

# container field -> (default _type for its items, child container field)
STRUCTURE: Dict[str, Tuple[Optional[str], Optional[str]]] = {
    "pageBuilder": ("section", "rows"),
    "rows": ("row", "columns"),
    "columns": ("column", "content"),
    "content": (None, None),
}


def generate_key() -> str:
    """Short random array-item key. Not cryptographic; unique within a document."""
    return "".join(random.choices(_KEY_ALPHABET, k=KEY_LENGTH))


def _with_key(item: Dict[str, Any], seen: Set[str]) -> Dict[str, Any]:
    """Copy item, giving it a _key not already used in this array."""
    out = dict(item)
    key = out.get("_key")
    if not isinstance(key, str) or not key or key in seen:
        key = generate_key()
        while key in seen:
            key = generate_key()
        out["_key"] = key
    seen.add(key)
    return out


def _normalize_structural(items: list, container: str) -> list:
    default_type, child = STRUCTURE[container]
    seen: Set[str] = set()
    result = []
    for item in items:
        if not isinstance(item, dict):
            result.append(item)
            continue
        node = _with_key(item, seen)
        if default_type and not node.get("_type"):
            node["_type"] = default_type
        for key, value in list(node.items()):
            if child is not None and key == child and isinstance(value, list):
                node[key] = _normalize_structural(value, child)
            else:
                node[key] = ensure_keys_and_types(value)
        result.append(node)
    return result


def ensure_keys_and_types(value: Any) -> Any:
    """Return value with every array object keyed and layout levels typed.

    Input is not mutated. Already-normalized trees come back unchanged. A
    _key repeated within one array is replaced on its later occurrences.
    """
    if isinstance(value, list):
        seen: Set[str] = set()
        return [
            ensure_keys_and_types(_with_key(item, seen)) if isinstance(item, dict) else item
            for item in value
        ]

    if isinstance(value, dict):
        result: Dict[str, Any] = {}
        for key, child in value.items():
            if key == ROOT_FIELD and isinstance(child, list):
                result[key] = _normalize_structural(child, ROOT_FIELD)
            else:
                result[key] = ensure_keys_and_types(child)
        return result

    return value
