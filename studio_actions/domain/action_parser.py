"""Action block parsing — pulls structured actions out of LLM response text.

Pure Python, no framework dependencies.

Recognized envelopes, returned in the order they appear:

    ```action
    {"type": "create", "description": "...", "payload": {...}}
    ```

    [ACTION] {"type": "query", "payload": {"query": "*[_type == 'page']"}} [/ACTION]

    ```json
    {"type": "update", ...}
    ```

Json fences only count when the object carries a "type" key; anything else
in a json fence is ordinary prose and is left alone.
"""

from __future__ import annotations

import json
import random
import re
import string
import sys
import time
from typing import Any, Dict, Iterator, List, Optional, Tuple

from studio_actions.domain.models import (
    ACTION_TYPES,
    DEFAULT_DESCRIPTIONS,
    Action,
    build_payload,
)

# One alternation so matches come back in source order across envelope kinds.
# An inline body never crosses another [ACTION] or [/ACTION] tag.
ACTION_RE = re.compile(
    r"```action\s*(?P<fenced>.*?)```"
    r"|```json\s*(?P<json>.*?)```"
    r"|\[ACTION\]\s*(?P<inline>(?:(?!\[/?ACTION\]).)*?)\s*\[/ACTION\]",
    re.DOTALL,
)

_TRAILING_COMMA_OBJ = re.compile(r",\s*}")
_TRAILING_COMMA_ARR = re.compile(r",\s*]")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_]\w*)(\s*):")
_EXTRA_NEWLINES = re.compile(r"\n{3,}")

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _log(msg: str):
    print(msg, file=sys.stderr)


def generate_action_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=7))
    return f"action_{int(time.time() * 1000)}_{suffix}"


def safe_parse_json(raw: str) -> Optional[Any]:
    """Parse JSON, retrying once with common LLM mistakes repaired.

    Repairs trailing commas and unquoted object keys. Returns None when the
    text is still not valid JSON.
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass

    cleaned = _TRAILING_COMMA_OBJ.sub("}", raw)
    cleaned = _TRAILING_COMMA_ARR.sub("]", cleaned)
    cleaned = _BARE_KEY.sub(r'\1"\2"\3:', cleaned)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        _log(f"Failed to parse action JSON: {raw[:100]!r}")
        return None


def parse_action_data(data: Any) -> Optional[Action]:
    """Turn one decoded block into a pending Action, or None if it is not one."""
    if not isinstance(data, dict):
        return None

    action_type = data.get("type")
    if not isinstance(action_type, str) or not action_type:
        _log(f"Skipping action block without a type: {str(data)[:100]!r}")
        return None
    if action_type not in ACTION_TYPES:
        _log(f"Unrecognized action type: {action_type!r}")

    # Some models put payload fields at the top level
    source = data.get("payload")
    if not isinstance(source, dict):
        source = data

    description = data.get("description")
    if not isinstance(description, str) or not description:
        description = DEFAULT_DESCRIPTIONS.get(action_type, action_type)

    return Action(
        id=generate_action_id(),
        type=action_type,
        description=description,
        payload=build_payload(action_type, source),
    )


def _iter_blocks(text: str) -> Iterator[Tuple[re.Match, Optional[Any]]]:
    """Yield (match, decoded) for every envelope; decoded is None when unparseable."""
    for match in ACTION_RE.finditer(text):
        kind = match.lastgroup
        body = match.group(kind).strip()
        yield match, safe_parse_json(body)


def _is_action_json(data: Any) -> bool:
    return isinstance(data, dict) and "type" in data


def parse_actions(text: str) -> List[Action]:
    """Extract action blocks from LLM response text, in source order.

    A block whose JSON cannot be parsed is skipped; later blocks are still
    extracted.
    """
    actions: List[Action] = []
    for match, data in _iter_blocks(text):
        if match.lastgroup == "json" and not _is_action_json(data):
            continue
        action = parse_action_data(data)
        if action is not None:
            actions.append(action)
    return actions


def strip_actions(text: str) -> str:
    """Remove all action blocks from text, leaving user-facing prose."""

    def _replace(match: re.Match) -> str:
        if match.lastgroup == "json":
            data = safe_parse_json(match.group("json").strip())
            if not _is_action_json(data):
                return match.group(0)
        return ""

    stripped = ACTION_RE.sub(_replace, text)
    return _EXTRA_NEWLINES.sub("\n\n", stripped).strip()


def describe_actions(actions: List[Action]) -> Dict[str, int]:
    """Count parsed actions per type."""
    counts: Dict[str, int] = {}
    for action in actions:
        counts[action.type] = counts.get(action.type, 0) + 1
    return counts
