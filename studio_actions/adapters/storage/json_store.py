"""JSON file-based document store — implements DocumentStorePort.

Local development backend. Documents live in one JSON object keyed by _id.
Queries understand a small subset of GROQ:

    *[_type == "page" && slug.current == $slug]
    *[_type == "page"][0]
    count(*[_type == "post"])
"""

import asyncio
import copy
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from studio_actions.domain.errors import StoreError

_PATH_TOKEN = re.compile(
    r"""(?P<name>[A-Za-z_]\w*)"""
    r"""|\[(?P<index>-?\d+)\]"""
    r"""|\[\s*_key\s*==\s*["'](?P<key>[^"']*)["']\s*\]"""
    r"""|(?P<dot>\.)"""
)
_SELECT_RE = re.compile(r"^\*\[(?P<filter>[^\]]*)\]\s*(?:\[(?P<index>\d+)\])?$", re.DOTALL)
_COUNT_RE = re.compile(r"^count\(\s*\*\[(?P<filter>[^\]]*)\]\s*\)$", re.DOTALL)
_CONDITION_RE = re.compile(r"^(?P<field>[\w.]+)\s*(?P<op>==|!=)\s*(?P<value>.+)$", re.DOTALL)


def parse_path(path: str) -> List[Any]:
    """Split `a.b[0][_key=="k"]` into ["a", "b", 0, {"_key": "k"}]."""
    segments: List[Any] = []
    pos = 0
    while pos < len(path):
        match = _PATH_TOKEN.match(path, pos)
        if not match:
            raise StoreError(f"Invalid patch path: {path}")
        if match.group("name") is not None:
            segments.append(match.group("name"))
        elif match.group("index") is not None:
            segments.append(int(match.group("index")))
        elif match.group("key") is not None:
            segments.append({"_key": match.group("key")})
        pos = match.end()
    if not segments:
        raise StoreError(f"Invalid patch path: {path}")
    return segments


def _step(container: Any, segment: Any, path: str) -> Any:
    if isinstance(segment, str):
        if not isinstance(container, dict):
            raise StoreError(f"Path {path} does not resolve to an object")
        return container.setdefault(segment, {})
    if not isinstance(container, list):
        raise StoreError(f"Path {path} does not resolve to an array")
    if isinstance(segment, int):
        try:
            return container[segment]
        except IndexError:
            raise StoreError(f"Index out of range in path {path}")
    for item in container:
        if isinstance(item, dict) and item.get("_key") == segment["_key"]:
            return item
    raise StoreError(f"No array item with _key {segment['_key']!r} in path {path}")


def set_path(document: Dict[str, Any], path: str, value: Any) -> None:
    segments = parse_path(path)
    target: Any = document
    for segment in segments[:-1]:
        target = _step(target, segment, path)

    last = segments[-1]
    if isinstance(last, str):
        if not isinstance(target, dict):
            raise StoreError(f"Path {path} does not resolve to an object")
        target[last] = value
        return
    if not isinstance(target, list):
        raise StoreError(f"Path {path} does not resolve to an array")
    if isinstance(last, int):
        try:
            target[last] = value
        except IndexError:
            raise StoreError(f"Index out of range in path {path}")
        return
    for i, item in enumerate(target):
        if isinstance(item, dict) and item.get("_key") == last["_key"]:
            target[i] = value
            return
    raise StoreError(f"No array item with _key {last['_key']!r} in path {path}")


def _literal(raw: str, params: Dict[str, Any]) -> Any:
    raw = raw.strip()
    if raw.startswith("$"):
        name = raw[1:]
        if name not in params:
            raise StoreError(f"Missing query parameter: {name}")
        return params[name]
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
        return raw[1:-1]
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise StoreError(f"Unsupported query value: {raw}")


def _lookup(document: Dict[str, Any], field: str) -> Any:
    value: Any = document
    for part in field.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _matcher(filter_text: str, params: Dict[str, Any]):
    conditions = []
    for clause in filter_text.split("&&"):
        clause = clause.strip()
        if not clause:
            continue
        match = _CONDITION_RE.match(clause)
        if not match:
            raise StoreError(f"Unsupported query filter: {clause}")
        conditions.append((match.group("field"), match.group("op"), _literal(match.group("value"), params)))

    def matches(document: Dict[str, Any]) -> bool:
        for field, op, expected in conditions:
            equal = _lookup(document, field) == expected
            if equal != (op == "=="):
                return False
        return True

    return matches


class JsonDocumentStore:
    """File-backed document store implementing DocumentStorePort."""

    def __init__(self, path: str = "memory/documents.json"):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt document store {self._path}: {e}")
        return raw if isinstance(raw, dict) else {}

    def _save(self, documents: Dict[str, Dict[str, Any]]) -> None:
        content = json.dumps(documents, ensure_ascii=False, indent=2)
        # Atomic write
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self._path.parent), suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, str(self._path))
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    # ── DocumentStorePort ──────────────────────────────────────

    async def get_document(self, document_id: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            document = self._load().get(document_id)
        return copy.deepcopy(document) if document is not None else None

    def patch(self, document_id: str) -> "JsonPatch":
        return JsonPatch(self, document_id)

    async def create_or_replace(self, document: Dict[str, Any]) -> Dict[str, Any]:
        document_id = document.get("_id")
        if not document_id:
            raise StoreError("Document must have an _id")
        async with self._lock:
            documents = self._load()
            documents[document_id] = copy.deepcopy(document)
            self._save(documents)
        return copy.deepcopy(document)

    async def delete(self, document_id: str) -> None:
        async with self._lock:
            documents = self._load()
            if documents.pop(document_id, None) is not None:
                self._save(documents)

    async def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        query = query.strip()
        params = params or {}
        async with self._lock:
            documents = list(self._load().values())

        count = _COUNT_RE.match(query)
        if count:
            matches = _matcher(count.group("filter"), params)
            return sum(1 for doc in documents if matches(doc))

        select = _SELECT_RE.match(query)
        if not select:
            raise StoreError(f"Unsupported query: {query[:100]}")
        matches = _matcher(select.group("filter"), params)
        found = [copy.deepcopy(doc) for doc in documents if matches(doc)]
        if select.group("index") is not None:
            index = int(select.group("index"))
            return found[index] if index < len(found) else None
        return found

    async def apply_patch(self, document_id: str, operations: List[Dict[str, Any]]) -> Dict[str, Any]:
        async with self._lock:
            documents = self._load()
            if document_id not in documents:
                raise StoreError(f"Document not found: {document_id}")
            document = copy.deepcopy(documents[document_id])
            for values in operations:
                for path, value in values.items():
                    set_path(document, path, copy.deepcopy(value))
            documents[document_id] = document
            self._save(documents)
        return copy.deepcopy(document)


class JsonPatch:
    """Patch builder for JsonDocumentStore; commit applies every set() at once."""

    def __init__(self, store: JsonDocumentStore, document_id: str):
        self._store = store
        self._document_id = document_id
        self._operations: List[Dict[str, Any]] = []

    def set(self, values: Dict[str, Any]) -> "JsonPatch":
        self._operations.append(dict(values))
        return self

    async def commit(self) -> Dict[str, Any]:
        return await self._store.apply_patch(self._document_id, self._operations)
