"""Sanity content lake client using aiohttp — implements DocumentStorePort."""

import json
from typing import Any, Dict, List, Optional

import aiohttp

from studio_actions.config import CONFIG
from studio_actions.domain.errors import StoreError


def _error_message(data: Any, status: int) -> str:
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return error.get("description") or error.get("message") or str(error)
        if error:
            return data.get("message") or str(error)
    return f"Sanity API error (HTTP {status})"


class SanityPatch:
    """Collects set() calls and commits them as one mutation."""

    def __init__(self, store: "SanityStore", document_id: str):
        self._store = store
        self._document_id = document_id
        self._set: Dict[str, Any] = {}

    def set(self, values: Dict[str, Any]) -> "SanityPatch":
        self._set.update(values)
        return self

    def serialize(self) -> Dict[str, Any]:
        return {"patch": {"id": self._document_id, "set": dict(self._set)}}

    async def commit(self) -> Dict[str, Any]:
        return await self._store.mutate_one(self.serialize())


class SanityStore:
    """Async Sanity HTTP API client (doc / mutate / query endpoints)."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        dataset: Optional[str] = None,
        token: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
    ):
        self.project_id = project_id if project_id is not None else CONFIG["sanity_project_id"]
        self.dataset = dataset if dataset is not None else CONFIG["sanity_dataset"]
        self._token = token if token is not None else CONFIG["sanity_token"]
        self.api_version = (api_version or CONFIG["sanity_api_version"]).lstrip("v")
        self._timeout = aiohttp.ClientTimeout(
            total=timeout_seconds if timeout_seconds is not None else CONFIG["sanity_timeout_seconds"]
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.project_id and self._token)

    @property
    def base_url(self) -> str:
        return f"https://{self.project_id}.api.sanity.io/v{self.api_version}/data"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        if not self.is_configured:
            raise StoreError("Sanity API not configured")
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            async with session.request(method, url, headers=self._headers(), **kwargs) as resp:
                data = await resp.json()
                if resp.status >= 400:
                    raise StoreError(_error_message(data, resp.status), status=resp.status)
                return data

    # ── DocumentStorePort ──────────────────────────────────────

    async def get_document(self, document_id: str) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}/doc/{self.dataset}/{document_id}"
        try:
            data = await self._request("GET", url)
        except StoreError as e:
            if e.status == 404:
                return None
            raise
        documents = data.get("documents") or []
        return documents[0] if documents else None

    def patch(self, document_id: str) -> SanityPatch:
        return SanityPatch(self, document_id)

    async def create_or_replace(self, document: Dict[str, Any]) -> Dict[str, Any]:
        return await self.mutate_one({"createOrReplace": document})

    async def delete(self, document_id: str) -> None:
        await self.mutate([{"delete": {"id": document_id}}])

    async def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/query/{self.dataset}"
        query_params = {"query": query}
        for name, value in (params or {}).items():
            query_params[f"${name}"] = json.dumps(value)
        data = await self._request("GET", url, params=query_params)
        return data.get("result")

    # ── mutations ──────────────────────────────────────

    async def mutate(self, mutations: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Send mutations as one transaction."""
        url = f"{self.base_url}/mutate/{self.dataset}"
        params = {"returnIds": "true", "returnDocuments": "true", "visibility": "sync"}
        return await self._request("POST", url, params=params, json={"mutations": mutations})

    async def mutate_one(self, mutation: Dict[str, Any]) -> Dict[str, Any]:
        data = await self.mutate([mutation])
        results = data.get("results") or []
        if not results:
            raise StoreError("Sanity mutation returned no results")
        first = results[0]
        return first.get("document") or {"_id": first.get("id")}
