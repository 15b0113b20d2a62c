"""Outbound ports — interfaces for external system adapters."""

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class PatchPort(Protocol):
    """Chainable patch builder; every set() lands in one committed transaction."""

    def set(self, values: Dict[str, Any]) -> "PatchPort": ...

    async def commit(self) -> Dict[str, Any]: ...


@runtime_checkable
class DocumentStorePort(Protocol):
    """Interface for the structured document store."""

    async def get_document(self, document_id: str) -> Optional[Dict[str, Any]]: ...

    def patch(self, document_id: str) -> PatchPort: ...

    async def create_or_replace(self, document: Dict[str, Any]) -> Dict[str, Any]: ...

    async def delete(self, document_id: str) -> None: ...

    async def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any: ...
