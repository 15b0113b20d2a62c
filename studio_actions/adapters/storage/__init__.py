"""Document store adapters."""

from typing import Optional

from studio_actions.adapters.storage.json_store import JsonDocumentStore
from studio_actions.adapters.storage.sanity_store import SanityStore
from studio_actions.config import AppConfig
from studio_actions.ports.outbound import DocumentStorePort


def create_store(config: Optional[AppConfig] = None) -> DocumentStorePort:
    """Create the document store selected by STORE_BACKEND."""
    config = config or AppConfig.from_env()
    if config.store_backend == "json":
        return JsonDocumentStore(config.json_store_path)
    if config.store_backend == "sanity":
        return SanityStore(
            project_id=config.sanity.project_id,
            dataset=config.sanity.dataset,
            token=config.sanity.token,
            api_version=config.sanity.api_version,
            timeout_seconds=config.sanity.timeout_seconds,
        )
    raise ValueError(f"Unsupported store backend: {config.store_backend}")


__all__ = ["JsonDocumentStore", "SanityStore", "create_store"]
