"""Configuration and shared state."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

SUPPORTED_STORE_BACKENDS = ("sanity", "json")
STORE_BACKEND = os.getenv("STORE_BACKEND", "sanity").strip().lower()
if STORE_BACKEND not in SUPPORTED_STORE_BACKENDS:
    _stderr_print(f"Unsupported STORE_BACKEND={STORE_BACKEND!r}, falling back to 'sanity'")
    STORE_BACKEND = "sanity"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, using {default}")
        return default


CONFIG = {
    "port": _env_int("PORT", 3000),
    "store_backend": STORE_BACKEND,
    "json_store_path": os.getenv("JSON_STORE_PATH", "memory/documents.json"),
    # Sanity content lake
    "sanity_project_id": os.getenv("SANITY_PROJECT_ID", "") or os.getenv("NEXT_PUBLIC_SANITY_PROJECT_ID", ""),
    "sanity_dataset": os.getenv("SANITY_DATASET", "") or os.getenv("NEXT_PUBLIC_SANITY_DATASET", "") or "production",
    "sanity_token": os.getenv("SANITY_API_TOKEN", ""),
    "sanity_api_version": os.getenv("SANITY_API_VERSION", "2024-01-01"),
    "sanity_timeout_seconds": _env_int("SANITY_TIMEOUT_SECONDS", 30),
    "studio_url": os.getenv("SANITY_STUDIO_URL", "") or os.getenv("NEXT_PUBLIC_SANITY_STUDIO_URL", ""),
    # Remote API auth — callers send "Authorization: Bearer <secret>"
    "remote_api_secret": os.getenv("REMOTE_API_SECRET", ""),
    # Query guard limits
    "max_query_length": _env_int("MAX_QUERY_LENGTH", 5000),
    "max_result_bytes": _env_int("MAX_RESULT_BYTES", 1_000_000),
}


# ── Typed config ──────────────────────────────────────


@dataclass
class SanityConfig:
    project_id: str = ""
    dataset: str = "production"
    token: str = ""
    api_version: str = "2024-01-01"
    studio_url: str = ""
    timeout_seconds: int = 30

    @property
    def is_configured(self) -> bool:
        return bool(self.project_id and self.token)


@dataclass
class GuardConfig:
    max_query_length: int = 5000
    max_result_bytes: int = 1_000_000


@dataclass
class AppConfig:
    """Typed configuration built from CONFIG."""

    port: int = 3000
    store_backend: str = "sanity"
    json_store_path: str = "memory/documents.json"
    remote_api_secret: str = ""
    sanity: SanityConfig = field(default_factory=SanityConfig)
    guard: GuardConfig = field(default_factory=GuardConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            port=CONFIG["port"],
            store_backend=CONFIG["store_backend"],
            json_store_path=CONFIG["json_store_path"],
            remote_api_secret=CONFIG["remote_api_secret"],
            sanity=SanityConfig(
                project_id=CONFIG["sanity_project_id"],
                dataset=CONFIG["sanity_dataset"],
                token=CONFIG["sanity_token"],
                api_version=CONFIG["sanity_api_version"],
                studio_url=CONFIG["studio_url"],
                timeout_seconds=CONFIG["sanity_timeout_seconds"],
            ),
            guard=GuardConfig(
                max_query_length=CONFIG["max_query_length"],
                max_result_bytes=CONFIG["max_result_bytes"],
            ),
        )
