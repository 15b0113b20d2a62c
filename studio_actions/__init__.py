"""Studio Actions — turns LLM action blocks into document store operations."""

from studio_actions.config import CONFIG, AppConfig, __version__
from studio_actions.domain import (
    Action,
    ActionExecutor,
    ActionResult,
    BatchSummary,
    ExecutedAction,
    build_studio_links,
    build_summary,
    ensure_keys_and_types,
    parse_actions,
    strip_actions,
    validate_query,
)

__all__ = [
    "__version__",
    "CONFIG",
    "AppConfig",
    "Action",
    "ActionExecutor",
    "ActionResult",
    "BatchSummary",
    "ExecutedAction",
    "build_studio_links",
    "build_summary",
    "ensure_keys_and_types",
    "parse_actions",
    "strip_actions",
    "validate_query",
]
