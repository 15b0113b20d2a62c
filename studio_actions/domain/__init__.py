"""Domain layer — pure Python, no framework dependencies."""

from studio_actions.domain.models import Action, ActionResult, BatchSummary, ExecutedAction
from studio_actions.domain.action_parser import parse_actions, strip_actions
from studio_actions.domain.normalizer import ensure_keys_and_types
from studio_actions.domain.query_guard import validate_query
from studio_actions.domain.executor import ActionExecutor
from studio_actions.domain.summary import build_summary, build_studio_links

__all__ = [
    "Action",
    "ActionResult",
    "BatchSummary",
    "ExecutedAction",
    "ActionExecutor",
    "parse_actions",
    "strip_actions",
    "ensure_keys_and_types",
    "validate_query",
    "build_summary",
    "build_studio_links",
]
