"""Domain data models — pure Python dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from studio_actions.domain.errors import InvalidTransition, ValidationError

ACTION_TYPES = (
    "create",
    "update",
    "delete",
    "query",
    "navigate",
    "explain",
    "uploadImage",
)

PENDING = "pending"
EXECUTING = "executing"
COMPLETED = "completed"
FAILED = "failed"
CANCELLED = "cancelled"

TERMINAL_STATUSES = frozenset({COMPLETED, FAILED, CANCELLED})

# Allowed status moves; anything else raises InvalidTransition
_TRANSITIONS: Dict[str, frozenset] = {
    PENDING: frozenset({EXECUTING, CANCELLED}),
    EXECUTING: frozenset({COMPLETED, FAILED, CANCELLED}),
    COMPLETED: frozenset(),
    FAILED: frozenset(),
    CANCELLED: frozenset(),
}

DEFAULT_DESCRIPTIONS: Dict[str, str] = {
    "create": "Create a new document",
    "update": "Update an existing document",
    "delete": "Delete a document",
    "query": "Query documents",
    "navigate": "Navigate to a document",
    "explain": "Explanation",
    "uploadImage": "Upload image",
}


def _require(value: Any, message: str) -> None:
    if not value:
        raise ValidationError(message)


# ── Payload variants ──────────────────────────────────────


@dataclass
class CreatePayload:
    document_type: Optional[str] = None
    fields: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        _require(self.document_type, "Document type is required for create action")
        _require(self.fields, "Fields are required for create action")


@dataclass
class UpdatePayload:
    document_id: Optional[str] = None
    fields: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        _require(self.document_id, "Document ID is required for update action")
        _require(self.fields, "Fields are required for update action")


@dataclass
class DeletePayload:
    document_id: Optional[str] = None

    def validate(self) -> None:
        _require(self.document_id, "Document ID is required for delete action")


@dataclass
class QueryPayload:
    query: Optional[str] = None
    params: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        _require(self.query, "Query is required for query action")


@dataclass
class NavigatePayload:
    path: Optional[str] = None
    document_id: Optional[str] = None

    def validate(self) -> None:
        pass


@dataclass
class ExplainPayload:
    explanation: Optional[str] = None

    def validate(self) -> None:
        pass


@dataclass
class UploadImagePayload:
    document_id: Optional[str] = None
    fields: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        pass


@dataclass
class UnknownPayload:
    raw: Dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        pass


def _pick(source: Dict[str, Any], *keys: str) -> Any:
    """Return the first truthy value among keys (wire aliases)."""
    for key in keys:
        value = source.get(key)
        if value:
            return value
    return None


def _as_dict(value: Any) -> Optional[Dict[str, Any]]:
    return value if isinstance(value, dict) else None


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def build_payload(action_type: str, source: Dict[str, Any]):
    """Build the payload variant for action_type from a raw wire dict."""
    document_type = _as_str(source.get("documentType"))
    document_id = _as_str(source.get("documentId"))
    fields = _as_dict(_pick(source, "fields", "data"))

    if action_type == "create":
        return CreatePayload(document_type=document_type, fields=fields)
    if action_type == "update":
        return UpdatePayload(document_id=document_id, fields=fields)
    if action_type == "delete":
        return DeletePayload(document_id=document_id)
    if action_type == "query":
        return QueryPayload(
            query=_as_str(_pick(source, "query", "groq")),
            params=_as_dict(source.get("params")),
        )
    if action_type == "navigate":
        return NavigatePayload(path=_as_str(_pick(source, "path", "url")), document_id=document_id)
    if action_type == "explain":
        return ExplainPayload(explanation=_as_str(_pick(source, "explanation", "message")))
    if action_type == "uploadImage":
        return UploadImagePayload(document_id=document_id, fields=fields)
    return UnknownPayload(raw=dict(source))


def payload_to_dict(payload) -> Dict[str, Any]:
    """Render a payload variant in wire (camelCase) form, dropping empty keys."""
    if isinstance(payload, UnknownPayload):
        return dict(payload.raw)
    names = {
        "document_type": "documentType",
        "document_id": "documentId",
        "fields": "fields",
        "query": "query",
        "params": "params",
        "path": "path",
        "explanation": "explanation",
    }
    out: Dict[str, Any] = {}
    for attr, wire in names.items():
        value = getattr(payload, attr, None)
        if value is not None:
            out[wire] = value
    return out


# ── Action / results ──────────────────────────────────────


@dataclass
class ActionResult:
    """Outcome of running one action."""

    success: bool
    message: str = ""
    data: Any = None
    document_id: Optional[str] = None
    pre_state: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        if self.document_id is not None:
            out["documentId"] = self.document_id
        if self.pre_state is not None:
            out["preState"] = self.pre_state
        return out


@dataclass
class Action:
    """Transient command parsed from LLM output."""

    id: str
    type: str  # one of ACTION_TYPES, or an unrecognized string
    description: str
    payload: Any
    status: str = PENDING
    result: Optional[ActionResult] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def transition(self, new_status: str) -> None:
        allowed = _TRANSITIONS.get(self.status, frozenset())
        if new_status not in allowed:
            raise InvalidTransition(f"Cannot move action {self.id} from {self.status} to {new_status}")
        self.status = new_status

    def cancel(self) -> bool:
        """Request cancellation. Advisory only once the store call has started."""
        if self.is_terminal:
            return False
        self.transition(CANCELLED)
        return True

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "status": self.status,
            "payload": payload_to_dict(self.payload),
        }
        if self.result is not None:
            out["result"] = self.result.to_dict()
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass
class ExecutedAction:
    action: Action
    result: ActionResult
    dry_run: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.to_dict(),
            "result": self.result.to_dict(),
            "dryRun": self.dry_run,
        }


@dataclass
class BatchSummary:
    total_actions: int = 0
    successful_actions: int = 0
    failed_actions: int = 0
    created_documents: List[str] = field(default_factory=list)
    updated_documents: List[str] = field(default_factory=list)
    deleted_documents: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalActions": self.total_actions,
            "successfulActions": self.successful_actions,
            "failedActions": self.failed_actions,
            "createdDocuments": list(self.created_documents),
            "updatedDocuments": list(self.updated_documents),
            "deletedDocuments": list(self.deleted_documents),
        }


@dataclass
class StudioLink:
    document_id: str
    document_type: str
    structure_url: str
    presentation_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "documentId": self.document_id,
            "documentType": self.document_type,
            "structureUrl": self.structure_url,
        }
        if self.presentation_url is not None:
            out["presentationUrl"] = self.presentation_url
        return out
