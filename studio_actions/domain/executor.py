"""ActionExecutor — runs parsed actions against a DocumentStorePort.

Each action is one independent store mutation or read. Failures stay inside
the action that caused them: validation problems, rejected queries and store
errors all come back as a failed ActionResult, and the rest of the batch
keeps going. There is no rollback across actions.

States: pending -> executing -> completed | failed | cancelled
         \\-> cancelled
"""

from __future__ import annotations

import json
import sys
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from studio_actions.domain.errors import UnknownActionType
from studio_actions.domain.models import (
    CANCELLED,
    COMPLETED,
    EXECUTING,
    FAILED,
    Action,
    ActionResult,
    ExecutedAction,
)
from studio_actions.domain.normalizer import ensure_keys_and_types, generate_key
from studio_actions.domain.query_guard import (
    MAX_QUERY_LENGTH,
    denied_pattern_labels,
    ensure_query_allowed,
)
from studio_actions.ports.outbound import DocumentStorePort

MAX_RESULT_BYTES = 1_000_000
DRAFT_PREFIX = "drafts."

DRY_RUN_MESSAGE = "Dry run - action not executed"

_FALLBACK_MESSAGES: Dict[str, str] = {
    "create": "Failed to create document",
    "update": "Failed to update document",
    "delete": "Failed to delete document",
    "query": "Failed to execute query",
}


def _log(msg: str):
    print(f"[{datetime.now().isoformat()}] {msg}", file=sys.stderr)


def _has_path_selector(key: str) -> bool:
    return "[" in key


def _serialized_size(value: Any) -> int:
    return len(json.dumps(value, ensure_ascii=False, default=str).encode("utf-8"))


def _size_label(limit: int) -> str:
    if limit % 1_000_000 == 0:
        return f"{limit // 1_000_000}MB"
    return f"{limit:,} byte"


class ActionExecutor:
    """Dispatches actions by type and drives their status machine."""

    def __init__(
        self,
        store: DocumentStorePort,
        max_query_length: int = MAX_QUERY_LENGTH,
        max_result_bytes: int = MAX_RESULT_BYTES,
    ):
        self._store = store
        self._max_query_length = max_query_length
        self._max_result_bytes = max_result_bytes
        self._handlers: Dict[str, Callable[[Action], Awaitable[ActionResult]]] = {
            "create": self._create,
            "update": self._update,
            "delete": self._delete,
            "query": self._query,
            "navigate": self._navigate,
            "explain": self._explain,
            "uploadImage": self._upload_image,
        }

    # ── batch ──────────────────────────────────────

    async def run_batch(self, actions: List[Action], dry_run: bool = False) -> List[ExecutedAction]:
        """Run actions one at a time, in order.

        Later actions may reference ids minted by earlier ones, so nothing
        here runs concurrently. With dry_run the store is never touched and
        every action stays pending.
        """
        if dry_run:
            _log(f"Dry run: {len(actions)} action(s) not executed")
            return [
                ExecutedAction(action=action, result=ActionResult(True, DRY_RUN_MESSAGE), dry_run=True)
                for action in actions
            ]

        executed: List[ExecutedAction] = []
        for action in actions:
            result = await self.execute(action)
            executed.append(ExecutedAction(action=action, result=result))
        return executed

    # ── single action ──────────────────────────────────────

    async def execute(self, action: Action) -> ActionResult:
        """Run one action and record the outcome on it."""
        if action.status == CANCELLED:
            result = ActionResult(False, "Action cancelled before execution")
            action.result = result
            action.error = result.message
            return result

        if action.is_terminal:
            # Already ran; the earlier outcome stays on the action.
            _log(f"Skipping action {action.id}: already {action.status}")
            return ActionResult(False, f"Action already {action.status}")

        action.transition(EXECUTING)
        _log(f"Executing {action.type} action {action.id}")

        try:
            handler = self._handlers.get(action.type)
            if handler is None:
                raise UnknownActionType(action.type)
            action.payload.validate()
            result = await handler(action)
        except Exception as e:  # ActionError and store failures alike
            result = ActionResult(False, str(e) or _FALLBACK_MESSAGES.get(action.type, "Action execution failed"))

        self._finish(action, result)
        return result

    @staticmethod
    def _finish(action: Action, result: ActionResult) -> None:
        action.result = result
        if not result.success:
            action.error = result.message
        if action.status == CANCELLED:
            # Cancel arrived while the store call was in flight; the call may
            # already have taken effect, so the result is kept as-is.
            _log(f"Action {action.id} was cancelled during execution")
            return
        action.transition(COMPLETED if result.success else FAILED)
        if not result.success:
            _log(f"Action {action.id} failed: {result.message}")

    # ── handlers ──────────────────────────────────────

    async def _create(self, action: Action) -> ActionResult:
        payload = action.payload
        document_type = payload.document_type
        document_id = f"{DRAFT_PREFIX}{document_type}-{generate_key()}"

        document = dict(ensure_keys_and_types(payload.fields))
        document["_id"] = document_id
        document["_type"] = document_type

        created = await self._store.create_or_replace(document)
        return ActionResult(
            True,
            f"Created {document_type} document",
            data=created,
            document_id=(created or {}).get("_id", document_id),
        )

    async def _read_pre_state(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Best-effort snapshot for undo; a failed read is logged, not raised."""
        try:
            return await self._store.get_document(document_id)
        except Exception as e:
            _log(f"Pre-state read failed for {document_id}: {e}")
            return None

    async def _update(self, action: Action) -> ActionResult:
        payload = action.payload
        document_id = payload.document_id

        # Proceeds without a snapshot when the read fails; see DESIGN.md
        pre_state = await self._read_pre_state(document_id)

        fields = ensure_keys_and_types(payload.fields)
        patch = self._store.patch(document_id)
        if any(_has_path_selector(key) for key in fields):
            for path, value in fields.items():
                patch = patch.set({path: value})
        else:
            patch = patch.set(fields)
        updated = await patch.commit()

        return ActionResult(
            True,
            "Updated document",
            data=updated,
            document_id=(updated or {}).get("_id", document_id),
            pre_state=pre_state,
        )

    async def _delete(self, action: Action) -> ActionResult:
        document_id = action.payload.document_id
        # A failed read aborts the delete: the snapshot is the only way back.
        pre_state = await self._store.get_document(document_id)
        await self._store.delete(document_id)
        return ActionResult(True, "Deleted document", document_id=document_id, pre_state=pre_state)

    async def _query(self, action: Action) -> ActionResult:
        payload = action.payload
        labels = denied_pattern_labels(payload.query)
        if labels:
            _log(f"Query for action {action.id} hit denylist: {', '.join(labels)}")
        query = ensure_query_allowed(payload.query, self._max_query_length)

        data = await self._store.fetch(query, payload.params)

        if _serialized_size(data) > self._max_result_bytes:
            return ActionResult(
                True,
                "Query executed successfully (result truncated due to size)",
                data={"_truncated": True, "_message": f"Result exceeds {_size_label(self._max_result_bytes)} limit"},
            )
        return ActionResult(True, "Query executed successfully", data=data)

    async def _navigate(self, action: Action) -> ActionResult:
        payload = action.payload
        return ActionResult(
            True,
            "Navigate action acknowledged (no-op in headless mode)",
            data={"path": payload.path, "documentId": payload.document_id},
        )

    async def _explain(self, action: Action) -> ActionResult:
        return ActionResult(True, "Explanation provided", data={"explanation": action.payload.explanation})

    async def _upload_image(self, action: Action) -> ActionResult:
        return ActionResult(False, "Image upload is not supported in remote API mode")
