"""Action API routes — parse and execute LLM output against the document store."""

import hmac
import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel

from studio_actions.adapters.storage import create_store
from studio_actions.config import AppConfig
from studio_actions.domain.action_parser import describe_actions, parse_actions, strip_actions
from studio_actions.domain.executor import ActionExecutor
from studio_actions.domain.summary import build_studio_links, build_summary

actions_router = APIRouter(prefix="/actions", tags=["Actions"])

store = create_store()


class ParseRequest(BaseModel):
    text: str


class ParseResponse(BaseModel):
    response: str
    actions: List[Dict[str, Any]]
    counts: Dict[str, int]


class ExecuteRequest(BaseModel):
    text: str
    dryRun: bool = False


class ExecuteResponse(BaseModel):
    success: bool
    response: str
    actions: List[Dict[str, Any]]
    summary: Dict[str, Any]
    studioLinks: Optional[List[Dict[str, Any]]] = None
    metadata: Dict[str, Any]


def _check_auth(authorization: Optional[str], secret: str) -> None:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    if not secret:
        raise HTTPException(status_code=401, detail="REMOTE_API_SECRET not configured on server")
    # Accept both "Bearer <token>" and the bare token
    token = authorization[7:] if authorization.startswith("Bearer ") else authorization
    if not hmac.compare_digest(token.encode(), secret.encode()):
        raise HTTPException(status_code=401, detail="Invalid API secret")


def _require_text(text: str) -> None:
    if not text.strip():
        raise HTTPException(status_code=400, detail="text cannot be empty")


@actions_router.post("/parse", response_model=ParseResponse)
async def parse(req: ParseRequest, authorization: Optional[str] = Header(default=None)):
    _check_auth(authorization, AppConfig.from_env().remote_api_secret)
    _require_text(req.text)
    actions = parse_actions(req.text)
    return ParseResponse(
        response=strip_actions(req.text),
        actions=[action.to_dict() for action in actions],
        counts=describe_actions(actions),
    )


@actions_router.post("/execute", response_model=ExecuteResponse)
async def execute(req: ExecuteRequest, authorization: Optional[str] = Header(default=None)):
    config = AppConfig.from_env()
    _check_auth(authorization, config.remote_api_secret)
    _require_text(req.text)
    started = time.monotonic()

    actions = parse_actions(req.text)
    executor = ActionExecutor(
        store,
        max_query_length=config.guard.max_query_length,
        max_result_bytes=config.guard.max_result_bytes,
    )
    executed = await executor.run_batch(actions, dry_run=req.dryRun)

    summary = build_summary(executed)
    links = build_studio_links(executed, config.sanity.studio_url, summary)

    return ExecuteResponse(
        success=True,
        response=strip_actions(req.text),
        actions=[item.to_dict() for item in executed],
        summary=summary.to_dict(),
        studioLinks=[link.to_dict() for link in links] or None,
        metadata={
            "processingTime": int((time.monotonic() - started) * 1000),
            "dryRun": req.dryRun,
        },
    )
