"""FastAPI application and startup."""

from typing import Any, Dict

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel

from studio_actions.adapters.web import routes
from studio_actions.config import CONFIG, __version__

app = FastAPI(title="Studio Actions", version=__version__)
app.include_router(routes.actions_router)


class StatusResponse(BaseModel):
    version: str
    storeBackend: str
    storeConfigured: bool
    dryRunSupported: bool = True
    limits: Dict[str, Any]


@app.get("/status", response_model=StatusResponse)
async def status():
    """Server status endpoint"""
    return StatusResponse(
        version=__version__,
        storeBackend=CONFIG["store_backend"],
        storeConfigured=bool(getattr(routes.store, "is_configured", True)),
        limits={
            "maxQueryLength": CONFIG["max_query_length"],
            "maxResultBytes": CONFIG["max_result_bytes"],
        },
    )


def main():
    uvicorn.run(app, host="0.0.0.0", port=CONFIG["port"])


if __name__ == "__main__":
    main()
