"""Read-only runtime statistics."""

from __future__ import annotations

from typing import Any, cast

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from streamsniff.infrastructure.metrics import process_memory
from streamsniff.interfaces.app_state import AppState

router = APIRouter(tags=["stats"])


@router.get("/stats")
async def stats(request: Request) -> JSONResponse:
    """Return queue occupancy, cache size, pool state, metrics and memory.

    Components that are not wired (e.g. before startup finished) are
    left out of the payload.
    """
    state = cast(AppState, request.app.state)

    data: dict[str, Any] = {}

    queue = getattr(state, "queue", None)
    if queue is not None:
        data["queue"] = queue.stats()

    cache = getattr(state, "cache", None)
    if cache is not None:
        data["cache"] = {"size": cache.size(), "ttl_seconds": cache.ttl}

    pool = getattr(state, "browser_pool", None)
    if pool is not None:
        data["browser_pool"] = pool.snapshot()

    m = getattr(state, "metrics", None)
    if m is not None:
        data["metrics"] = m.snapshot()

    data["memory"] = process_memory()

    return JSONResponse(content=data)
