"""Playback relay endpoint."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from streamsniff.application.use_cases.extract_stream import validate_target_url
from streamsniff.domain.exceptions import InvalidInputError, RelayError
from streamsniff.infrastructure.relay.proxy import relay_stream
from streamsniff.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["proxy"])


@router.get("/proxy")
async def proxy(
    request: Request,
    url: str | None = Query(default=None, description="Manifest or segment URL."),
    referer: str | None = Query(default=None, description="Referer to send."),
    origin: str | None = Query(default=None, description="Origin to send."),
) -> Response:
    """Fetch *url* with playback headers and pass the upstream response on."""
    state = cast(AppState, request.app.state)

    try:
        target = validate_target_url(url)
    except InvalidInputError as exc:
        return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

    try:
        relayed = await relay_stream(
            state.http_client,
            target,
            referer=referer,
            origin=origin,
            timeout=state.config.proxy_timeout_seconds,
        )
    except RelayError as exc:
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})

    return Response(
        content=relayed.body,
        status_code=relayed.status_code,
        media_type=relayed.content_type,
    )
