"""Stream extraction endpoint."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from streamsniff.domain.exceptions import BrowserAcquisitionError, InvalidInputError
from streamsniff.interfaces.api.extract.presenter import present_error, present_success
from streamsniff.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["extract"])


@router.get("/extract")
async def extract(
    request: Request,
    url: str | None = Query(default=None, description="Video page URL."),
    timeout: int | None = Query(
        default=None, description="Per-attempt deadline in milliseconds."
    ),
) -> JSONResponse:
    """Find the stream manifest of a video page.

    200 with the chosen stream, 404 when no stream was found (or the
    attempts timed out), 400 for a missing or malformed ``url`` and 500
    when no browser could be launched.
    """
    state = cast(AppState, request.app.state)
    timeout_seconds = timeout / 1000 if timeout is not None else None

    try:
        result = await state.extract_uc.execute(url, timeout_seconds=timeout_seconds)
    except InvalidInputError as exc:
        return JSONResponse(status_code=400, content=present_error(str(exc)))
    except BrowserAcquisitionError as exc:
        log.error("extract_browser_unavailable", url=url, error=str(exc))
        return JSONResponse(status_code=500, content=present_error(str(exc)))

    if not result.success:
        return JSONResponse(status_code=404, content=present_error(result.error))

    return JSONResponse(content=present_success(result))
