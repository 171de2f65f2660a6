"""JSON shapes of the /extract endpoint."""

from __future__ import annotations

from typing import Any

from streamsniff.domain.entities.extraction import ExtractionResult


def present_success(result: ExtractionResult) -> dict[str, Any]:
    """Render a successful result.

    ``data.headers`` always carries ``Referer``, ``User-Agent`` and
    ``Origin``; ``all_streams`` lists every candidate, best first.
    """
    return {
        "success": True,
        "data": {
            "stream_url": result.stream_url,
            "headers": result.headers,
            "subtitles": [s.summary() for s in result.subtitles],
        },
        "all_streams": [c.summary() for c in result.candidates],
    }


def present_error(message: str | None) -> dict[str, Any]:
    return {"success": False, "error": message or "Extraction failed"}
