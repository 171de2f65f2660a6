"""Playback relay: fetch a manifest (or segment) with injected headers.

Players often cannot set ``Referer`` / ``Origin`` themselves; the relay
fetches the resource server-side with those headers and passes the
upstream status, content type and body through unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog

from streamsniff.domain.exceptions import RelayError

log = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
)
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class RelayResponse:
    """Upstream response as handed back to the client."""

    status_code: int
    content_type: str
    body: bytes


def build_relay_headers(
    *,
    referer: str | None = None,
    origin: str | None = None,
    user_agent: str | None = None,
) -> dict[str, str]:
    """Request headers for the upstream fetch.

    >>> build_relay_headers(referer="https://a.example/")["Referer"]
    'https://a.example/'
    """
    return {
        "User-Agent": user_agent or DEFAULT_USER_AGENT,
        "Referer": referer or "",
        "Origin": origin or "",
        "Accept": "*/*",
        "Accept-Language": "en-US,en;q=0.9",
    }


async def relay_stream(
    http_client: httpx.AsyncClient,
    url: str,
    *,
    referer: str | None = None,
    origin: str | None = None,
    user_agent: str | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> RelayResponse:
    """Fetch *url* with playback headers and return the upstream response.

    Non-2xx upstream statuses are passed through, not raised.

    Raises:
        RelayError: the upstream could not be reached (DNS, connect,
            timeout, protocol errors).
    """
    headers = build_relay_headers(referer=referer, origin=origin, user_agent=user_agent)
    try:
        resp = await http_client.get(
            url,
            headers=headers,
            follow_redirects=True,
            timeout=timeout,
        )
    except httpx.HTTPError as exc:
        log.warning("relay_fetch_failed", url=url[:120], error=str(exc))
        raise RelayError(f"Upstream fetch failed: {exc}") from exc

    content_type = resp.headers.get("content-type", "application/vnd.apple.mpegurl")
    log.debug(
        "relay_fetched",
        url=url[:120],
        status=resp.status_code,
        content_type=content_type,
        bytes=len(resp.content),
    )
    return RelayResponse(
        status_code=resp.status_code,
        content_type=content_type,
        body=resp.content,
    )
