"""Browser-side instrumentation: request interception, response and console scanning.

All handlers feed ``ObservedNetworkEvent`` values into a
``CandidateCollector``.  Handlers never raise: Playwright invokes them
from its own dispatch loop, where an exception would only be printed.
"""

from __future__ import annotations

import structlog
from playwright.async_api import BrowserContext, ConsoleMessage, Page, Response, Route

from streamsniff.domain.entities.extraction import ObservedNetworkEvent
from streamsniff.domain.exceptions import CleanupFailure
from streamsniff.infrastructure.extraction.collector import CandidateCollector
from streamsniff.infrastructure.extraction.steps import run_step
from streamsniff.infrastructure.signals import (
    is_blocked_domain,
    is_manifest_content_type,
    is_script_or_json,
    looks_like_stream,
    scan_manifest_urls,
    should_scan_body,
)

log = structlog.get_logger(__name__)

BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font", "imageset"})


class NetworkObserver:
    """Wires collector-feeding listeners onto a context and its primary page.

    Usage::

        observer = NetworkObserver(collector, max_scan_bytes=2_000_000)
        page = await context.new_page()
        await observer.attach(context, page)
    """

    def __init__(
        self,
        collector: CandidateCollector,
        *,
        max_scan_bytes: int = 2_000_000,
        scan_console: bool = True,
    ) -> None:
        self._collector = collector
        self._max_scan_bytes = max_scan_bytes
        self._scan_console = scan_console
        self._primary: Page | None = None
        self.blocked_requests = 0
        self.popups_closed = 0

    async def attach(self, context: BrowserContext, page: Page) -> None:
        """Register every listener. *page* must already exist."""
        self._primary = page
        await context.route("**/*", self.handle_route)
        context.on("page", self.handle_new_page)
        page.on("response", self.handle_response)
        if self._scan_console:
            page.on("console", self.handle_console)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def handle_route(self, route: Route) -> None:
        """Abort heavy or tracking requests; offer the rest to the collector."""
        request = route.request
        url = request.url

        if request.resource_type in BLOCKED_RESOURCE_TYPES or is_blocked_domain(url):
            self.blocked_requests += 1
            await run_step("route_abort", route.abort())
            return

        self._collector.observe(
            ObservedNetworkEvent(
                url=url,
                channel="request",
                resource_type=request.resource_type,
                request_headers=dict(request.headers),
            )
        )
        await run_step("route_continue", route.continue_())

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def _body_too_large(self, headers: dict[str, str], content_type: str) -> bool:
        """Decide from the headers alone whether a body is worth reading.

        Playwright only hands out whole bodies, so ``max_scan_bytes`` can
        only be enforced up front through ``Content-Length``.  Bodies
        without one (chunked) are still buffered in full before the cut;
        of those only JSON and script payloads are read, generic
        ``text/*`` such as HTML documents is skipped.
        """
        raw = headers.get("content-length")
        if not raw:
            return not is_script_or_json(content_type)
        try:
            return int(raw) > self._max_scan_bytes
        except ValueError:
            return False

    async def handle_response(self, response: Response) -> None:
        url = response.url
        headers = response.headers
        content_type = headers.get("content-type", "")

        if looks_like_stream(url) or is_manifest_content_type(content_type):
            self._collector.observe(
                ObservedNetworkEvent(
                    url=url,
                    channel="response-header-match",
                    resource_type=response.request.resource_type,
                    content_type=content_type,
                    request_headers=dict(response.request.headers),
                )
            )

        if not should_scan_body(content_type) or self._body_too_large(
            headers, content_type
        ):
            return

        outcome = await run_step("response_body_read", response.text())
        if not outcome.ok or not outcome.value:
            return

        for hit in scan_manifest_urls(outcome.value[: self._max_scan_bytes]):
            self._collector.observe(
                ObservedNetworkEvent(
                    url=hit,
                    channel="response-body-scan",
                    content_type=content_type,
                    request_headers={"referer": url},
                )
            )

    # ------------------------------------------------------------------
    # Console & popups
    # ------------------------------------------------------------------

    def handle_console(self, message: ConsoleMessage) -> None:
        for hit in scan_manifest_urls(message.text):
            self._collector.observe(ObservedNetworkEvent(url=hit, channel="console-log"))

    async def handle_new_page(self, page: Page) -> None:
        """Close any page other than the primary one (popups, new tabs)."""
        if page is self._primary:
            return
        outcome = await run_step("popup_close", page.close(), wrap=CleanupFailure)
        if outcome.ok:
            self.popups_closed += 1
            log.debug("popup_closed")
