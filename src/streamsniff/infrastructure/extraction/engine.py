"""Extraction engine: one browser session, one attempt.

An attempt walks through a fixed sequence of states::

    init -> instrumented -> navigating -> interacting -> settling -> done

Page-level trouble (slow navigation, detached elements, popups, body
read errors) is tolerated along the way.  The engine always returns an
``ExtractionResult``; only ``BrowserAcquisitionError`` escapes.
Cleanup runs on every path, including cancellation.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import Enum

import structlog
from playwright.async_api import BrowserContext, Page
from playwright_stealth import Stealth

from streamsniff.domain.entities.extraction import ExtractionRequest, ExtractionResult
from streamsniff.domain.exceptions import (
    CleanupFailure,
    NavigationFailure,
    NoStreamsFound,
)
from streamsniff.domain.ports.browser_pool import BrowserHandle, BrowserPoolPort
from streamsniff.infrastructure.browser.fingerprint import EXTRA_HTTP_HEADERS
from streamsniff.infrastructure.extraction.collector import CandidateCollector
from streamsniff.infrastructure.extraction.interaction import InteractionCampaign
from streamsniff.infrastructure.extraction.network import NetworkObserver
from streamsniff.infrastructure.extraction.settings import ExtractionSettings
from streamsniff.infrastructure.extraction.steps import run_step

log = structlog.get_logger(__name__)


class ExtractionState(Enum):
    INIT = "init"
    INSTRUMENTED = "instrumented"
    NAVIGATING = "navigating"
    INTERACTING = "interacting"
    SETTLING = "settling"
    DONE = "done"


class ExtractionEngine:
    """Drives a leased browser through one extraction attempt.

    Usage::

        engine = ExtractionEngine(pool, ExtractionSettings())
        result = await engine.run(request)
    """

    def __init__(
        self,
        pool: BrowserPoolPort,
        settings: ExtractionSettings | None = None,
        *,
        stealth: Stealth | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._pool = pool
        self._settings = settings or ExtractionSettings()
        if stealth is None and self._settings.stealth:
            stealth = Stealth()
        self._stealth = stealth
        self._sleep = sleep
        self._clock = clock

    async def run(self, request: ExtractionRequest) -> ExtractionResult:
        s = self._settings
        started = self._clock()
        handle = await self._pool.acquire()
        collector = CandidateCollector(request.target_url, request.user_agent)
        context: BrowserContext | None = None
        page: Page | None = None
        state = ExtractionState.INIT

        def advance(to: ExtractionState) -> ExtractionState:
            log.debug(
                "extraction_state",
                state=to.value,
                url=request.target_url,
                candidates=len(collector),
            )
            return to

        try:
            log.info(
                "extraction_started",
                url=request.target_url,
                temporary_browser=handle.temporary,
                viewport=f"{request.viewport.width}x{request.viewport.height}",
            )
            context = await handle.browser.new_context(
                user_agent=request.user_agent,
                viewport={
                    "width": request.viewport.width,
                    "height": request.viewport.height,
                },
                extra_http_headers=EXTRA_HTTP_HEADERS,
                ignore_https_errors=True,
            )
            if self._stealth is not None:
                await self._stealth.apply_stealth_async(context)
            page = await context.new_page()

            observer = NetworkObserver(
                collector,
                max_scan_bytes=s.max_scan_bytes,
                scan_console=s.scan_console,
            )
            await observer.attach(context, page)
            state = advance(ExtractionState.INSTRUMENTED)

            state = advance(ExtractionState.NAVIGATING)
            nav = await run_step(
                "navigation",
                page.goto(
                    request.target_url,
                    wait_until="domcontentloaded",
                    timeout=s.navigation_timeout_seconds * 1000,
                ),
                wrap=NavigationFailure,
            )
            if not nav.ok:
                log.info(
                    "navigation_partial",
                    url=request.target_url,
                    error=nav.error_text,
                )
            await self._sleep(s.initial_wait_seconds)

            state = advance(ExtractionState.INTERACTING)
            campaign = InteractionCampaign(
                page,
                collector,
                request.viewport,
                s,
                sleep=self._sleep,
                clock=self._clock,
            )
            await campaign.run()

            state = advance(ExtractionState.SETTLING)
            await self._sleep(s.final_wait_seconds)

            state = advance(ExtractionState.DONE)
            result = collector.to_result()
            log.info(
                "extraction_completed",
                url=request.target_url,
                stream_url=result.stream_url,
                candidates=len(result.candidates),
                subtitles=len(result.subtitles),
                clicks=campaign.clicks,
                blocked_requests=observer.blocked_requests,
                duration_ms=round((self._clock() - started) * 1000),
            )
            return result

        except NoStreamsFound as exc:
            log.info(
                "extraction_no_streams",
                url=request.target_url,
                duration_ms=round((self._clock() - started) * 1000),
            )
            return ExtractionResult.failure(str(exc), "no_streams_found")

        except Exception as exc:  # noqa: BLE001
            log.warning(
                "extraction_failed",
                url=request.target_url,
                state=state.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return ExtractionResult.failure(
                str(exc) or type(exc).__name__, "extraction_failed"
            )

        finally:
            await self._cleanup(handle, context, page)

    async def _cleanup(
        self,
        handle: BrowserHandle,
        context: BrowserContext | None,
        page: Page | None,
    ) -> None:
        """Close extra pages and the context, then hand the browser back."""
        outcomes = []
        if context is not None:
            for extra in list(context.pages):
                if extra is page:
                    continue
                outcomes.append(
                    await run_step("page_close", extra.close(), wrap=CleanupFailure)
                )
            outcomes.append(
                await run_step("context_close", context.close(), wrap=CleanupFailure)
            )

        outcomes.append(
            await run_step(
                "browser_release",
                self._pool.release(handle, temporary=handle.temporary),
                wrap=CleanupFailure,
            )
        )

        for outcome in outcomes:
            if not outcome.ok:
                log.warning(
                    "extraction_cleanup_failed",
                    step=outcome.step,
                    error=outcome.error_text,
                )
