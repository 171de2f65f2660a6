"""Click campaign that coaxes a page into starting playback.

Loop bounded by both an attempt count and a wall-clock window.  Each
attempt clicks the first visible play control (or the viewport centre),
then checks whether a master-playlist candidate has shown up.  Finding
one ends the campaign early, which is where most of the latency win of
an extraction comes from.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

import structlog
from playwright.async_api import Frame, Page

from streamsniff.domain.entities.extraction import CandidateStream, Viewport
from streamsniff.infrastructure.extraction.collector import CandidateCollector
from streamsniff.infrastructure.extraction.settings import ExtractionSettings
from streamsniff.infrastructure.extraction.steps import run_step
from streamsniff.infrastructure.signals import is_blocked_domain

log = structlog.get_logger(__name__)

# Probed in order; the first visible match is clicked.
PLAY_SELECTORS: tuple[str, ...] = (
    ".play-button",
    ".play-btn",
    ".play",
    "#play",
    'button[class*="play"]',
    'div[class*="play"]',
    '[aria-label*="play" i]',
    ".vjs-big-play-button",
    ".jw-icon-display",
    ".plyr__control--overlaid",
    '[data-plyr="play"]',
    "video",
    ".player",
    "#player",
)

# Offsets from the viewport centre, as fractions of width / height.
AGGRESSIVE_GRID: tuple[tuple[float, float], ...] = (
    (-0.15, -0.15),
    (0.15, -0.15),
    (-0.15, 0.15),
    (0.15, 0.15),
    (0.0, 0.2),
)

_MIN_CONTROL_SIZE = 10  # px

Sleep = Callable[[float], Awaitable[None]]


class InteractionCampaign:
    """Runs the bounded click loop on one page."""

    def __init__(
        self,
        page: Page,
        collector: CandidateCollector,
        viewport: Viewport,
        settings: ExtractionSettings,
        *,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._page = page
        self._collector = collector
        self._viewport = viewport
        self._settings = settings
        self._sleep = sleep
        self._clock = clock
        self.attempts = 0
        self.clicks = 0

    async def run(self) -> CandidateStream | None:
        """Click until a master playlist appears or the budget runs out.

        Returns the master candidate that triggered an early exit, or
        ``None`` when the loop ran out of attempts or time.
        """
        s = self._settings
        started = self._clock()

        while (
            self.attempts < s.max_click_attempts
            and self._clock() - started < s.detection_window_seconds
        ):
            gesture_ok = await self._attempt()

            master = self._collector.master_candidate()
            if master is not None:
                log.info(
                    "extraction_early_exit",
                    url=master.url[:120],
                    attempts=self.attempts + 1,
                )
                await self._sleep(s.early_exit_delay_seconds)
                return master

            if not gesture_ok:
                # Failed gesture: pause, do not count it as an attempt
                await self._sleep(s.click_error_pause_seconds)
                continue

            self.attempts += 1
            await self._sleep(s.click_delay_seconds)

        log.debug("interaction_budget_exhausted", attempts=self.attempts)
        return None

    async def _attempt(self) -> bool:
        """One gesture. False when even the fallback centre click failed."""
        clicked = await self._click_play_control(self._page)
        if not clicked:
            x, y = self._viewport.center
            outcome = await run_step("center_click", self._page.mouse.click(x, y))
            if not outcome.ok:
                return False
            self.clicks += 1
            await self._sleep(self._settings.center_click_pause_seconds)

        if self._settings.aggressive:
            await self._grid_clicks()
            await self._descend_into_frame()
        return True

    async def _click_play_control(self, frame: Page | Frame) -> bool:
        for selector in PLAY_SELECTORS:
            outcome = await run_step(
                "probe_selector", self._try_click(frame, selector)
            )
            if outcome.ok and outcome.value:
                return True
        return False

    async def _try_click(self, frame: Page | Frame, selector: str) -> bool:
        element = await frame.query_selector(selector)
        if element is None:
            return False
        box = await element.bounding_box()
        if (
            not box
            or box["width"] <= _MIN_CONTROL_SIZE
            or box["height"] <= _MIN_CONTROL_SIZE
        ):
            return False
        await element.click()
        self.clicks += 1
        log.debug("play_control_clicked", selector=selector)
        await self._sleep(self._settings.post_click_pause_seconds)
        return True

    async def _grid_clicks(self) -> None:
        cx, cy = self._viewport.center
        for dx, dy in AGGRESSIVE_GRID:
            x = cx + dx * self._viewport.width
            y = cy + dy * self._viewport.height
            outcome = await run_step("grid_click", self._page.mouse.click(x, y))
            if outcome.ok:
                self.clicks += 1

    def _first_child_frame(self) -> Frame | None:
        main = self._page.main_frame
        for frame in self._page.frames:
            if frame is main:
                continue
            url = frame.url
            if not url or url == "about:blank" or is_blocked_domain(url):
                continue
            return frame
        return None

    async def _descend_into_frame(self) -> None:
        """Probe the play selectors one level down, in the first usable iframe."""
        frame = self._first_child_frame()
        if frame is None:
            return
        outcome = await run_step("frame_descent", self._click_play_control(frame))
        if outcome.ok and outcome.value:
            log.debug("frame_play_control_clicked", frame_url=frame.url[:120])
