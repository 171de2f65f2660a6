"""Pre-warmed Chromium pool for extraction runs.

Keeps up to ``size`` long-lived browser processes ("managed" browsers)
and leases them to one extraction at a time.  When every managed browser
is busy, a temporary browser is launched for the caller and closed on
release, so burst load never grows the pool itself.

Warm-up launches all browsers concurrently; partial failures are logged
and the pool simply runs with fewer instances.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable

import structlog
from playwright.async_api import Browser, Playwright, async_playwright

from streamsniff.domain.exceptions import BrowserAcquisitionError
from streamsniff.domain.ports.browser_pool import BrowserHandle

log = structlog.get_logger(__name__)

DEFAULT_LAUNCH_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--disable-web-security",
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-blink-features=AutomationControlled",
)

Launcher = Callable[[], Awaitable[Browser]]


class BrowserPool:
    """Leases pre-warmed browsers; overflow demand gets temporary ones.

    Usage::

        pool = BrowserPool(size=2, headless=True)
        await pool.initialize()          # optional, acquire() warms up lazily

        handle = await pool.acquire()
        try:
            ...
        finally:
            await pool.release(handle, temporary=handle.temporary)

        await pool.shutdown()

    Parameters:
        size: Maximum number of managed browsers.
        headless: Run Chromium headless.
        init_timeout_seconds: Upper bound for ``acquire()`` waiting on a
            warm-up that is still in progress.
        launcher: Optional coroutine factory returning a browser. Replaces
            the Playwright launch (used by tests).
    """

    def __init__(
        self,
        *,
        size: int = 2,
        headless: bool = True,
        init_timeout_seconds: float = 30.0,
        launch_args: tuple[str, ...] = DEFAULT_LAUNCH_ARGS,
        launcher: Launcher | None = None,
    ) -> None:
        self.size = size
        self._headless = headless
        self._init_timeout = init_timeout_seconds
        self._launch_args = list(launch_args)
        self._launcher = launcher
        self._pw: Playwright | None = None
        self._driver_lock = asyncio.Lock()
        self._managed: list[Browser] = []
        self._available: deque[Browser] = deque()
        self._warmup_task: asyncio.Task[None] | None = None
        self._temporary_in_flight = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def managed_count(self) -> int:
        return len(self._managed)

    @property
    def available_count(self) -> int:
        return len(self._available)

    @property
    def is_initializing(self) -> bool:
        return self._warmup_task is not None and not self._warmup_task.done()

    def is_managed(self, browser: Browser) -> bool:
        return any(b is browser for b in self._managed)

    def snapshot(self) -> dict[str, int]:
        """Return a JSON-serializable view of pool occupancy."""
        return {
            "size": self.size,
            "managed": len(self._managed),
            "available": len(self._available),
            "temporary_in_flight": self._temporary_in_flight,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _ensure_driver(self) -> Playwright:
        """Start the Playwright driver once (double-check lock)."""
        if self._pw is not None:
            return self._pw
        async with self._driver_lock:
            if self._pw is None:
                self._pw = await async_playwright().start()
                log.info("playwright_driver_started")
            return self._pw

    async def _launch(self) -> Browser:
        if self._launcher is not None:
            return await self._launcher()
        pw = await self._ensure_driver()
        return await pw.chromium.launch(
            headless=self._headless,
            args=self._launch_args,
        )

    async def _warm_up(self) -> None:
        missing = self.size - len(self._managed)
        if missing <= 0:
            return
        log.info("browser_pool_initializing", size=self.size, launching=missing)

        results = await asyncio.gather(
            *(self._launch() for _ in range(missing)),
            return_exceptions=True,
        )
        for index, outcome in enumerate(results, start=1):
            if isinstance(outcome, BaseException):
                log.warning(
                    "browser_pool_launch_failed",
                    slot=index,
                    error=str(outcome),
                )
                continue
            self._managed.append(outcome)
            self._available.append(outcome)

        log.info(
            "browser_pool_initialized",
            managed=len(self._managed),
            size=self.size,
        )

    async def initialize(self) -> None:
        """Launch the managed browsers; concurrent callers share one warm-up."""
        if self._warmup_task is None or (
            self._warmup_task.done() and not self._managed
        ):
            self._warmup_task = asyncio.create_task(self._warm_up())
        await asyncio.shield(self._warmup_task)

    async def _wait_until_warm(self) -> None:
        try:
            await asyncio.wait_for(self.initialize(), timeout=self._init_timeout)
        except TimeoutError:
            log.warning(
                "browser_pool_init_wait_timeout",
                timeout=self._init_timeout,
                managed=len(self._managed),
            )

    async def shutdown(self) -> None:
        """Close every managed browser and stop the driver (idempotent)."""
        if self._warmup_task is not None and not self._warmup_task.done():
            try:
                await self._warmup_task
            except Exception:  # noqa: BLE001
                log.debug("browser_pool_warmup_error_on_shutdown", exc_info=True)

        for browser in self._managed:
            await self._close_quietly(browser)
        self._managed.clear()
        self._available.clear()
        self._warmup_task = None

        if self._pw is not None:
            try:
                await self._pw.stop()
            except Exception:  # noqa: BLE001
                log.warning("playwright_driver_stop_error", exc_info=True)
            self._pw = None
        log.info("browser_pool_shut_down")

    # ------------------------------------------------------------------
    # Leasing
    # ------------------------------------------------------------------

    def _discard(self, browser: Browser) -> None:
        self._managed = [b for b in self._managed if b is not browser]

    async def acquire(self) -> BrowserHandle:
        """Lease a connected browser.

        Order of preference: an available managed browser (dead ones are
        replaced transparently), a fresh managed browser while the pool is
        below ``size``, and finally a temporary browser.

        Raises:
            BrowserAcquisitionError: every launch attempt failed.
        """
        await self._wait_until_warm()

        while self._available:
            browser = self._available.popleft()
            if browser.is_connected():
                return BrowserHandle(browser)

            log.warning("browser_pool_disconnected_browser_dropped")
            self._discard(browser)
            try:
                replacement = await self._launch()
            except Exception as exc:  # noqa: BLE001
                log.warning("browser_pool_replacement_failed", error=str(exc))
                continue
            # A concurrent top-up may have refilled the slot meanwhile
            if len(self._managed) < self.size:
                self._managed.append(replacement)
                log.info("browser_pool_browser_replaced", managed=len(self._managed))
                return BrowserHandle(replacement)
            self._temporary_in_flight += 1
            return BrowserHandle(replacement, temporary=True)

        if len(self._managed) < self.size:
            try:
                browser = await self._launch()
            except Exception as exc:  # noqa: BLE001
                log.warning("browser_pool_top_up_failed", error=str(exc))
            else:
                if len(self._managed) < self.size:
                    self._managed.append(browser)
                    log.info("browser_pool_topped_up", managed=len(self._managed))
                    return BrowserHandle(browser)
                self._temporary_in_flight += 1
                return BrowserHandle(browser, temporary=True)

        log.info("browser_pool_exhausted_launching_temporary")
        try:
            browser = await self._launch()
        except Exception as exc:
            log.error("browser_acquisition_failed", error=str(exc))
            raise BrowserAcquisitionError(
                f"Could not launch a browser: {exc}"
            ) from exc

        self._temporary_in_flight += 1
        return BrowserHandle(browser, temporary=True)

    async def release(self, handle: BrowserHandle, temporary: bool = False) -> None:
        """Return a managed browser to the pool, or close a temporary one.

        Passing ``temporary=True`` for a managed browser retires it: it is
        closed and removed from the managed set.
        """
        browser = handle.browser

        if handle.temporary:
            self._temporary_in_flight = max(0, self._temporary_in_flight - 1)
            await self._close_quietly(browser)
            return

        if temporary or not self.is_managed(browser):
            self._discard(browser)
            await self._close_quietly(browser)
            return

        if any(b is browser for b in self._available):
            return
        self._available.append(browser)

    async def _close_quietly(self, browser: Browser) -> None:
        try:
            await browser.close()
        except Exception:  # noqa: BLE001
            log.debug("browser_close_error", exc_info=True)
