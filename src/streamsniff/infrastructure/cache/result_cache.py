"""In-memory TTL cache of successful extraction results.

Keys come from ``cache_key``: scheme and host are lower-cased and the
fragment dropped, while path, trailing slash and query order are kept
as requested.  Entries live in a ``cachetools.TTLCache``; expired ones
are skipped on ``get`` and purged by a periodic background sweep.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from contextlib import suppress
from urllib.parse import urlsplit, urlunsplit

import structlog
from cachetools import TTLCache

from streamsniff.domain.entities.extraction import ExtractionResult

log = structlog.get_logger(__name__)


def cache_key(url: str) -> str:
    """Cache key for a requested page URL.

    >>> cache_key("HTTPS://Example.COM/Watch?id=1#t=30")
    'https://example.com/Watch?id=1'
    """
    parts = urlsplit(url.strip())
    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, "")
    )


class InMemoryResultCache:
    """``cachetools.TTLCache``-backed result cache with a fixed TTL.

    Usage::

        cache = InMemoryResultCache(ttl_seconds=1800)
        cache.start()                      # background sweep
        await cache.set(url, result)
        hit = await cache.get(url)
        await cache.aclose()

    The clock is injectable so expiry can be tested without sleeping.
    When ``max_entries`` is reached the least recently used entry goes.
    """

    def __init__(
        self,
        ttl_seconds: float = 1800.0,
        sweep_interval_seconds: float = 60.0,
        *,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl_seconds
        self._sweep_interval = sweep_interval_seconds
        self._entries: TTLCache[str, ExtractionResult] = TTLCache(
            maxsize=max_entries, ttl=ttl_seconds, timer=clock
        )
        self._sweeper: asyncio.Task[None] | None = None

    async def get(self, key: str) -> ExtractionResult | None:
        key = cache_key(key)
        result = self._entries.get(key)
        log.debug("cache_get", key=key, hit=result is not None)
        return result

    async def set(self, key: str, result: ExtractionResult) -> None:
        if not result.success:
            log.debug("cache_set_skipped", key=key, error=result.error)
            return
        key = cache_key(key)
        self._entries[key] = result
        log.debug("cache_set", key=key, ttl=self.ttl)

    async def sweep(self) -> int:
        """Drop every expired entry; return how many were removed."""
        removed = len(self._entries.expire())
        if removed:
            log.debug("cache_swept", removed=removed, remaining=len(self._entries))
        return removed

    async def clear(self) -> None:
        self._entries.clear()
        log.info("cache_cleared")

    def size(self) -> int:
        """Number of live entries."""
        self._entries.expire()
        return len(self._entries)

    # ------------------------------------------------------------------
    # Background sweep
    # ------------------------------------------------------------------

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            await self.sweep()

    def start(self) -> None:
        """Start the periodic sweep (no-op if already running)."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())
            log.debug("cache_sweeper_started", interval=self._sweep_interval)

    async def aclose(self) -> None:
        """Stop the sweep task."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None
