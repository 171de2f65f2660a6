"""Extract-stream use case: admission, cache, deadline-raced attempts, retry."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

import structlog

from streamsniff.domain.entities.extraction import (
    ExtractionRequest,
    ExtractionResult,
    Fingerprint,
)
from streamsniff.domain.exceptions import (
    BrowserAcquisitionError,
    ExtractionTimeout,
    InvalidInputError,
)
from streamsniff.domain.ports import (
    AdmissionQueuePort,
    AdmissionTicketPort,
    ExtractionEnginePort,
    ResultCachePort,
)

if TYPE_CHECKING:
    from streamsniff.infrastructure.metrics import MetricsCollector

log = structlog.get_logger(__name__)


def validate_target_url(url: str | None) -> str:
    """Return the stripped URL or raise ``InvalidInputError``.

    Only absolute ``http``/``https`` URLs with a host are accepted.
    """
    candidate = (url or "").strip()
    if not candidate:
        raise InvalidInputError("Missing url parameter")
    parts = urlsplit(candidate)
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        raise InvalidInputError(f"Invalid URL: {candidate}")
    return candidate


@dataclass(frozen=True)
class ExtractionPolicy:
    """Deadline and retry rules applied around the engine."""

    outer_timeout_seconds: float = 50.0
    min_timeout_seconds: float = 5.0
    max_timeout_seconds: float = 120.0
    retry_count: int = 1
    retry_pause_seconds: float = 1.0

    def deadline(self, requested_seconds: float | None = None) -> float:
        """Per-attempt deadline; overrides are clamped to the configured bounds."""
        if requested_seconds is None:
            return self.outer_timeout_seconds
        return min(
            max(requested_seconds, self.min_timeout_seconds),
            self.max_timeout_seconds,
        )


class ExtractStreamUseCase:
    """Finds the stream manifest of a video page.

    Flow:
        1. Validate the URL (before any browser work)
        2. Wait for an admission slot
        3. Return a cached result if one is fresh
        4. Run up to ``1 + retry_count`` engine attempts, each with a new
           fingerprint and raced against the outer deadline
        5. Cache the result when successful

    An attempt that loses the race is not cancelled: it keeps running so
    its browser gets released, and is awaited in ``aclose()``.  Until it
    finishes it keeps occupying the admission slot it started in, so a
    retry first has to win a new slot within the deadline.
    """

    def __init__(
        self,
        engine: ExtractionEnginePort,
        cache: ResultCachePort,
        queue: AdmissionQueuePort,
        fingerprint_factory: Callable[[], Fingerprint],
        *,
        policy: ExtractionPolicy | None = None,
        metrics: MetricsCollector | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._engine = engine
        self._cache = cache
        self._queue = queue
        self._fingerprint = fingerprint_factory
        self._policy = policy or ExtractionPolicy()
        self._metrics = metrics
        self._sleep = sleep
        self._abandoned: set[asyncio.Task[ExtractionResult]] = set()

    @property
    def abandoned_count(self) -> int:
        return len(self._abandoned)

    async def execute(
        self, url: str | None, *, timeout_seconds: float | None = None
    ) -> ExtractionResult:
        """Extract the stream for *url*.

        Returns:
            A successful or failed ``ExtractionResult``; failures carry
            ``error_kind`` (``no_streams_found``, ``extraction_timeout``,
            ``extraction_failed``).

        Raises:
            InvalidInputError: *url* is missing or not an http(s) URL.
            BrowserAcquisitionError: no browser could be obtained.
        """
        target = validate_target_url(url)
        deadline = self._policy.deadline(timeout_seconds)
        async with self._queue.admitted() as ticket:
            return await self._extract(target, deadline, ticket)

    async def _extract(
        self, target: str, deadline: float, ticket: AdmissionTicketPort
    ) -> ExtractionResult:
        started = time.perf_counter_ns()

        cached = await self._cache.get(target)
        if cached is not None:
            log.info("extraction_cache_hit", url=target)
            self._record(started, cached, cache_hit=True)
            return cached

        attempts = 1 + self._policy.retry_count
        attempt = 1
        result = await self._attempt(target, deadline, ticket, started)

        while not result.success and attempt < attempts:
            attempt += 1
            log.info(
                "extraction_retry",
                url=target,
                attempt=attempt,
                previous_error=result.error,
            )
            if self._metrics is not None:
                self._metrics.record_retry()
            await self._sleep(self._policy.retry_pause_seconds)

            # A timed-out attempt kept our slot; wait for another one.
            try:
                await asyncio.wait_for(ticket.renew(), timeout=deadline)
            except TimeoutError:
                log.warning("extraction_retry_not_admitted", url=target)
                break
            result = await self._attempt(target, deadline, ticket, started)

        if result.success:
            await self._cache.set(target, result)
        else:
            log.info(
                "extraction_gave_up",
                url=target,
                attempts=attempt,
                error=result.error,
                error_kind=result.error_kind,
            )
        self._record(started, result)
        return result

    async def _attempt(
        self,
        target: str,
        deadline: float,
        ticket: AdmissionTicketPort,
        started: int,
    ) -> ExtractionResult:
        request = ExtractionRequest.build(target, self._fingerprint(), deadline)
        try:
            return await self._attempt_with_deadline(request, ticket)
        except ExtractionTimeout as exc:
            return ExtractionResult.failure(str(exc), "extraction_timeout")
        except BrowserAcquisitionError:
            if self._metrics is not None:
                self._metrics.record_browser_error()
                self._metrics.record_extraction(
                    time.perf_counter_ns() - started,
                    success=False,
                    error_kind="extraction_failed",
                )
            raise

    async def _attempt_with_deadline(
        self, request: ExtractionRequest, ticket: AdmissionTicketPort
    ) -> ExtractionResult:
        """Race one engine attempt against ``request.deadline_seconds``.

        A task that loses the race takes over the caller's admission slot
        and frees it when it finishes.

        Raises:
            ExtractionTimeout: the deadline passed first.
        """
        task = asyncio.create_task(self._engine.run(request))
        try:
            done, _ = await asyncio.wait({task}, timeout=request.deadline_seconds)
        except asyncio.CancelledError:
            self._abandon(task, ticket)
            raise

        if task in done:
            return task.result()

        self._abandon(task, ticket)
        log.warning(
            "extraction_timeout",
            url=request.target_url,
            deadline_seconds=request.deadline_seconds,
        )
        raise ExtractionTimeout(
            f"Extraction timed out after {request.deadline_seconds:g}s"
        )

    def _abandon(
        self, task: asyncio.Task[ExtractionResult], ticket: AdmissionTicketPort
    ) -> None:
        self._abandoned.add(task)
        task.add_done_callback(self._reap)
        ticket.hand_off(task)

    def _reap(self, task: asyncio.Task[ExtractionResult]) -> None:
        self._abandoned.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.debug("abandoned_extraction_failed", error=str(exc))
        else:
            log.debug("abandoned_extraction_finished", success=task.result().success)

    def _record(
        self, started: int, result: ExtractionResult, *, cache_hit: bool = False
    ) -> None:
        if self._metrics is None:
            return
        self._metrics.record_extraction(
            time.perf_counter_ns() - started,
            success=result.success,
            error_kind=result.error_kind,
            cache_hit=cache_hit,
        )

    async def aclose(self) -> None:
        """Wait for abandoned attempts so their browsers are released."""
        if not self._abandoned:
            return
        log.info("awaiting_abandoned_extractions", count=len(self._abandoned))
        await asyncio.gather(*list(self._abandoned), return_exceptions=True)
