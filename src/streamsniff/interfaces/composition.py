"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from streamsniff.application.use_cases.extract_stream import (
    ExtractionPolicy,
    ExtractStreamUseCase,
)
from streamsniff.infrastructure.admission import AdmissionQueue
from streamsniff.infrastructure.browser.fingerprint import pick_fingerprint
from streamsniff.infrastructure.browser.pool import BrowserPool
from streamsniff.infrastructure.cache.result_cache import InMemoryResultCache
from streamsniff.infrastructure.config.schema import AppConfig
from streamsniff.infrastructure.extraction.engine import ExtractionEngine
from streamsniff.infrastructure.extraction.settings import ExtractionSettings
from streamsniff.infrastructure.metrics import MetricsCollector
from streamsniff.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_extraction_settings(config: AppConfig) -> ExtractionSettings:
    """Map the validated config onto the engine's settings."""
    ex = config.extraction
    return ExtractionSettings(
        navigation_timeout_seconds=ex.navigation_timeout_seconds,
        initial_wait_seconds=ex.initial_wait_seconds,
        detection_window_seconds=ex.detection_window_seconds,
        max_click_attempts=ex.max_click_attempts,
        click_delay_seconds=ex.click_delay_seconds,
        early_exit_delay_seconds=ex.early_exit_delay_seconds,
        final_wait_seconds=ex.final_wait_seconds,
        aggressive=ex.aggressive,
        scan_console=ex.scan_console,
        max_scan_bytes=ex.max_scan_bytes,
        stealth=config.playwright_stealth,
    )


def build_extraction_policy(config: AppConfig) -> ExtractionPolicy:
    ex = config.extraction
    return ExtractionPolicy(
        outer_timeout_seconds=ex.outer_timeout_seconds,
        min_timeout_seconds=ex.min_timeout_seconds,
        max_timeout_seconds=ex.max_timeout_seconds,
        retry_count=ex.retry_count,
        retry_pause_seconds=ex.retry_pause_seconds,
    )


async def _warm_pool(pool: BrowserPool) -> None:
    try:
        await pool.initialize()
    except Exception:  # noqa: BLE001
        # acquire() retries the warm-up on demand
        log.error("browser_pool_warmup_failed", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Metrics
        2. Result cache (+ background sweep)
        3. Browser pool (warm-up runs in the background)
        4. Admission queue
        5. Extraction engine + use case
        6. HTTP client for the proxy relay
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) Metrics
    state.metrics = MetricsCollector()

    # 2) Result cache
    state.cache = InMemoryResultCache(
        ttl_seconds=config.cache_ttl_seconds,
        sweep_interval_seconds=config.cache_sweep_interval_seconds,
    )
    state.cache.start()
    log.info(
        "result_cache_initialized",
        ttl_seconds=config.cache_ttl_seconds,
        sweep_interval_seconds=config.cache_sweep_interval_seconds,
    )

    # 3) Browser pool; startup does not wait for full capacity
    state.browser_pool = BrowserPool(
        size=config.pool_size,
        headless=config.playwright_headless,
        init_timeout_seconds=config.pool_init_timeout_seconds,
    )
    state._warmup_task = asyncio.create_task(_warm_pool(state.browser_pool))
    log.info("browser_pool_configured", size=config.pool_size)

    # 4) Admission queue
    state.queue = AdmissionQueue(max_concurrent=config.queue_max_concurrent)
    log.info("admission_queue_initialized", capacity=config.queue_max_concurrent)

    # 5) Engine + use case
    engine = ExtractionEngine(state.browser_pool, build_extraction_settings(config))
    state.extract_uc = ExtractStreamUseCase(
        engine=engine,
        cache=state.cache,
        queue=state.queue,
        fingerprint_factory=pick_fingerprint,
        policy=build_extraction_policy(config),
        metrics=state.metrics,
    )
    log.info(
        "extract_use_case_initialized",
        retry_count=config.extraction.retry_count,
        outer_timeout_seconds=config.extraction.outer_timeout_seconds,
    )

    # 6) HTTP client (proxy relay)
    state.http_client = httpx.AsyncClient(
        timeout=config.proxy_timeout_seconds,
        follow_redirects=True,
    )
    log.info("http_client_initialized")

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.extract_uc.aclose()
        log.info("abandoned_extractions_drained")

        if state._warmup_task is not None:
            await state._warmup_task

        await state.browser_pool.shutdown()
        log.info("browser_pool_closed")

        await state.http_client.aclose()
        log.info("http_client_closed")

        await state.cache.aclose()
        log.info("cache_closed")

        log.info("app_shutdown_complete")
