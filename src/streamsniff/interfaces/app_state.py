"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from streamsniff.infrastructure.config import AppConfig

if TYPE_CHECKING:
    import asyncio

    from streamsniff.application.use_cases.extract_stream import ExtractStreamUseCase
    from streamsniff.infrastructure.admission import AdmissionQueue
    from streamsniff.infrastructure.browser.pool import BrowserPool
    from streamsniff.infrastructure.cache.result_cache import InMemoryResultCache
    from streamsniff.infrastructure.metrics import MetricsCollector


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    cache: InMemoryResultCache
    browser_pool: BrowserPool
    queue: AdmissionQueue

    # Metrics (in-memory counters)
    metrics: MetricsCollector

    # Application Services
    extract_uc: ExtractStreamUseCase

    # Background pool warm-up started at startup
    _warmup_task: asyncio.Task | None
