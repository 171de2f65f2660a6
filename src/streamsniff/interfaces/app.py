"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from streamsniff.infrastructure.config import AppConfig
from streamsniff.interfaces.api.extract.router import router as extract_router
from streamsniff.interfaces.api.proxy.router import router as proxy_router
from streamsniff.interfaces.api.stats.router import router as stats_router
from streamsniff.interfaces.app_state import AppState
from streamsniff.interfaces.composition import lifespan

log = structlog.get_logger(__name__)

SERVICE_NAME = "streamsniff"
VERSION = "0.1.0"

# Every route is served at the root and under /api
ROUTE_PREFIXES: tuple[str, ...] = ("", "/api")


def service_descriptor() -> dict[str, object]:
    """Machine-readable summary of the HTTP surface."""
    return {
        "status": "online",
        "service": SERVICE_NAME,
        "version": VERSION,
        "description": "HLS/DASH manifest extraction through a real browser",
        "endpoints": {
            "extract": {
                "method": "GET",
                "path": "/api/extract",
                "params": {
                    "url": "Target page URL (required)",
                    "timeout": "Per-attempt deadline in ms (optional, clamped)",
                },
                "example": "/api/extract?url=https://example.com/video-page",
            },
            "proxy": {
                "method": "GET",
                "path": "/api/proxy",
                "params": {
                    "url": "Manifest or segment URL (required)",
                    "referer": "Referer header to send (optional)",
                    "origin": "Origin header to send (optional)",
                },
            },
            "stats": {"method": "GET", "path": "/api/stats"},
            "health": {"method": "GET", "path": "/api/health"},
        },
    }


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration only, no resource initialization.

    Resources (browser pool, cache, queue, HTTP client) are created in
    lifespan().
    """
    app = FastAPI(
        title="streamsniff",
        description="Stream manifest extraction service",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    # Preflight handling; plain responses get the header in log_requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    async def index() -> dict[str, object]:
        return service_descriptor()

    async def health() -> dict[str, str]:
        """Liveness probe; touches no resources."""
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    for prefix in ROUTE_PREFIXES:
        in_schema = prefix == ""
        for path, endpoint in (("/", index), ("/health", health)):
            app.add_api_route(
                f"{prefix}{path}",
                endpoint,
                methods=["GET"],
                tags=["meta"],
                include_in_schema=in_schema,
            )
        for router in (extract_router, proxy_router, stats_router):
            app.include_router(router, prefix=prefix, include_in_schema=in_schema)

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            response.headers.setdefault("Access-Control-Allow-Origin", "*")
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = response.status_code if response is not None else 500

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
