"""Tests for the uvicorn-compatible logging dictConfig."""

from __future__ import annotations

import structlog

from streamsniff.infrastructure.config.schema import AppConfig
from streamsniff.infrastructure.logging.setup import build_logging_config


class TestBuildLoggingConfig:
    def test_level_applied_to_uvicorn_and_root(self) -> None:
        cfg = build_logging_config(AppConfig(log_level="DEBUG"))

        assert cfg["loggers"]["uvicorn"]["level"] == "DEBUG"
        assert cfg["loggers"]["uvicorn.access"]["level"] == "DEBUG"
        assert cfg["root"] == {"handlers": ["default"], "level": "DEBUG"}

    def test_playwright_stays_quiet(self) -> None:
        cfg = build_logging_config(AppConfig(log_level="DEBUG"))

        assert cfg["loggers"]["playwright"]["level"] == "WARNING"

    def test_handlers_use_structlog_formatter(self) -> None:
        cfg = build_logging_config(AppConfig())

        assert cfg["handlers"]["default"]["formatter"] == "structlog"
        assert cfg["handlers"]["access"]["formatter"] == "structlog"

    def test_prod_renders_json(self) -> None:
        cfg = build_logging_config(AppConfig(environment="prod"))

        renderer = cfg["formatters"]["structlog"]["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)

    def test_dev_renders_console(self) -> None:
        cfg = build_logging_config(AppConfig(environment="dev"))

        renderer = cfg["formatters"]["structlog"]["processors"][-1]
        assert isinstance(renderer, structlog.dev.ConsoleRenderer)

    def test_base_config_not_mutated(self) -> None:
        build_logging_config(AppConfig(log_level="ERROR"))
        cfg = build_logging_config(AppConfig(log_level="INFO"))

        assert cfg["loggers"]["uvicorn"]["level"] == "INFO"
