"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "streamsniff",
    "environment": "dev",
    "playwright": {
        "headless": True,
        "stealth": True,
    },
    "pool": {
        "size": 2,
        "init_timeout_seconds": 30.0,
    },
    "queue": {
        "max_concurrent": 2,
    },
    "cache": {
        "ttl_seconds": 1800,
        "sweep_interval_seconds": 60,
    },
    "extraction": {
        "navigation_timeout_seconds": 15.0,
        "initial_wait_seconds": 2.0,
        "detection_window_seconds": 10.0,
        "max_click_attempts": 6,
        "click_delay_seconds": 0.8,
        "early_exit_delay_seconds": 1.0,
        "final_wait_seconds": 1.5,
        "outer_timeout_seconds": 50.0,
        "min_timeout_seconds": 5.0,
        "max_timeout_seconds": 120.0,
        "retry_count": 1,
        "retry_pause_seconds": 1.0,
        "aggressive": False,
        "scan_console": True,
        "max_scan_bytes": 2_000_000,
    },
    "proxy": {
        "timeout_seconds": 30.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
