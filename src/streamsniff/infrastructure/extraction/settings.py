"""Timing and behaviour knobs for a single extraction attempt."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExtractionSettings:
    """Per-attempt engine settings (seconds unless noted)."""

    navigation_timeout_seconds: float = 15.0
    initial_wait_seconds: float = 2.0
    detection_window_seconds: float = 10.0
    max_click_attempts: int = 6
    click_delay_seconds: float = 0.8
    early_exit_delay_seconds: float = 1.0
    final_wait_seconds: float = 1.5

    # Pauses inside the click loop
    post_click_pause_seconds: float = 0.4
    center_click_pause_seconds: float = 0.3
    click_error_pause_seconds: float = 0.5

    aggressive: bool = False
    scan_console: bool = True
    max_scan_bytes: int = 2_000_000  # bytes
    stealth: bool = True
