"""Tests for fingerprint randomization."""

from __future__ import annotations

import random

from streamsniff.infrastructure.browser.fingerprint import (
    USER_AGENTS,
    VIEWPORTS,
    pick_fingerprint,
)


class TestPickFingerprint:
    def test_values_come_from_pools(self) -> None:
        for _ in range(20):
            fp = pick_fingerprint()
            assert fp.user_agent in USER_AGENTS
            assert fp.viewport in VIEWPORTS

    def test_seeded_rng_is_reproducible(self) -> None:
        first = pick_fingerprint(random.Random(7))
        second = pick_fingerprint(random.Random(7))
        assert first == second
