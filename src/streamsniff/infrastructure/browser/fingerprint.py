"""User-agent and viewport pools for per-attempt fingerprint randomization."""

from __future__ import annotations

import random

from streamsniff.domain.entities.extraction import Fingerprint, Viewport

USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:123.0) Gecko/20100101 Firefox/123.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
)

VIEWPORTS: tuple[Viewport, ...] = (
    Viewport(1920, 1080),
    Viewport(1366, 768),
    Viewport(1536, 864),
    Viewport(1440, 900),
)

EXTRA_HTTP_HEADERS: dict[str, str] = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def pick_fingerprint(rng: random.Random | None = None) -> Fingerprint:
    """Pick a random user-agent and viewport."""
    chooser = rng or random
    return Fingerprint(
        user_agent=chooser.choice(USER_AGENTS),
        viewport=chooser.choice(VIEWPORTS),
    )
