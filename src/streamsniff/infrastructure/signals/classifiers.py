"""Stream URL classifiers: pure functions without state.

Three distinct signals:

- ``looks_like_stream``: broad "is this a media stream at all" check.
- ``is_master_playlist``: narrow keyword check used only for early exit.
- ``stream_priority``: additive score used for the final ranking.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

_STREAM_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        # Manifest / container extensions
        r"\.m3u8(?:[?#]|$)",
        r"\.mpd(?:[?#]|$)",
        r"\.mp4(?:[?#]|$)",
        r"\.webm(?:[?#]|$)",
        # Path keywords in front of an HLS manifest
        r"(?:master|index|playlist|manifest|chunklist|hls|live|video).*\.m3u8",
        # Platform CDN hints
        r"googlevideo\.com/videoplayback",
        r"\.isml?/manifest",
        r"/manifest\(format=(?:m3u8|mpd)",
    )
)

_MASTER_KEYWORDS: tuple[str, ...] = ("master", "index", "manifest", "playlist", "main")

# (substring, score); bonuses are summed
_PRIORITY_BONUSES: tuple[tuple[str, int], ...] = (
    (".m3u8", 10),
    (".mpd", 8),
    ("master", 5),
    ("index", 4),
    ("manifest", 3),
    ("playlist", 3),
    (".mp4", 2),
)
_SEGMENT_RE = re.compile(r"segment|chunk|\.ts\?")
_SEGMENT_PENALTY = -5

BLOCKED_DOMAINS: tuple[str, ...] = (
    "googlesyndication.com",
    "googleadservices.com",
    "google-analytics.com",
    "googletagmanager.com",
    "doubleclick.net",
    "facebook.net",
    "amazon-adsystem.com",
    "popads.net",
    "propellerads.com",
    "hotjar.com",
    "scorecardresearch.com",
    "adsterra.com",
    "exoclick.com",
    "juicyads.com",
    "criteo.com",
    "taboola.com",
    "outbrain.com",
    "mixpanel.com",
)


def looks_like_stream(url: str) -> bool:
    """True if *url* matches any manifest/container/CDN stream pattern."""
    return any(p.search(url) for p in _STREAM_PATTERNS)


def is_master_playlist(url: str) -> bool:
    """True if *url* carries a top-level playlist keyword."""
    lowered = url.lower()
    return any(kw in lowered for kw in _MASTER_KEYWORDS)


def stream_priority(url: str) -> int:
    """Score *url* for ranking; segments always lose against manifests.

    >>> stream_priority("https://cdn.example.com/hls/master.m3u8")
    15
    >>> stream_priority("https://cdn.example.com/seg1.ts?x=1")
    -5
    """
    lowered = url.lower()
    score = sum(bonus for needle, bonus in _PRIORITY_BONUSES if needle in lowered)
    if _SEGMENT_RE.search(lowered):
        score += _SEGMENT_PENALTY
    return score


def _host_of(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_blocked_domain(url: str) -> bool:
    """True if the URL's host belongs to a known ad/tracker/analytics domain.

    Coarse substring match: false positives are acceptable here.
    """
    host = _host_of(url) or url.lower()
    return any(domain in host for domain in BLOCKED_DOMAINS)
