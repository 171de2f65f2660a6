"""Subtitle URL heuristics and language inference."""

from __future__ import annotations

import re

_SUBTITLE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\.vtt(?:\?|$)",
        r"\.srt(?:\?|$)",
        r"\.ass(?:\?|$)",
        r"\.ssa(?:\?|$)",
        r"subtitle.*\.vtt",
        r"caption.*\.vtt",
        r"/vtt/",
        r"/subtitles/",
        r"/captions/",
    )
)

_SUBTITLE_EXTENSION_RE = re.compile(r"\.(?:vtt|srt|ass|ssa)(?:\?|$)", re.IGNORECASE)
_TRACKER_MARKERS: tuple[str, ...] = ("analytics", "tracking", "pixel", "beacon")
_MIN_SUBTITLE_URL_LENGTH = 20

UNKNOWN_LANGUAGE = "Unknown"

# Scanned in order; the first hit wins.
LANGUAGE_TOKENS: tuple[tuple[str, str], ...] = (
    ("en", "English"),
    ("eng", "English"),
    ("english", "English"),
    ("bn", "Bengali"),
    ("bangla", "Bengali"),
    ("bengali", "Bengali"),
    ("hi", "Hindi"),
    ("hindi", "Hindi"),
    ("ar", "Arabic"),
    ("arabic", "Arabic"),
    ("es", "Spanish"),
    ("spanish", "Spanish"),
    ("fr", "French"),
    ("french", "French"),
    ("de", "German"),
    ("german", "German"),
    ("zh", "Chinese"),
    ("chinese", "Chinese"),
    ("ja", "Japanese"),
    ("japanese", "Japanese"),
    ("ko", "Korean"),
    ("korean", "Korean"),
    ("pt", "Portuguese"),
    ("portuguese", "Portuguese"),
    ("ru", "Russian"),
    ("russian", "Russian"),
    ("it", "Italian"),
    ("italian", "Italian"),
    ("tr", "Turkish"),
    ("turkish", "Turkish"),
)

_TOKEN_SHAPES: tuple[str, ...] = (
    "/{code}/",
    "/{code}.",
    "_{code}.",
    "-{code}.",
    "={code}&",
    "lang={code}",
    "language={code}",
)


def looks_like_subtitle(url: str) -> bool:
    """True if *url* has a subtitle extension or subtitle path hint."""
    return any(p.search(url) for p in _SUBTITLE_PATTERNS)


def is_valid_subtitle(url: str) -> bool:
    """Reject tracker look-alikes and implausibly short subtitle URLs."""
    if not _SUBTITLE_EXTENSION_RE.search(url):
        return False
    lowered = url.lower()
    if any(marker in lowered for marker in _TRACKER_MARKERS):
        return False
    return len(url) >= _MIN_SUBTITLE_URL_LENGTH


def infer_language(url: str) -> str:
    """Return a human-readable language name guessed from URL tokens.

    Not confidence ranked: the first table entry whose token appears in
    one of the known shapes wins.
    """
    lowered = url.lower()
    for code, language in LANGUAGE_TOKENS:
        if any(shape.format(code=code) in lowered for shape in _TOKEN_SHAPES):
            return language
    return UNKNOWN_LANGUAGE
