"""Text search for manifest URLs embedded in response bodies and console logs."""

from __future__ import annotations

import re

_MANIFEST_URL_RE = re.compile(r"https?://[^\s\"'<>]+\.m3u8[^\s\"'<>]*", re.IGNORECASE)

_SCRIPT_OR_JSON_MARKERS: tuple[str, ...] = ("json", "javascript", "ecmascript")
_SCANNABLE_CONTENT_MARKERS: tuple[str, ...] = (*_SCRIPT_OR_JSON_MARKERS, "text/")

_MANIFEST_CONTENT_TYPES: tuple[str, ...] = (
    "application/vnd.apple.mpegurl",
    "application/x-mpegurl",
    "audio/mpegurl",
    "audio/x-mpegurl",
    "application/dash+xml",
)


def should_scan_body(content_type: str) -> bool:
    """True for JSON, script and plain-text payloads."""
    lowered = content_type.lower()
    return any(marker in lowered for marker in _SCANNABLE_CONTENT_MARKERS)


def is_script_or_json(content_type: str) -> bool:
    lowered = content_type.lower()
    return any(marker in lowered for marker in _SCRIPT_OR_JSON_MARKERS)


def is_manifest_content_type(content_type: str) -> bool:
    """True if the response declares itself an HLS or DASH manifest."""
    lowered = content_type.lower()
    return any(ct in lowered for ct in _MANIFEST_CONTENT_TYPES)


def scan_manifest_urls(text: str) -> list[str]:
    """Return absolute ``.m3u8`` URLs found in *text*, first occurrence order."""
    if ".m3u8" not in text.lower():
        return []
    # JSON payloads commonly escape forward slashes
    unescaped = text.replace("\\/", "/")
    seen: dict[str, None] = {}
    for match in _MANIFEST_URL_RE.findall(unescaped):
        seen.setdefault(match, None)
    return list(seen)
