"""Signal classifiers: pure URL / content-type heuristics."""

from .classifiers import (
    BLOCKED_DOMAINS,
    is_blocked_domain,
    is_master_playlist,
    looks_like_stream,
    stream_priority,
)
from .scanner import (
    is_manifest_content_type,
    is_script_or_json,
    scan_manifest_urls,
    should_scan_body,
)
from .subtitles import (
    UNKNOWN_LANGUAGE,
    infer_language,
    is_valid_subtitle,
    looks_like_subtitle,
)

__all__ = [
    "BLOCKED_DOMAINS",
    "UNKNOWN_LANGUAGE",
    "infer_language",
    "is_blocked_domain",
    "is_manifest_content_type",
    "is_script_or_json",
    "is_master_playlist",
    "is_valid_subtitle",
    "looks_like_stream",
    "looks_like_subtitle",
    "scan_manifest_urls",
    "should_scan_body",
    "stream_priority",
]
