"""Domain entities for stream extraction.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

DiscoveryChannel = Literal[
    "request",
    "response-header-match",
    "response-body-scan",
    "console-log",
]

FailureKind = Literal[
    "no_streams_found",
    "extraction_timeout",
    "extraction_failed",
]

NO_STREAMS_FOUND_MESSAGE = "No streams found"


@dataclass(frozen=True)
class Viewport:
    """Browser window size presented to the page."""

    width: int
    height: int

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2


@dataclass(frozen=True)
class Fingerprint:
    """User-agent + viewport combination for one extraction attempt."""

    user_agent: str
    viewport: Viewport


@dataclass(frozen=True)
class ExtractionRequest:
    """One extraction attempt against a target page.

    Created per attempt (a retry gets a new request with a new
    fingerprint) and discarded once the attempt finishes.
    """

    target_url: str
    user_agent: str
    viewport: Viewport
    deadline_seconds: float

    @classmethod
    def build(
        cls, target_url: str, fingerprint: Fingerprint, deadline_seconds: float
    ) -> ExtractionRequest:
        return cls(
            target_url=target_url,
            user_agent=fingerprint.user_agent,
            viewport=fingerprint.viewport,
            deadline_seconds=deadline_seconds,
        )


@dataclass(frozen=True)
class ObservedNetworkEvent:
    """A single piece of network evidence emitted by the browser."""

    url: str
    channel: DiscoveryChannel
    resource_type: str = ""
    content_type: str = ""
    request_headers: dict[str, str] = field(default_factory=dict)

    @property
    def referer(self) -> str | None:
        """Referer of the originating request (header names are lower-case)."""
        return self.request_headers.get("referer") or None


@dataclass(frozen=True)
class CandidateStream:
    """A URL that passed the stream heuristic, with playback headers."""

    url: str
    headers: dict[str, str]
    priority: int
    channel: DiscoveryChannel

    def summary(self) -> dict[str, str | int]:
        return {"url": self.url, "priority": self.priority}


@dataclass(frozen=True)
class CandidateSubtitle:
    """A subtitle track URL with its inferred language name."""

    url: str
    language: str = "Unknown"

    def summary(self) -> dict[str, str]:
        return {"url": self.url, "language": self.language}


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of an extraction (the unit stored in the result cache)."""

    success: bool
    stream: CandidateStream | None = None
    candidates: tuple[CandidateStream, ...] = ()
    subtitles: tuple[CandidateSubtitle, ...] = ()
    error: str | None = None
    error_kind: FailureKind | None = None

    @classmethod
    def found(
        cls,
        candidates: tuple[CandidateStream, ...],
        subtitles: tuple[CandidateSubtitle, ...] = (),
    ) -> ExtractionResult:
        """Successful result; *candidates* must already be ranked."""
        if not candidates:
            raise ValueError("a successful result needs at least one candidate")
        return cls(
            success=True,
            stream=candidates[0],
            candidates=candidates,
            subtitles=subtitles,
        )

    @classmethod
    def failure(cls, error: str, kind: FailureKind) -> ExtractionResult:
        return cls(success=False, error=error, error_kind=kind)

    @property
    def stream_url(self) -> str | None:
        return self.stream.url if self.stream is not None else None

    @property
    def headers(self) -> dict[str, str]:
        return dict(self.stream.headers) if self.stream is not None else {}
