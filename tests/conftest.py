"""Shared test fixtures for the streamsniff test suite."""

from __future__ import annotations

import pytest

from streamsniff.domain.entities.extraction import (
    CandidateStream,
    CandidateSubtitle,
    ExtractionResult,
    Fingerprint,
    Viewport,
)

TARGET_URL = "https://video.example.org/watch/42"
USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) TestAgent/1.0"

# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fingerprint() -> Fingerprint:
    return Fingerprint(user_agent=USER_AGENT, viewport=Viewport(1366, 768))


@pytest.fixture()
def master_candidate() -> CandidateStream:
    return CandidateStream(
        url="https://cdn.example.net/hls/master.m3u8",
        headers={
            "Referer": TARGET_URL,
            "User-Agent": USER_AGENT,
            "Origin": "https://video.example.org",
        },
        priority=15,
        channel="request",
    )


@pytest.fixture()
def found_result(master_candidate: CandidateStream) -> ExtractionResult:
    """Successful result with one stream and one subtitle."""
    return ExtractionResult.found(
        (master_candidate,),
        (CandidateSubtitle(url="https://cdn.example.net/subs/en.vtt", language="English"),),
    )

