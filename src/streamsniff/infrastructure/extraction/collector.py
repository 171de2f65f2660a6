"""Accumulates candidate streams and subtitles during one attempt."""

from __future__ import annotations

from urllib.parse import urlsplit

import structlog

from streamsniff.domain.entities.extraction import (
    NO_STREAMS_FOUND_MESSAGE,
    CandidateStream,
    CandidateSubtitle,
    ExtractionResult,
    ObservedNetworkEvent,
)
from streamsniff.domain.exceptions import NoStreamsFound
from streamsniff.infrastructure.signals import (
    infer_language,
    is_master_playlist,
    is_valid_subtitle,
    looks_like_stream,
    looks_like_subtitle,
    stream_priority,
)

log = structlog.get_logger(__name__)


def origin_of(url: str) -> str:
    """``scheme://host[:port]`` of *url*."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


class CandidateCollector:
    """Deduplicating sink for network evidence.

    Request events are classified here; response and console events have
    already been judged by the observer and are accepted as candidates.
    The first sighting of a URL wins, including its playback headers.
    """

    def __init__(self, target_url: str, user_agent: str) -> None:
        self._target_url = target_url
        self._user_agent = user_agent
        self._origin = origin_of(target_url)
        self._streams: dict[str, CandidateStream] = {}
        self._subtitles: dict[str, CandidateSubtitle] = {}
        self._best: CandidateStream | None = None
        self._master: CandidateStream | None = None

    def __len__(self) -> int:
        return len(self._streams)

    @property
    def best(self) -> CandidateStream | None:
        """Highest-priority candidate seen so far (ties keep the earlier one)."""
        return self._best

    def master_candidate(self) -> CandidateStream | None:
        """First collected candidate whose URL matches a master-playlist keyword."""
        return self._master

    def observe(self, event: ObservedNetworkEvent) -> CandidateStream | None:
        """Record *event*; return the new candidate, if one was created."""
        url = event.url

        if event.channel == "request":
            if looks_like_subtitle(url) and is_valid_subtitle(url):
                self._add_subtitle(url)
            if not looks_like_stream(url):
                return None

        if url in self._streams:
            return None

        candidate = CandidateStream(
            url=url,
            headers={
                "Referer": event.referer or self._target_url,
                "User-Agent": self._user_agent,
                "Origin": self._origin,
            },
            priority=stream_priority(url),
            channel=event.channel,
        )
        self._streams[url] = candidate

        if self._best is None or candidate.priority > self._best.priority:
            self._best = candidate
        if self._master is None and is_master_playlist(url):
            self._master = candidate

        log.debug(
            "candidate_collected",
            url=url[:120],
            priority=candidate.priority,
            channel=event.channel,
        )
        return candidate

    def _add_subtitle(self, url: str) -> None:
        if url in self._subtitles:
            return
        language = infer_language(url)
        self._subtitles[url] = CandidateSubtitle(url=url, language=language)
        log.debug("subtitle_collected", url=url[:120], language=language)

    def ranked(self) -> tuple[CandidateStream, ...]:
        """All candidates, stable-sorted by priority (highest first)."""
        return tuple(
            sorted(self._streams.values(), key=lambda c: c.priority, reverse=True)
        )

    def subtitles(self) -> tuple[CandidateSubtitle, ...]:
        """Subtitles in discovery order."""
        return tuple(self._subtitles.values())

    def to_result(self) -> ExtractionResult:
        """Build the successful result.

        Raises:
            NoStreamsFound: nothing was collected.
        """
        ranked = self.ranked()
        if not ranked:
            raise NoStreamsFound(NO_STREAMS_FOUND_MESSAGE)
        return ExtractionResult.found(ranked, self.subtitles())
