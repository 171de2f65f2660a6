"""Tests for CandidateCollector."""

from __future__ import annotations

import pytest

from streamsniff.domain.entities.extraction import ObservedNetworkEvent
from streamsniff.domain.exceptions import NoStreamsFound
from streamsniff.infrastructure.extraction.collector import CandidateCollector, origin_of

TARGET = "https://video.example.org/watch/42"
UA = "TestAgent/1.0"


def _request(url: str, referer: str | None = None) -> ObservedNetworkEvent:
    headers = {"referer": referer} if referer else {}
    return ObservedNetworkEvent(url=url, channel="request", request_headers=headers)


def _collector() -> CandidateCollector:
    return CandidateCollector(TARGET, UA)


class TestOriginOf:
    def test_keeps_port(self) -> None:
        assert origin_of("http://localhost:8080/a/b?c=1") == "http://localhost:8080"


class TestObserve:
    def test_non_stream_request_ignored(self) -> None:
        collector = _collector()

        assert collector.observe(_request("https://video.example.org/app.js")) is None
        assert len(collector) == 0

    def test_playback_headers(self) -> None:
        collector = _collector()

        candidate = collector.observe(
            _request("https://cdn.example.net/master.m3u8", referer="https://player.example.net/embed")
        )

        assert candidate is not None
        assert candidate.headers == {
            "Referer": "https://player.example.net/embed",
            "User-Agent": UA,
            "Origin": "https://video.example.org",
        }
        assert candidate.priority == 15
        assert candidate.channel == "request"

    def test_referer_falls_back_to_target(self) -> None:
        collector = _collector()

        candidate = collector.observe(_request("https://cdn.example.net/movie.mp4"))

        assert candidate is not None
        assert candidate.headers["Referer"] == TARGET

    def test_first_sighting_wins(self) -> None:
        collector = _collector()
        url = "https://cdn.example.net/master.m3u8"

        first = collector.observe(_request(url, referer="https://first.example/"))
        again = collector.observe(
            ObservedNetworkEvent(
                url=url,
                channel="response-header-match",
                request_headers={"referer": "https://second.example/"},
            )
        )

        assert again is None
        assert len(collector) == 1
        assert collector.ranked()[0] is first
        assert collector.ranked()[0].headers["Referer"] == "https://first.example/"

    def test_non_request_channels_are_trusted(self) -> None:
        collector = _collector()

        candidate = collector.observe(
            ObservedNetworkEvent(
                url="https://api.example.net/stream?id=3",
                channel="response-header-match",
                content_type="application/vnd.apple.mpegurl",
            )
        )

        assert candidate is not None
        assert candidate.channel == "response-header-match"

    def test_subtitle_request_collected(self) -> None:
        collector = _collector()

        assert collector.observe(_request("https://cdn.example.net/subs/en.vtt")) is None

        subs = collector.subtitles()
        assert len(subs) == 1
        assert subs[0].language == "English"
        assert len(collector) == 0

    def test_tracker_subtitle_rejected(self) -> None:
        collector = _collector()

        collector.observe(_request("https://cdn.example.net/tracking/pixel.vtt"))

        assert collector.subtitles() == ()


class TestRanking:
    def test_stable_sort_keeps_discovery_order_on_ties(self) -> None:
        collector = _collector()
        collector.observe(_request("https://cdn.x.net/a/video1.m3u8"))
        collector.observe(_request("https://cdn.x.net/b/stream.m3u8"))
        collector.observe(_request("https://cdn.x.net/c/master.m3u8"))

        urls = [c.url for c in collector.ranked()]

        assert urls == [
            "https://cdn.x.net/c/master.m3u8",
            "https://cdn.x.net/a/video1.m3u8",
            "https://cdn.x.net/b/stream.m3u8",
        ]
        assert collector.best is not None
        assert collector.best.url == "https://cdn.x.net/c/master.m3u8"

    def test_master_candidate_is_first_keyword_match(self) -> None:
        collector = _collector()
        collector.observe(_request("https://cdn.x.net/seg/segment_1.mp4"))
        collector.observe(_request("https://cdn.x.net/hls/index.m3u8"))
        collector.observe(_request("https://cdn.x.net/hls/master.m3u8"))

        master = collector.master_candidate()

        assert master is not None
        assert master.url == "https://cdn.x.net/hls/index.m3u8"
        assert collector.ranked()[0].url == "https://cdn.x.net/hls/master.m3u8"

    def test_no_master_without_keyword(self) -> None:
        collector = _collector()
        collector.observe(_request("https://cdn.x.net/v/movie.mp4"))

        assert collector.master_candidate() is None


class TestToResult:
    def test_empty_raises(self) -> None:
        with pytest.raises(NoStreamsFound, match="No streams found"):
            _collector().to_result()

    def test_found(self) -> None:
        collector = _collector()
        collector.observe(_request("https://cdn.x.net/v/movie.mp4"))
        collector.observe(_request("https://cdn.x.net/hls/master.m3u8"))
        collector.observe(_request("https://cdn.x.net/subs/en.vtt"))

        result = collector.to_result()

        assert result.success is True
        assert result.stream_url == "https://cdn.x.net/hls/master.m3u8"
        assert [c.url for c in result.candidates] == [
            "https://cdn.x.net/hls/master.m3u8",
            "https://cdn.x.net/v/movie.mp4",
        ]
        assert result.subtitles[0].url == "https://cdn.x.net/subs/en.vtt"
