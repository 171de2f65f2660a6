"""Tests for NetworkObserver handlers (Playwright objects mocked)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from streamsniff.infrastructure.extraction.collector import CandidateCollector
from streamsniff.infrastructure.extraction.network import NetworkObserver

TARGET = "https://video.example.org/watch/42"


def _make_route(
    url: str,
    resource_type: str = "xhr",
    headers: dict[str, str] | None = None,
) -> MagicMock:
    route = MagicMock()
    route.request.url = url
    route.request.resource_type = resource_type
    route.request.headers = headers or {}
    route.abort = AsyncMock()
    route.continue_ = AsyncMock()
    return route


def _make_response(
    url: str,
    content_type: str,
    body: str = "",
    *,
    content_length: str | None = None,
    referer: str = TARGET,
) -> MagicMock:
    response = MagicMock()
    response.url = url
    headers = {"content-type": content_type}
    if content_length is not None:
        headers["content-length"] = content_length
    response.headers = headers
    response.request.resource_type = "xhr"
    response.request.headers = {"referer": referer}
    response.text = AsyncMock(return_value=body)
    return response


def _observer(**kwargs) -> tuple[NetworkObserver, CandidateCollector]:
    collector = CandidateCollector(TARGET, "TestAgent/1.0")
    return NetworkObserver(collector, **kwargs), collector


class TestAttach:
    async def test_registers_listeners(self) -> None:
        observer, _ = _observer()
        context = MagicMock()
        context.route = AsyncMock()
        page = MagicMock()

        await observer.attach(context, page)

        context.route.assert_awaited_once_with("**/*", observer.handle_route)
        context.on.assert_called_once_with("page", observer.handle_new_page)
        page.on.assert_any_call("response", observer.handle_response)
        page.on.assert_any_call("console", observer.handle_console)

    async def test_console_listener_optional(self) -> None:
        observer, _ = _observer(scan_console=False)
        context = MagicMock()
        context.route = AsyncMock()
        page = MagicMock()

        await observer.attach(context, page)

        page.on.assert_called_once_with("response", observer.handle_response)


class TestHandleRoute:
    async def test_blocks_heavy_resources(self) -> None:
        observer, _ = _observer()
        route = _make_route("https://video.example.org/poster.jpg", resource_type="image")

        await observer.handle_route(route)

        route.abort.assert_awaited_once()
        route.continue_.assert_not_awaited()
        assert observer.blocked_requests == 1

    async def test_blocks_tracker_domains(self) -> None:
        observer, _ = _observer()
        route = _make_route("https://www.google-analytics.com/collect?v=1", resource_type="fetch")

        await observer.handle_route(route)

        route.abort.assert_awaited_once()

    async def test_stream_request_collected_and_continued(self) -> None:
        observer, collector = _observer()
        route = _make_route(
            "https://cdn.example.net/hls/master.m3u8",
            headers={"referer": "https://player.example.net/"},
        )

        await observer.handle_route(route)

        route.continue_.assert_awaited_once()
        best = collector.best
        assert best is not None
        assert best.url == "https://cdn.example.net/hls/master.m3u8"
        assert best.headers["Referer"] == "https://player.example.net/"

    async def test_continue_failure_is_swallowed(self) -> None:
        observer, _ = _observer()
        route = _make_route("https://video.example.org/app.js", resource_type="script")
        route.continue_.side_effect = RuntimeError("Route is already handled!")

        await observer.handle_route(route)

        route.continue_.assert_awaited_once()


class TestHandleResponse:
    async def test_json_body_scan(self) -> None:
        observer, collector = _observer()
        api = "https://api.example.org/source?id=42"
        response = _make_response(
            api,
            "application/json",
            '{"file":"https:\\/\\/cdn.x.com\\/a\\/master.m3u8?t=1"}',
        )

        await observer.handle_response(response)

        candidates = collector.ranked()
        assert len(candidates) == 1
        assert candidates[0].url == "https://cdn.x.com/a/master.m3u8?t=1"
        assert candidates[0].channel == "response-body-scan"
        assert candidates[0].headers["Referer"] == api

    async def test_manifest_content_type_matches(self) -> None:
        observer, collector = _observer()
        url = "https://cdn.example.net/api/stream?id=9"
        response = _make_response(url, "application/vnd.apple.mpegurl")

        await observer.handle_response(response)

        best = collector.best
        assert best is not None
        assert best.url == url
        assert best.channel == "response-header-match"
        response.text.assert_not_awaited()

    async def test_oversized_body_not_read(self) -> None:
        observer, collector = _observer(max_scan_bytes=100)
        response = _make_response(
            "https://api.example.org/big",
            "application/json",
            "https://cdn.x.com/a/master.m3u8",
            content_length="5000",
        )

        await observer.handle_response(response)

        response.text.assert_not_awaited()
        assert len(collector) == 0

    async def test_unsized_html_document_not_read(self) -> None:
        observer, collector = _observer()
        response = _make_response(
            "https://video.example.org/watch/42",
            "text/html; charset=utf-8",
            "<script>src=\"https://cdn.x.com/a/master.m3u8\"</script>",
        )

        await observer.handle_response(response)

        response.text.assert_not_awaited()
        assert len(collector) == 0

    async def test_unsized_json_read_and_cut(self) -> None:
        observer, collector = _observer(max_scan_bytes=40)
        body = '{"a":"https://cdn.x.com/a/master.m3u8"} ' + "x" * 100
        body += "https://cdn.x.com/late/master.m3u8"
        response = _make_response("https://api.example.org/chunked", "application/json", body)

        await observer.handle_response(response)

        response.text.assert_awaited_once()
        assert [c.url for c in collector.ranked()] == ["https://cdn.x.com/a/master.m3u8"]

    async def test_body_read_failure_ignored(self) -> None:
        observer, collector = _observer()
        response = _make_response("https://api.example.org/x", "application/json")
        response.text.side_effect = RuntimeError("Response body is unavailable for redirect responses")

        await observer.handle_response(response)

        assert len(collector) == 0

    async def test_binary_response_ignored(self) -> None:
        observer, collector = _observer()
        response = _make_response("https://cdn.example.net/seg/001.ts", "video/mp2t")

        await observer.handle_response(response)

        response.text.assert_not_awaited()
        assert len(collector) == 0


class TestConsoleAndPopups:
    def test_console_scan(self) -> None:
        observer, collector = _observer()
        message = MagicMock()
        message.text = "player ready: https://cdn.example.net/live/index.m3u8"

        observer.handle_console(message)

        best = collector.best
        assert best is not None
        assert best.channel == "console-log"
        assert best.headers["Referer"] == TARGET

    async def test_popup_closed(self) -> None:
        observer, _ = _observer()
        context = MagicMock()
        context.route = AsyncMock()
        primary = MagicMock()
        await observer.attach(context, primary)
        popup = MagicMock()
        popup.close = AsyncMock()

        await observer.handle_new_page(popup)

        popup.close.assert_awaited_once()
        assert observer.popups_closed == 1

    async def test_primary_page_kept(self) -> None:
        observer, _ = _observer()
        context = MagicMock()
        context.route = AsyncMock()
        primary = MagicMock()
        primary.close = AsyncMock()
        await observer.attach(context, primary)

        await observer.handle_new_page(primary)

        primary.close.assert_not_awaited()
        assert observer.popups_closed == 0
