"""Tests for the bounded click campaign."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from streamsniff.domain.entities.extraction import ObservedNetworkEvent, Viewport
from streamsniff.infrastructure.extraction.collector import CandidateCollector
from streamsniff.infrastructure.extraction.interaction import InteractionCampaign
from streamsniff.infrastructure.extraction.settings import ExtractionSettings

TARGET = "https://video.example.org/watch/42"
VIEWPORT = Viewport(1000, 800)


def _make_page() -> MagicMock:
    page = MagicMock()
    page.query_selector = AsyncMock(return_value=None)
    page.mouse.click = AsyncMock()
    page.frames = []
    return page


def _make_element(width: float = 120, height: float = 60) -> MagicMock:
    element = MagicMock()
    element.bounding_box = AsyncMock(
        return_value={"x": 10, "y": 10, "width": width, "height": height}
    )
    element.click = AsyncMock()
    return element


def _sleeper(clock) -> AsyncMock:
    async def sleep(seconds: float) -> None:
        clock.advance(seconds)

    return AsyncMock(side_effect=sleep)


def _campaign(page, collector, clock, **settings) -> InteractionCampaign:
    return InteractionCampaign(
        page,
        collector,
        VIEWPORT,
        ExtractionSettings(**settings),
        sleep=_sleeper(clock),
        clock=clock,
    )


class TestRun:
    async def test_budget_exhausted_without_master(self, clock) -> None:
        page = _make_page()
        collector = CandidateCollector(TARGET, "UA")
        campaign = _campaign(page, collector, clock, max_click_attempts=3)

        assert await campaign.run() is None

        assert campaign.attempts == 3
        assert page.mouse.click.await_count == 3
        page.mouse.click.assert_awaited_with(500.0, 400.0)

    async def test_early_exit_on_master(self, clock) -> None:
        page = _make_page()
        collector = CandidateCollector(TARGET, "UA")

        async def click(x: float, y: float) -> None:
            collector.observe(
                ObservedNetworkEvent(
                    url="https://cdn.example.net/hls/master.m3u8", channel="request"
                )
            )

        page.mouse.click.side_effect = click
        campaign = _campaign(page, collector, clock)

        master = await campaign.run()

        assert master is not None
        assert master.url == "https://cdn.example.net/hls/master.m3u8"
        assert campaign.attempts == 0
        assert page.mouse.click.await_count == 1

    async def test_non_master_candidate_does_not_stop(self, clock) -> None:
        page = _make_page()
        collector = CandidateCollector(TARGET, "UA")
        collector.observe(
            ObservedNetworkEvent(url="https://cdn.example.net/v/movie.mp4", channel="request")
        )
        campaign = _campaign(page, collector, clock, max_click_attempts=2)

        assert await campaign.run() is None
        assert campaign.attempts == 2

    async def test_window_bounds_the_loop(self, clock) -> None:
        page = _make_page()
        collector = CandidateCollector(TARGET, "UA")
        campaign = _campaign(
            page,
            collector,
            clock,
            detection_window_seconds=2.0,
            max_click_attempts=50,
        )

        await campaign.run()

        # centre pause 0.3 + click delay 0.8 per attempt
        assert campaign.attempts == 2

    async def test_failed_gestures_not_counted(self, clock) -> None:
        page = _make_page()
        page.mouse.click.side_effect = RuntimeError("Target page has been closed")
        collector = CandidateCollector(TARGET, "UA")
        campaign = _campaign(page, collector, clock, detection_window_seconds=5.0)

        assert await campaign.run() is None

        assert campaign.attempts == 0
        assert campaign.clicks == 0
        assert page.mouse.click.await_count == 10

    async def test_master_after_failed_gesture_exits_early(self, clock) -> None:
        page = _make_page()
        collector = CandidateCollector(TARGET, "UA")

        async def failing_click(x: float, y: float) -> None:
            # autoplay delivers the manifest even though the click errors
            collector.observe(
                ObservedNetworkEvent(
                    url="https://cdn.example.net/hls/master.m3u8", channel="request"
                )
            )
            raise RuntimeError("Element is outside of the viewport")

        page.mouse.click.side_effect = failing_click
        campaign = _campaign(page, collector, clock, detection_window_seconds=5.0)

        master = await campaign.run()

        assert master is not None
        assert master.url == "https://cdn.example.net/hls/master.m3u8"
        assert page.mouse.click.await_count == 1
        assert campaign.attempts == 0


class TestPlayControls:
    async def test_visible_control_clicked(self, clock) -> None:
        page = _make_page()
        element = _make_element()

        async def query(selector: str) -> MagicMock | None:
            return element if selector == "video" else None

        page.query_selector.side_effect = query
        collector = CandidateCollector(TARGET, "UA")
        campaign = _campaign(page, collector, clock, max_click_attempts=1)

        await campaign.run()

        element.click.assert_awaited_once()
        page.mouse.click.assert_not_awaited()
        assert campaign.clicks == 1

    async def test_tiny_control_skipped(self, clock) -> None:
        page = _make_page()
        page.query_selector.return_value = _make_element(width=8, height=8)
        collector = CandidateCollector(TARGET, "UA")
        campaign = _campaign(page, collector, clock, max_click_attempts=1)

        await campaign.run()

        page.mouse.click.assert_awaited_once_with(500.0, 400.0)

    async def test_detached_element_falls_through(self, clock) -> None:
        page = _make_page()
        element = _make_element()
        element.click.side_effect = RuntimeError("Element is not attached to the DOM")
        page.query_selector.return_value = element
        collector = CandidateCollector(TARGET, "UA")
        campaign = _campaign(page, collector, clock, max_click_attempts=1)

        await campaign.run()

        page.mouse.click.assert_awaited_once()


class TestAggressive:
    async def test_grid_and_frame_descent(self, clock) -> None:
        page = _make_page()
        main = MagicMock()
        blank = MagicMock()
        blank.url = "about:blank"
        ad = MagicMock()
        ad.url = "https://securepubads.g.doubleclick.net/frame"
        player = MagicMock()
        player.url = "https://player.example.net/embed/42"
        player.query_selector = AsyncMock(return_value=_make_element())
        page.main_frame = main
        page.frames = [main, blank, ad, player]
        collector = CandidateCollector(TARGET, "UA")
        campaign = _campaign(page, collector, clock, max_click_attempts=1, aggressive=True)

        await campaign.run()

        # centre click + five grid points
        assert page.mouse.click.await_count == 6
        player.query_selector.assert_awaited_with(".play-button")
        assert campaign.clicks == 7
