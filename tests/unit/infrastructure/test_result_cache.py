"""Tests for the in-memory result cache."""

from __future__ import annotations

import asyncio

from streamsniff.domain.entities.extraction import ExtractionResult
from streamsniff.infrastructure.cache import InMemoryResultCache, cache_key

URL = "https://video.example.org/watch/42"


class TestCacheKey:
    def test_lowercases_scheme_and_host(self) -> None:
        assert cache_key("HTTPS://Video.Example.ORG/watch/42") == URL

    def test_drops_fragment(self) -> None:
        assert cache_key(URL + "#t=30") == URL

    def test_keeps_path_case_and_query_order(self) -> None:
        url = "https://example.org/Watch/?b=2&a=1"
        assert cache_key(url) == url

    def test_strips_whitespace(self) -> None:
        assert cache_key(f"  {URL}\n") == URL


class TestGetSet:
    async def test_miss(self, clock) -> None:
        cache = InMemoryResultCache(ttl_seconds=60, clock=clock)
        assert await cache.get(URL) is None

    async def test_hit_within_ttl(self, clock, found_result: ExtractionResult) -> None:
        cache = InMemoryResultCache(ttl_seconds=60, clock=clock)
        await cache.set(URL, found_result)

        clock.advance(59.9)

        assert await cache.get(URL) is found_result

    async def test_expired_entry_evicted(self, clock, found_result: ExtractionResult) -> None:
        cache = InMemoryResultCache(ttl_seconds=60, clock=clock)
        await cache.set(URL, found_result)

        clock.advance(60.5)

        assert await cache.get(URL) is None
        assert cache.size() == 0

    async def test_failures_are_not_cached(self, clock) -> None:
        cache = InMemoryResultCache(ttl_seconds=60, clock=clock)
        await cache.set(URL, ExtractionResult.failure("No streams found", "no_streams_found"))

        assert cache.size() == 0
        assert await cache.get(URL) is None

    async def test_equivalent_urls_share_entry(self, clock, found_result: ExtractionResult) -> None:
        cache = InMemoryResultCache(ttl_seconds=60, clock=clock)
        await cache.set("HTTPS://VIDEO.example.org/watch/42#start", found_result)

        assert await cache.get(URL) is found_result

    async def test_overwrite_refreshes_timestamp(
        self, clock, found_result: ExtractionResult
    ) -> None:
        cache = InMemoryResultCache(ttl_seconds=60, clock=clock)
        await cache.set(URL, found_result)
        clock.advance(50)
        await cache.set(URL, found_result)
        clock.advance(50)

        assert await cache.get(URL) is found_result

    async def test_expires_once_ttl_elapsed(self, clock, found_result: ExtractionResult) -> None:
        cache = InMemoryResultCache(ttl_seconds=60, clock=clock)
        await cache.set(URL, found_result)

        clock.advance(60)

        assert await cache.get(URL) is None

    async def test_bounded_entries_drop_least_recent(
        self, clock, found_result: ExtractionResult
    ) -> None:
        cache = InMemoryResultCache(ttl_seconds=60, max_entries=2, clock=clock)
        await cache.set("https://a.example/1", found_result)
        await cache.set("https://a.example/2", found_result)
        await cache.get("https://a.example/1")
        await cache.set("https://a.example/3", found_result)

        assert cache.size() == 2
        assert await cache.get("https://a.example/2") is None
        assert await cache.get("https://a.example/1") is found_result

    async def test_clear(self, clock, found_result: ExtractionResult) -> None:
        cache = InMemoryResultCache(ttl_seconds=60, clock=clock)
        await cache.set(URL, found_result)

        await cache.clear()

        assert cache.size() == 0


class TestSweep:
    async def test_sweep_removes_only_expired(
        self, clock, found_result: ExtractionResult
    ) -> None:
        cache = InMemoryResultCache(ttl_seconds=60, clock=clock)
        await cache.set("https://a.example/old", found_result)
        clock.advance(45)
        await cache.set("https://a.example/new", found_result)
        clock.advance(30)

        removed = await cache.sweep()

        assert removed == 1
        assert cache.size() == 1
        assert await cache.get("https://a.example/new") is found_result

    async def test_background_sweep(self, clock, found_result: ExtractionResult) -> None:
        cache = InMemoryResultCache(ttl_seconds=1, sweep_interval_seconds=0.01, clock=clock)
        await cache.set(URL, found_result)
        clock.advance(5)

        cache.start()
        try:
            await asyncio.sleep(0.05)
            assert cache.size() == 0
        finally:
            await cache.aclose()

    async def test_aclose_without_start(self) -> None:
        cache = InMemoryResultCache()
        await cache.aclose()
