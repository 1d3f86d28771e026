"""Test multi-provider search aggregation."""

import time

import httpx
import pytest

from jarvis.models.search import SearchOptions, SearchSource
from jarvis.search.aggregator import SearchAggregator
from jarvis.search.registry import SearchProviderRegistry
from tests.mocks.search_mocks import FailingSearchProvider, StaticSearchProvider, make_result

DDG = SearchSource.DUCKDUCKGO
WIKI = SearchSource.WIKIPEDIA


def make_aggregator(*providers, cache=None, **kwargs) -> SearchAggregator:
    registry = SearchProviderRegistry()
    for provider in providers:
        registry.register(provider)
    return SearchAggregator(registry, httpx.AsyncClient(), cache=cache, **kwargs)


@pytest.fixture
def ddg():
    return StaticSearchProvider(
        DDG,
        [
            make_result("https://a.example", DDG, "A"),
            make_result("https://shared.example", DDG, "Shared DDG"),
        ],
    )


@pytest.fixture
def wiki():
    return StaticSearchProvider(
        WIKI,
        [
            make_result("https://shared.example", WIKI, "Shared Wiki"),
            make_result("https://w.example", WIKI, "W"),
        ],
    )


class TestSearchAggregatorMerge:
    """Test ordering, dedup and limits."""

    @pytest.mark.asyncio
    async def test_should_keep_requested_provider_order(self, ddg, wiki):
        """Test results follow the order of requested sources."""
        aggregator = make_aggregator(ddg, wiki)

        results = await aggregator.search(
            "python", SearchOptions(sources=["wikipedia", "duckduckgo"], limit=10)
        )

        assert [r.url for r in results] == [
            "https://shared.example",
            "https://w.example",
            "https://a.example",
        ]

    @pytest.mark.asyncio
    async def test_should_dedupe_by_url_keeping_first(self, ddg, wiki):
        """Test first occurrence wins."""
        aggregator = make_aggregator(ddg, wiki)

        results = await aggregator.search(
            "python", SearchOptions(sources=["duckduckgo", "wikipedia"], limit=10)
        )

        shared = [r for r in results if r.url == "https://shared.example"]
        assert len(shared) == 1
        assert shared[0].source == DDG
        assert len({r.url for r in results}) == len(results)

    @pytest.mark.asyncio
    async def test_should_truncate_to_limit(self, ddg, wiki):
        """Test limit."""
        aggregator = make_aggregator(ddg, wiki)

        results = await aggregator.search(
            "python", SearchOptions(sources=["duckduckgo", "wikipedia"], limit=2)
        )

        assert [r.url for r in results] == ["https://a.example", "https://shared.example"]

    @pytest.mark.asyncio
    async def test_should_clamp_limit_to_maximum(self):
        """Test max_limit."""
        many = StaticSearchProvider(
            DDG, [make_result(f"https://{i}.example", DDG) for i in range(30)]
        )
        aggregator = make_aggregator(many, max_limit=20)

        results = await aggregator.search("python", SearchOptions(limit=50))

        assert len(results) == 20

    @pytest.mark.asyncio
    async def test_should_drop_results_without_url(self):
        """Test empty URLs are ignored."""
        provider = StaticSearchProvider(
            DDG, [make_result("", DDG), make_result("https://ok.example", DDG)]
        )
        aggregator = make_aggregator(provider)

        results = await aggregator.search("python")

        assert [r.url for r in results] == ["https://ok.example"]

    @pytest.mark.asyncio
    async def test_should_not_resort_by_confidence(self):
        """Test provider order beats confidence."""
        low = StaticSearchProvider(DDG, [make_result("https://low.example", DDG, confidence=0.6)])
        high = StaticSearchProvider(
            WIKI, [make_result("https://high.example", WIKI, confidence=0.95)]
        )
        aggregator = make_aggregator(low, high)

        results = await aggregator.search(
            "python", SearchOptions(sources=["duckduckgo", "wikipedia"])
        )

        assert [r.url for r in results] == ["https://low.example", "https://high.example"]


class TestSearchAggregatorFailures:
    """Test failing and unknown providers."""

    @pytest.mark.asyncio
    async def test_should_skip_failing_provider(self, wiki):
        """Test a raising provider contributes nothing."""
        broken = FailingSearchProvider(DDG)
        aggregator = make_aggregator(broken, wiki)

        results = await aggregator.search(
            "python", SearchOptions(sources=["duckduckgo", "wikipedia"])
        )

        assert broken.queries == ["python"]
        assert [r.source for r in results] == [WIKI, WIKI]

    @pytest.mark.asyncio
    async def test_should_skip_provider_past_its_timeout(self, wiki):
        """Test a slow provider is abandoned."""
        slow = StaticSearchProvider(DDG, [make_result("https://slow.example", DDG)], delay=1.0)
        aggregator = make_aggregator(slow, wiki)

        results = await aggregator.search(
            "python", SearchOptions(sources=["duckduckgo", "wikipedia"], timeout_ms=50)
        )

        assert "https://slow.example" not in [r.url for r in results]
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_should_return_within_timeout_when_provider_hangs(self, wiki):
        """Test a hanging provider bounds the call by the timeout."""
        slow = StaticSearchProvider(DDG, [make_result("https://slow.example", DDG)], delay=5.0)
        aggregator = make_aggregator(slow, wiki)

        start = time.perf_counter()
        results = await aggregator.search(
            "python", SearchOptions(sources=["duckduckgo", "wikipedia"], timeout_ms=100)
        )
        elapsed = time.perf_counter() - start

        assert elapsed < 0.5
        assert [r.source for r in results] == [WIKI, WIKI]

    @pytest.mark.asyncio
    async def test_should_query_providers_concurrently(self):
        """Test fan-out time is the slowest provider, not the sum."""
        first = StaticSearchProvider(DDG, [make_result("https://a.example", DDG)], delay=0.2)
        second = StaticSearchProvider(WIKI, [make_result("https://w.example", WIKI)], delay=0.2)
        aggregator = make_aggregator(first, second)

        start = time.perf_counter()
        results = await aggregator.search(
            "python", SearchOptions(sources=["duckduckgo", "wikipedia"], timeout_ms=300)
        )
        elapsed = time.perf_counter() - start

        assert elapsed < 0.35
        assert [r.url for r in results] == ["https://a.example", "https://w.example"]

    @pytest.mark.asyncio
    async def test_should_return_empty_when_every_provider_fails(self):
        """Test total failure is an empty list, not an error."""
        aggregator = make_aggregator(FailingSearchProvider(DDG), FailingSearchProvider(WIKI))

        assert await aggregator.search("python") == []

    @pytest.mark.asyncio
    async def test_should_skip_unknown_sources(self, ddg):
        """Test unknown names are ignored."""
        aggregator = make_aggregator(ddg)

        results = await aggregator.search("python", SearchOptions(sources=["bing", "duckduckgo"]))

        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_should_return_empty_for_blank_query(self, ddg):
        """Test no provider is called for a blank query."""
        aggregator = make_aggregator(ddg)

        assert await aggregator.search("   ") == []
        assert ddg.queries == []

    @pytest.mark.asyncio
    async def test_should_use_default_sources(self, ddg, wiki):
        """Test defaults when no sources are requested."""
        aggregator = make_aggregator(ddg, wiki, default_sources=["wikipedia"])

        await aggregator.search("python")

        assert wiki.queries == ["python"]
        assert ddg.queries == []


class TestSearchAggregatorCache:
    """Test result caching."""

    @pytest.mark.asyncio
    async def test_should_serve_repeat_search_from_cache(self, ddg, cache_store):
        """Test cache hit skips providers."""
        aggregator = make_aggregator(ddg, cache=cache_store)

        first = await aggregator.search("Python")
        second = await aggregator.search("python ")

        assert ddg.queries == ["Python"]
        assert [r.url for r in second] == [r.url for r in first]

    @pytest.mark.asyncio
    async def test_should_bypass_cache_when_forced_fresh(self, ddg, cache_store):
        """Test force_fresh."""
        aggregator = make_aggregator(ddg, cache=cache_store)

        await aggregator.search("python")
        await aggregator.search("python", SearchOptions(force_fresh=True))

        assert len(ddg.queries) == 2

    @pytest.mark.asyncio
    async def test_should_not_cache_empty_results(self, cache_store):
        """Test empty result lists are not stored."""
        broken = FailingSearchProvider(DDG)
        aggregator = make_aggregator(broken, cache=cache_store)

        await aggregator.search("python")
        await aggregator.search("python")

        assert len(broken.queries) == 2
        assert (await cache_store.stats()).memory_entries == 0

    @pytest.mark.asyncio
    async def test_should_expire_cached_results(self, ddg, cache_store, clock):
        """Test TTL."""
        aggregator = make_aggregator(ddg, cache=cache_store, cache_ttl_seconds=60)

        await aggregator.search("python")
        clock.advance(61)
        await aggregator.search("python")

        assert len(ddg.queries) == 2
