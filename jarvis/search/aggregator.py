"""
Multi-provider search aggregation.

Sandi Metz Principles:
- Single Responsibility: Fan-out, merge and cache search results
- Dependency Injection: Registry, HTTP client and cache injected
- Fail soft: A failing provider contributes nothing
"""

import asyncio
import time
from typing import List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from jarvis.cache.cache_store import CacheStore
from jarvis.exceptions import AggregatorProviderError
from jarvis.models.search import SearchOptions, SearchResult
from jarvis.search.providers.base import SearchProvider
from jarvis.search.registry import SearchProviderRegistry
from jarvis.utils.hasher import generate_search_key
from jarvis.utils.logger import get_logger, log_search_provider

logger = get_logger(__name__)


class SearchAggregator:
    """
    Concurrent search over registered providers.

    Results keep requested-provider order, are deduplicated by URL
    (first occurrence wins) and are never re-sorted by confidence.
    """

    def __init__(
        self,
        registry: SearchProviderRegistry,
        client: httpx.AsyncClient,
        cache: Optional[CacheStore] = None,
        default_sources: Optional[List[str]] = None,
        max_limit: int = 20,
        cache_ttl_seconds: int = 3600,
    ):
        """
        Initialize aggregator.

        Args:
            registry: Provider registry
            client: Shared HTTP client
            cache: Optional cache store
            default_sources: Providers used when a search names none
            max_limit: Upper bound for the result limit
            cache_ttl_seconds: TTL of cached result lists
        """
        self._registry = registry
        self._client = client
        self._cache = cache
        self._default_sources = default_sources or registry.names()
        self._max_limit = max_limit
        self._ttl = cache_ttl_seconds

    async def search(
        self, query: str, options: Optional[SearchOptions] = None
    ) -> List[SearchResult]:
        """
        Search every requested provider.

        Args:
            query: Search query
            options: Limit, sources, cache bypass and per-provider timeout

        Returns:
            Deduplicated results, at most ``limit`` long
        """
        options = options or SearchOptions()
        query = query.strip()
        if not query:
            return []

        limit = min(max(options.limit, 1), self._max_limit)
        key = generate_search_key(query, limit)

        if self._cache and not options.force_fresh:
            cached = await self._check_cache(key)
            if cached is not None:
                return cached

        providers = self._resolve(options.sources)
        batches = await asyncio.gather(
            *(self._fetch_one(p, query, options.timeout_ms) for p in providers)
        )
        results = self._merge(batches, limit)

        if self._cache and results:
            await self._cache.set(
                key,
                [r.model_dump(mode="json") for r in results],
                self._ttl,
                source="search",
            )

        logger.info(
            "Search completed",
            providers=[p.name for p in providers],
            results=len(results),
        )
        return results

    def _resolve(self, sources: Optional[List[str]]) -> List[SearchProvider]:
        """
        Map requested names to registered providers, in order.

        Args:
            sources: Requested provider names (defaults if empty)

        Returns:
            Providers to query, without duplicates
        """
        providers: List[SearchProvider] = []
        for name in sources or self._default_sources:
            provider = self._registry.get(name)
            if provider is None:
                logger.warning("Unknown search provider skipped", provider=name)
                continue
            if provider not in providers:
                providers.append(provider)
        return providers

    async def _fetch_one(
        self, provider: SearchProvider, query: str, timeout_ms: int
    ) -> List[SearchResult]:
        """
        Query one provider within its time budget.

        Args:
            provider: Provider to query
            query: Search query
            timeout_ms: Time budget

        Returns:
            Provider results, or an empty list on any failure
        """
        start = time.perf_counter()
        try:
            results = await asyncio.wait_for(
                provider.fetch(self._client, query), timeout=timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            error = AggregatorProviderError(provider.name, f"timed out after {timeout_ms} ms")
        except Exception as e:
            error = AggregatorProviderError(provider.name, f"{type(e).__name__}: {e}")
        else:
            log_search_provider(provider.name, len(results), (time.perf_counter() - start) * 1000)
            return results

        logger.warning("Search provider failed", provider=error.provider, error=str(error))
        return []

    @staticmethod
    def _merge(batches: List[List[SearchResult]], limit: int) -> List[SearchResult]:
        seen = set()
        merged = []
        for batch in batches:
            for result in batch:
                if not result.url or result.url in seen:
                    continue
                seen.add(result.url)
                merged.append(result)
        return merged[:limit]

    async def _check_cache(self, key: str) -> Optional[List[SearchResult]]:
        payload = await self._cache.get(key)
        if not payload:
            return None
        try:
            return [SearchResult.model_validate(item) for item in payload]
        except PydanticValidationError as e:
            logger.warning("Discarding unreadable cached search", key=key, error=str(e))
            return None
