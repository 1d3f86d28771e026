"""
Cache administration endpoints.

Sandi Metz Principles:
- Single Responsibility: HTTP request handling
- Dependency Injection: Cache store injected
"""

from datetime import timedelta

from fastapi import APIRouter, Depends

from jarvis.api.deps import get_cache_store
from jarvis.cache.cache_store import CacheStore
from jarvis.models.cache_entry import CacheScope, CacheStats, utc_now
from jarvis.models.query import ClearCacheRequest
from jarvis.models.response import CacheClearResponse, TagInvalidationResponse

router = APIRouter()


@router.delete("/cache", response_model=CacheClearResponse)
async def clear_cache(
    params: ClearCacheRequest = Depends(),  # noqa: B008
    cache: CacheStore = Depends(get_cache_store),  # noqa: B008
) -> CacheClearResponse:
    """
    Clear cache entries.

    Args:
        params: Scope and optional age cutoff (query parameters)
        cache: Cache store (injected)

    Returns:
        Counts removed per backend
    """
    older_than = None
    if params.older_than_seconds is not None:
        older_than = utc_now() - timedelta(seconds=params.older_than_seconds)

    cleared = await cache.clear(CacheScope(params.scope), older_than=older_than)
    return CacheClearResponse(cleared=cleared)


@router.delete("/cache/tags/{tag}", response_model=TagInvalidationResponse)
async def invalidate_tag(
    tag: str,
    cache: CacheStore = Depends(get_cache_store),  # noqa: B008
) -> TagInvalidationResponse:
    """Remove every entry stored under a tag."""
    removed = await cache.invalidate_tag(tag)
    return TagInvalidationResponse(tag=tag, removed=removed)


@router.get("/cache/stats", response_model=CacheStats)
async def cache_stats(
    cache: CacheStore = Depends(get_cache_store),  # noqa: B008
) -> CacheStats:
    """Per-backend entry counts."""
    return await cache.stats()
