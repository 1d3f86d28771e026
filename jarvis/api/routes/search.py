"""
Web search endpoint.

Sandi Metz Principles:
- Single Responsibility: HTTP request handling
- Dependency Injection: Aggregator injected
"""

from fastapi import APIRouter, Depends

from jarvis.api.deps import get_search_aggregator, get_settings
from jarvis.config import AppConfig
from jarvis.models.query import SearchRequest
from jarvis.models.response import SearchResponse
from jarvis.models.search import SearchOptions, SearchSummary
from jarvis.search.aggregator import SearchAggregator

router = APIRouter()


@router.post("/search", response_model=SearchResponse)
async def search(
    body: SearchRequest,
    aggregator: SearchAggregator = Depends(get_search_aggregator),  # noqa: B008
    settings: AppConfig = Depends(get_settings),  # noqa: B008
) -> SearchResponse:
    """
    Search the configured providers.

    Args:
        body: Search request
        aggregator: Search aggregator (injected)
        settings: Application configuration (injected)

    Returns:
        Results with a source/kind summary
    """
    options = SearchOptions(
        limit=body.limit or settings.search_results_limit,
        sources=body.sources,
        force_fresh=body.force_fresh,
        timeout_ms=body.timeout_ms or settings.search_timeout_ms,
    )
    results = await aggregator.search(body.query, options)
    return SearchResponse(
        query=body.query,
        results=results,
        summary=SearchSummary.from_results(results),
        result_count=len(results),
    )
