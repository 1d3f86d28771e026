"""
Response models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable response data
- Clear naming conventions
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from jarvis.models.answer import FormattedAnswer
from jarvis.models.query import QueryAnalysis
from jarvis.models.search import SearchResult, SearchSummary


class AnswerMetadata(BaseModel):
    """Metadata returned with every generated answer."""

    tokens_used: int = Field(..., ge=0)
    model: str = Field(...)
    cache_hit: bool = Field(...)
    elapsed_ms: float = Field(..., ge=0.0)
    request_id: Optional[str] = None
    session_id: Optional[str] = None
    completion_cached: bool = Field(
        default=False, description="Completion served from the completion cache"
    )
    search_results: int = Field(default=0, ge=0)


class PipelineResult(BaseModel):
    """Result of ResponsePipeline.generate()."""

    answer: FormattedAnswer
    metadata: AnswerMetadata
    search_results: List[SearchResult] = Field(default_factory=list)


class ChatResponse(BaseModel):
    """Chat endpoint response."""

    success: bool = True
    response: FormattedAnswer
    analysis: QueryAnalysis
    metadata: AnswerMetadata
    raw_results: Optional[List[SearchResult]] = None


class SearchResponse(BaseModel):
    """Search endpoint response."""

    success: bool = True
    query: str
    results: List[SearchResult]
    summary: SearchSummary
    result_count: int = Field(..., ge=0)


class CacheClearResponse(BaseModel):
    """Counts removed per backend."""

    cleared: Dict[str, int]


class TagInvalidationResponse(BaseModel):
    """Keys removed by a tag invalidation."""

    tag: str
    removed: int = Field(..., ge=0)


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "degraded"] = Field(..., description="Service status")
    environment: str = Field(..., description="Environment name")
    version: str = Field(..., description="Application version")
    cache_enabled: bool = Field(...)
    durable_cache: bool = Field(..., description="Redis reachable")
    search_providers: List[str] = Field(default_factory=list)
