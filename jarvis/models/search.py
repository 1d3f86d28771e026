"""
Web search models.

Sandi Metz Principles:
- Small classes with clear purpose
- One normalized result shape for every provider
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from jarvis.models.cache_entry import utc_now


class SearchSource(str, Enum):
    """Known search providers."""

    DUCKDUCKGO = "duckduckgo"
    WIKIPEDIA = "wikipedia"
    NEWS = "news"
    GITHUB = "github"
    STACKOVERFLOW = "stackoverflow"


class ResultKind(str, Enum):
    """Kind of content a result points to."""

    GENERAL = "general"
    ENCYCLOPEDIA = "encyclopedia"
    NEWS = "news"
    CODE = "code"
    TECHNICAL = "technical"


class SearchResult(BaseModel):
    """Normalized search result."""

    title: str = Field(..., description="Result title")
    snippet: str = Field(default="", description="Short excerpt")
    url: str = Field(..., description="Result URL (dedup key)")
    source: SearchSource = Field(..., description="Provider")
    kind: ResultKind = Field(default=ResultKind.GENERAL)
    confidence: float = Field(..., ge=0.0, le=1.0)
    fetched_at: datetime = Field(default_factory=utc_now)
    extra: Dict[str, Any] = Field(default_factory=dict)


class SearchOptions(BaseModel):
    """Options for one aggregated search."""

    limit: int = Field(default=5, ge=1)
    sources: Optional[List[str]] = Field(
        default=None, description="Provider names, in request order"
    )
    force_fresh: bool = Field(default=False, description="Bypass the cache")
    timeout_ms: int = Field(default=10000, gt=0, description="Per provider")


class SearchSummary(BaseModel):
    """Distribution of a result list."""

    total_results: int = Field(..., ge=0)
    unique_sources: int = Field(..., ge=0)
    source_distribution: Dict[str, int] = Field(default_factory=dict)
    kind_distribution: Dict[str, int] = Field(default_factory=dict)
    average_confidence: Optional[float] = Field(default=None)

    @classmethod
    def from_results(cls, results: List[SearchResult]) -> "SearchSummary":
        """Summarize a result list."""
        sources: Dict[str, int] = {}
        kinds: Dict[str, int] = {}
        for result in results:
            sources[result.source.value] = sources.get(result.source.value, 0) + 1
            kinds[result.kind.value] = kinds.get(result.kind.value, 0) + 1

        average = None
        if results:
            average = round(sum(r.confidence for r in results) / len(results), 4)

        return cls(
            total_results=len(results),
            unique_sources=len(sources),
            source_distribution=sources,
            kind_distribution=kinds,
            average_confidence=average,
        )
