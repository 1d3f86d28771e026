"""
Query request and validation models.

Sandi Metz Principles:
- Small classes focused on data validation
- Clear property names
- Single responsibility per model
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QueryAnalysis(BaseModel):
    """Query analysis computed outside the core."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(default="general", description="Query type")
    category: str = Field(default="general", description="Query category")
    complexity: str = Field(default="medium", description="Complexity level")
    sentiment: str = Field(default="neutral", description="Sentiment label")
    language: str = Field(default="en", description="Detected language")
    topics: List[str] = Field(default_factory=list)
    needs_web_search: bool = Field(default=False)
    needs_local_data: bool = Field(default=False)
    search_sources: Optional[List[str]] = Field(
        default=None, description="Preferred search providers"
    )

    def summary(self) -> Dict[str, Any]:
        """Fields surfaced to prompts and formatted metadata."""
        return {
            "type": self.type,
            "category": self.category,
            "complexity": self.complexity,
            "sentiment": self.sentiment,
            "language": self.language,
            "topics": list(self.topics),
        }


class ConversationTurn(BaseModel):
    """One prior query/response pair."""

    model_config = ConfigDict(frozen=True)

    query: Optional[str] = None
    response: Optional[str] = None


class LocalRecord(BaseModel):
    """Pre-fetched portfolio record (project, blog post, skill...)."""

    model_config = ConfigDict(frozen=True)

    kind: str = Field(default="project", description="Record group")
    title: str = Field(...)
    description: str = Field(default="")
    url: Optional[str] = None


class GenerateOptions(BaseModel):
    """Per-request overrides for ResponsePipeline.generate()."""

    model_config = ConfigDict(frozen=True)

    model: Optional[str] = Field(default=None, description="Model override")
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    use_cache: bool = Field(default=True)
    timeout_ms: Optional[int] = Field(default=None, gt=0, description="Overall deadline")
    style: str = Field(default="jarvis")
    encoding: str = Field(default="structured")
    max_length: Optional[int] = Field(default=None, gt=0)
    include_sources: bool = Field(default=True)
    include_metadata: bool = Field(default=True)
    language: str = Field(default="en")


class ChatRequest(BaseModel):
    """Incoming chat request."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="User message",
        examples=["What is Uzbekistan's capital?"],
    )
    analysis: QueryAnalysis = Field(default_factory=QueryAnalysis)
    context: List[ConversationTurn] = Field(default_factory=list)
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    force_fresh: bool = Field(default=False, description="Skip every cache")
    timeout_ms: Optional[int] = Field(default=None, gt=0)
    style: str = Field(default="jarvis")
    format: str = Field(default="structured", description="Answer encoding")
    include_sources: bool = Field(default=True)
    include_metadata: bool = Field(default=True)
    language: str = Field(default="en")
    include_raw_results: bool = Field(default=False)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Validate and normalize message."""
        v = v.strip()
        if not v:
            raise ValueError("Message cannot be empty")
        return v

    def to_options(self) -> GenerateOptions:
        """Build pipeline options from the request."""
        return GenerateOptions(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            use_cache=not self.force_fresh,
            timeout_ms=self.timeout_ms,
            style=self.style,
            encoding=self.format,
            include_sources=self.include_sources,
            include_metadata=self.include_metadata,
            language=self.language,
        )


class SearchRequest(BaseModel):
    """Incoming web search request."""

    query: str = Field(..., min_length=1, max_length=1000)
    limit: Optional[int] = Field(default=None, ge=1)
    sources: Optional[List[str]] = None
    force_fresh: bool = False
    timeout_ms: Optional[int] = Field(default=None, gt=0)

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Validate and normalize query."""
        v = v.strip()
        if not v:
            raise ValueError("Search query cannot be empty")
        return v


class ClearCacheRequest(BaseModel):
    """Parameters for a bulk cache clear."""

    scope: Literal["all", "memory", "durable"] = "all"
    older_than_seconds: Optional[int] = Field(
        default=None, ge=0, description="Only entries created before now minus this"
    )
