"""
Single-shot LLM task models.

Translation, summarization, code assistance and model catalog
requests and responses.

Sandi Metz Principles:
- Small classes with clear purpose
- Validation at construction
- Clear naming conventions
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jarvis.models.answer import FormattedAnswer
from jarvis.models.llm import CompletionResult, SpeedRating


class TaskMetadata(BaseModel):
    """Completion details attached to every task response."""

    model: str
    tokens_used: int = Field(..., ge=0)
    elapsed_ms: float = Field(..., ge=0.0)
    cache_hit: bool
    speed_rating: SpeedRating

    @classmethod
    def from_result(cls, result: CompletionResult) -> "TaskMetadata":
        return cls(
            model=result.model,
            tokens_used=result.tokens_used,
            elapsed_ms=round(result.elapsed_ms, 2),
            cache_hit=result.served_from_cache,
            speed_rating=result.speed_rating,
        )


class TranslateRequest(BaseModel):
    """Translation request."""

    text: str = Field(..., description="Text to translate")
    target_lang: str = Field(..., max_length=50, description="Target language")
    source_lang: str = Field(default="auto", max_length=50)
    format: str = Field(default="plain_text", description="Answer encoding")

    @field_validator("text", "target_lang")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Strip and reject blank values."""
        v = v.strip()
        if not v:
            raise ValueError("Text and target language are required")
        return v


class TranslationResponse(BaseModel):
    """Translation result."""

    success: bool = True
    original_text: str
    translated_text: str
    formatted: FormattedAnswer
    source_lang: str
    target_lang: str
    metadata: TaskMetadata


class SummarizeRequest(BaseModel):
    """Summarization request."""

    text: str = Field(..., description="Text to summarize")
    ratio: float = Field(default=0.3, description="Target length ratio, clamped to [0.1, 1]")
    style: str = Field(default="technical")
    format: str = Field(default="markup", description="Answer encoding")
    include_key_points: bool = Field(default=True)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Strip and reject blank text."""
        v = v.strip()
        if not v:
            raise ValueError("Text to summarize is required")
        return v


class SummaryResponse(BaseModel):
    """Summarization result."""

    success: bool = True
    summary: str
    formatted: FormattedAnswer
    key_points: List[str] = Field(default_factory=list)
    ratio: float
    original_length: int = Field(..., ge=0)
    summary_length: int = Field(..., ge=0)
    metadata: TaskMetadata


class CodeAssistRequest(BaseModel):
    """Code assistance request."""

    query: str = Field(..., max_length=4000, description="Coding question")
    language: str = Field(default="", max_length=50, description="Programming language")
    context: str = Field(default="", max_length=4000, description="Extra context")
    format: str = Field(default="markup", description="Answer encoding")

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Strip and reject blank queries."""
        v = v.strip()
        if not v:
            raise ValueError("Code assistance query is required")
        return v


class CodeAssistResponse(BaseModel):
    """Code assistance result."""

    success: bool = True
    answer: str
    formatted: FormattedAnswer
    code_blocks: List[str] = Field(default_factory=list)
    language: str
    metadata: TaskMetadata


class ModelInfo(BaseModel):
    """One entry of the model catalog."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    id: str
    name: str
    description: str
    context_window: int = Field(..., gt=0)
    speed: SpeedRating


class ModelCatalog(BaseModel):
    """Models the service can call."""

    models: List[ModelInfo]
    default_model: str
    backup_model: str


class ApiKeyStatus(BaseModel):
    """Result of a provider credential check."""

    valid: bool
    model: Optional[str] = None
    elapsed_ms: Optional[float] = None
    error: Optional[str] = None
