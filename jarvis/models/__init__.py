"""
Models package for JARVIS.

Exports all model classes for easy imports throughout the application.
"""

# Answer models
from jarvis.models.answer import (
    AnswerEncoding,
    AnswerStyle,
    FormatContext,
    FormatOptions,
    FormattedAnswer,
)

# Cache models
from jarvis.models.cache_entry import CacheEntry, CacheScope, CacheStats

# Error models
from jarvis.models.error import ErrorCode, ErrorResponse

# LLM models
from jarvis.models.llm import (
    CompletionRequest,
    CompletionResult,
    FinishReason,
    ProviderReply,
    SpeedRating,
)

# Query models
from jarvis.models.query import (
    ChatRequest,
    ConversationTurn,
    GenerateOptions,
    LocalRecord,
    QueryAnalysis,
    SearchRequest,
)

# Response models
from jarvis.models.response import AnswerMetadata, ChatResponse, PipelineResult

# Search models
from jarvis.models.search import (
    ResultKind,
    SearchOptions,
    SearchResult,
    SearchSource,
    SearchSummary,
)

__all__ = [
    "AnswerEncoding",
    "AnswerMetadata",
    "AnswerStyle",
    "CacheEntry",
    "CacheScope",
    "CacheStats",
    "ChatRequest",
    "ChatResponse",
    "CompletionRequest",
    "CompletionResult",
    "ConversationTurn",
    "ErrorCode",
    "ErrorResponse",
    "FinishReason",
    "FormatContext",
    "FormatOptions",
    "FormattedAnswer",
    "GenerateOptions",
    "LocalRecord",
    "PipelineResult",
    "ProviderReply",
    "QueryAnalysis",
    "ResultKind",
    "SearchOptions",
    "SearchRequest",
    "SearchResult",
    "SearchSource",
    "SearchSummary",
    "SpeedRating",
]
