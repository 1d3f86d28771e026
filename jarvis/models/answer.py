"""
Formatted answer models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable response data
- Clear naming conventions
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from jarvis.models.query import QueryAnalysis
from jarvis.models.search import SearchResult


class AnswerStyle(str, Enum):
    """Presentation style applied to the answer text."""

    JARVIS = "jarvis"
    TECHNICAL = "technical"
    CREATIVE = "creative"
    SIMPLE = "simple"
    PLAIN = "plain"

    @classmethod
    def resolve(cls, value: Any) -> "AnswerStyle":
        """Parse a style name, defaulting to PLAIN."""
        try:
            return cls(str(getattr(value, "value", value)).lower())
        except ValueError:
            return cls.PLAIN


class AnswerEncoding(str, Enum):
    """Output encoding of the answer content."""

    PLAIN_TEXT = "plain_text"
    MARKUP = "markup"
    STRUCTURED = "structured"

    @classmethod
    def resolve(cls, value: Any) -> "AnswerEncoding":
        """Parse an encoding name, defaulting to PLAIN_TEXT."""
        try:
            return cls(str(getattr(value, "value", value)).lower())
        except ValueError:
            return cls.PLAIN_TEXT


class FormatOptions(BaseModel):
    """Options for ResponseFormatter.format()."""

    model_config = ConfigDict(frozen=True)

    style: str = Field(default=AnswerStyle.JARVIS.value)
    encoding: str = Field(default=AnswerEncoding.STRUCTURED.value)
    max_length: int = Field(default=2000, gt=0)
    include_sources: bool = Field(default=True)
    include_metadata: bool = Field(default=True)
    max_sources: int = Field(default=5, ge=0)
    language: str = Field(default="en")


class FormatContext(BaseModel):
    """Optional inputs the formatter may surface."""

    analysis: Optional[QueryAnalysis] = None
    sources: List[SearchResult] = Field(default_factory=list)


class FormattedAnswer(BaseModel):
    """Answer ready for the caller."""

    content: str = Field(..., description="Encoded answer")
    sources: List[SearchResult] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    style: AnswerStyle = Field(...)
    encoding: AnswerEncoding = Field(...)
