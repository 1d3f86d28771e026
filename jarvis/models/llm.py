"""
LLM request and response models.

Sandi Metz Principles:
- Small classes focused on LLM interaction
- Clear separation of request and response
- Immutable data structures
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FinishReason(str, Enum):
    """Why the provider stopped generating."""

    STOP = "stop"
    LENGTH = "length"
    ERROR = "error"

    @classmethod
    def parse(cls, value: Optional[str]) -> "FinishReason":
        """Map a provider finish reason onto the enum."""
        if value == "length":
            return cls.LENGTH
        if value in (None, "stop", "eos", "end_turn", "tool_calls"):
            return cls.STOP
        return cls.ERROR


class SpeedRating(str, Enum):
    """Coarse throughput rating."""

    ULTRA_FAST = "ultra_fast"
    VERY_FAST = "very_fast"
    FAST = "fast"
    MODERATE = "moderate"
    SLOW = "slow"
    UNKNOWN = "unknown"


class CompletionRequest(BaseModel):
    """One completion call. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    system_prompt: str = Field(..., description="System instruction")
    user_prompt: str = Field(..., min_length=1, description="User message")
    model: str = Field(..., min_length=1, description="Requested model")
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    max_tokens: int = Field(default=1500, gt=0)
    use_cache: bool = Field(default=True)
    retry_budget: int = Field(default=2, ge=0)
    timeout_ms: int = Field(default=30000, gt=0)
    top_p: float = Field(default=0.9, ge=0.0, le=1.0)
    frequency_penalty: float = Field(default=0.1, ge=-2.0, le=2.0)
    presence_penalty: float = Field(default=0.1, ge=-2.0, le=2.0)


class ProviderReply(BaseModel):
    """Raw reply of a single provider call."""

    content: str = Field(default="", description="Generated text")
    total_tokens: int = Field(default=0, ge=0)
    finish_reason: Optional[str] = Field(default=None)
    model: str = Field(..., description="Model that answered")
    status_code: int = Field(default=200)


class CompletionResult(BaseModel):
    """Normalized result of CompletionClient.complete()."""

    text: str = Field(..., description="Sanitized generated text")
    tokens_used: int = Field(..., ge=0)
    model: str = Field(..., description="Model used (backup on fallback)")
    finish_reason: FinishReason = Field(default=FinishReason.STOP)
    elapsed_ms: float = Field(..., ge=0.0)
    served_from_cache: bool = Field(default=False)
    speed_rating: SpeedRating = Field(default=SpeedRating.UNKNOWN)
    attempts: int = Field(default=1, ge=0, description="Provider calls made")
