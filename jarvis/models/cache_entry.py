"""
Cache entry models.

Sandi Metz Principles:
- Single Responsibility: Cache data structure
- Clear naming: Descriptive fields
- Immutable data: All fields are read-only after creation
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class CacheScope(str, Enum):
    """Which backend(s) a cache operation touches."""

    ALL = "all"
    MEMORY = "memory"
    DURABLE = "durable"

    def includes(self, backend: "CacheScope") -> bool:
        """Check whether this scope covers a single backend."""
        return self is CacheScope.ALL or self is backend


class CacheEntry(BaseModel):
    """Cache entry stored by a backend."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Opaque fingerprint")
    payload: Any = Field(..., description="JSON-serializable cached value")
    created_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime = Field(..., description="Expiry time")
    tags: List[str] = Field(default_factory=list, description="Invalidation tags")
    source: str = Field(default="cache", description="Producer of the payload")
    model: str = Field(default="unknown", description="Model that produced it")
    tokens_used: int = Field(default=0, ge=0, description="Tokens spent")

    @model_validator(mode="after")
    def check_expiry(self) -> "CacheEntry":
        """Expiry must come after creation."""
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be later than created_at")
        return self

    @classmethod
    def create(
        cls,
        key: str,
        payload: Any,
        ttl_seconds: float,
        now: datetime,
        tags: List[str] | None = None,
        source: str = "cache",
        model: str = "unknown",
        tokens_used: int = 0,
    ) -> "CacheEntry":
        """
        Create an entry live for ``ttl_seconds`` from ``now``.

        Args:
            key: Cache key
            payload: Value to cache
            ttl_seconds: Time to live
            now: Creation time
            tags: Optional invalidation tags
            source: Producer label
            model: Model label
            tokens_used: Token count

        Returns:
            New cache entry
        """
        return cls(
            key=key,
            payload=payload,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
            tags=list(tags or []),
            source=source,
            model=model,
            tokens_used=tokens_used,
        )

    def is_live(self, now: datetime) -> bool:
        """Check whether the entry has not yet expired."""
        return now < self.expires_at

    def remaining_seconds(self, now: datetime) -> float:
        """Seconds until expiry (0 when expired)."""
        return max(0.0, (self.expires_at - now).total_seconds())


class CacheStats(BaseModel):
    """Per-backend entry counts."""

    enabled: bool = Field(..., description="Whether caching is enabled")
    memory_entries: int = Field(default=0, ge=0)
    durable_entries: int = Field(default=0, ge=0)
    backends: Dict[str, bool] = Field(
        default_factory=dict, description="Backend reachability"
    )
