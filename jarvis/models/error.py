"""
Error response models.

Sandi Metz Principles:
- Small classes with clear purpose
- Consistent error handling
- Clear naming conventions
"""

import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from jarvis.exceptions import AppError


class ErrorCode(str, Enum):
    """Standard error codes for API responses."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    TIMEOUT = "TIMEOUT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


_CATEGORY_CODES = {
    "validation": (ErrorCode.VALIDATION_ERROR, 422),
    "provider": (ErrorCode.PROVIDER_ERROR, 502),
    "timeout": (ErrorCode.TIMEOUT, 504),
}


class ErrorResponse(BaseModel):
    """Standard error response format."""

    detail: str = Field(..., description="Error message describing what went wrong")
    error_code: ErrorCode = Field(..., description="Standard error code")
    category: str = Field(default="internal", description="Error category")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Error timestamp (ISO 8601)",
    )
    debug: Optional[Dict[str, Any]] = Field(
        default=None, description="Diagnostics, only in debug mode"
    )

    @classmethod
    def from_exception(
        cls, error: Exception, debug: bool = False
    ) -> tuple["ErrorResponse", int]:
        """
        Build an error body and HTTP status from an exception.

        Args:
            error: Raised exception
            debug: Include exception type and traceback

        Returns:
            Tuple of (error response, status code)
        """
        category = getattr(error, "category", "internal")
        code, status = _CATEGORY_CODES.get(category, (ErrorCode.INTERNAL_ERROR, 500))
        detail = str(error) if isinstance(error, AppError) else "Internal server error"

        diagnostics = None
        if debug:
            cause = getattr(error, "cause", None) or error.__cause__
            diagnostics = {
                "type": type(error).__name__,
                "cause": repr(cause) if cause else None,
                "traceback": traceback.format_exception(
                    type(error), error, error.__traceback__
                ),
            }

        return (
            cls(detail=detail, error_code=code, category=category, debug=diagnostics),
            status,
        )

    @classmethod
    def rate_limit_exceeded(cls, retry_after: int) -> "ErrorResponse":
        """Create rate limit exceeded error."""
        return cls(
            detail=f"Rate limit exceeded. Retry after {retry_after} seconds",
            error_code=ErrorCode.RATE_LIMIT_EXCEEDED,
            category="rate_limit",
        )
