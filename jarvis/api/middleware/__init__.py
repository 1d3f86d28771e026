"""
API Middleware module.

Contains middleware for:
- Rate limiting
- Request logging
"""

from jarvis.api.middleware.logging import LoggingConfig, RequestLoggingMiddleware
from jarvis.api.middleware.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimitMiddleware,
)

__all__ = [
    "InMemoryRateLimiter",
    "LoggingConfig",
    "RateLimitConfig",
    "RateLimitMiddleware",
    "RequestLoggingMiddleware",
]
