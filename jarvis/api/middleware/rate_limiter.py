"""
API Rate Limiting Middleware.

Limits request rates per caller identity.

Sandi Metz Principles:
- Single Responsibility: Rate limiting
- Configurable: Limit and window from settings
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from jarvis.models.error import ErrorResponse
from jarvis.utils.logger import get_logger

logger = get_logger(__name__)

SESSION_HEADER = "X-Session-ID"
EXEMPT_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")


@dataclass
class RateLimitConfig:
    """Rate limit configuration."""

    max_requests: int = 20
    window_seconds: int = 60
    enabled: bool = True


class InMemoryRateLimiter:
    """
    Sliding window counter keyed by caller identity.

    Identity is the X-Session-ID header, else the client address.
    """

    def __init__(self, config: RateLimitConfig, clock: Callable[[], float] = time.time):
        """
        Initialize rate limiter.

        Args:
            config: Rate limit configuration
            clock: Source of the current time in seconds
        """
        self._config = config
        self._clock = clock
        self._requests: Dict[str, List[float]] = {}

    @staticmethod
    def client_key(request: Request) -> str:
        """Get unique caller identifier."""
        session_id = request.headers.get(SESSION_HEADER)
        if session_id:
            return f"session:{session_id}"
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return f"ip:{forwarded.split(',')[0].strip()}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    def _cleanup(self, key: str, now: float) -> List[float]:
        cutoff = now - self._config.window_seconds
        hits = [t for t in self._requests.get(key, []) if t > cutoff]
        self._requests[key] = hits
        return hits

    def check(self, key: str) -> tuple[bool, int]:
        """
        Check and record one request.

        Args:
            key: Caller identity

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        if not self._config.enabled:
            return (True, 0)

        now = self._clock()
        hits = self._cleanup(key, now)

        if len(hits) >= self._config.max_requests:
            retry_after = self._config.window_seconds - int(now - min(hits))
            logger.warning(
                "Rate limit exceeded",
                client=key,
                count=len(hits),
                limit=self._config.max_requests,
            )
            return (False, max(1, retry_after))

        hits.append(now)
        return (True, 0)

    def remaining(self, key: str) -> int:
        """Get remaining requests in current window."""
        hits = self._cleanup(key, self._clock())
        return max(0, self._config.max_requests - len(hits))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for rate limiting.

    Rejected requests get a 429 ErrorResponse; allowed ones get
    X-RateLimit-* headers.
    """

    def __init__(
        self,
        app,
        config: Optional[RateLimitConfig] = None,
        rate_limiter: Optional[InMemoryRateLimiter] = None,
    ):
        """
        Initialize middleware.

        Args:
            app: FastAPI application
            config: Rate limit configuration
            rate_limiter: Rate limiter instance
        """
        super().__init__(app)
        self._config = config or RateLimitConfig()
        self._limiter = rate_limiter or InMemoryRateLimiter(self._config)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with rate limiting.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response with rate limit headers
        """
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        key = self._limiter.client_key(request)
        allowed, retry_after = self._limiter.check(key)

        if not allowed:
            body = ErrorResponse.rate_limit_exceeded(retry_after)
            return JSONResponse(
                status_code=429,
                content=body.model_dump(mode="json", exclude_none=True),
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self._config.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(self._limiter.remaining(key))
        response.headers["X-RateLimit-Reset"] = str(int(time.time()) + self._config.window_seconds)
        return response
