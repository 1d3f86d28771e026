"""
API Request Logging Middleware.

Sandi Metz Principles:
- Single Responsibility: Request/response logging
- Non-intrusive: Only adds the X-Request-ID header
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from jarvis.utils.logger import get_logger, log_request, log_response

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    enabled: bool = True
    excluded_paths: List[str] = field(default_factory=lambda: ["/health"])
    slow_request_threshold_ms: float = 5000.0


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request and its outcome.

    The request ID is stored on request.state for downstream handlers.
    """

    def __init__(self, app, config: Optional[LoggingConfig] = None):
        """
        Initialize middleware.

        Args:
            app: FastAPI application
            config: Logging configuration
        """
        super().__init__(app)
        self._config = config or LoggingConfig()

    def _should_log(self, path: str) -> bool:
        return self._config.enabled and path not in self._config.excluded_paths

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with logging.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        if not self._should_log(request.url.path):
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        start_time = time.time()
        log_request(
            request.method,
            request.url.path,
            request_id=request_id,
            client=request.client.host if request.client else "unknown",
            user_agent=request.headers.get("User-Agent", "unknown")[:100],
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                request_id=request_id,
                duration_ms=round((time.time() - start_time) * 1000, 2),
                error=str(e),
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        if duration_ms > self._config.slow_request_threshold_ms:
            logger.warning("Slow request detected", request_id=request_id, duration_ms=round(duration_ms, 2))
        log_response(response.status_code, round(duration_ms, 2), request_id=request_id)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
