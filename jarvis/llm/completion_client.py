"""
Completion client with caching, retry and model fallback.

Sandi Metz Principles:
- Single Responsibility: One completion, however many calls it takes
- Small methods: Cache, retry loop and result building isolated
- Dependency Injection: Provider, cache and sleep injected
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from jarvis.cache.cache_store import CacheStore
from jarvis.exceptions import ExhaustedRetriesError, ProviderError, TransientProviderError
from jarvis.llm.provider import BaseCompletionProvider
from jarvis.llm.response_parser import rate_speed, sanitize_text
from jarvis.llm.retry import RetryConfig, RetryPolicy
from jarvis.models.llm import (
    CompletionRequest,
    CompletionResult,
    FinishReason,
    ProviderReply,
)
from jarvis.utils.hasher import generate_completion_key
from jarvis.utils.logger import get_logger

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class CompletionClient:
    """
    Turns a CompletionRequest into a CompletionResult.

    Order: completion cache -> provider (retry with backoff, backup model
    from the second attempt on) -> sanitize -> cache.
    """

    def __init__(
        self,
        provider: BaseCompletionProvider,
        cache: Optional[CacheStore] = None,
        backup_model: Optional[str] = None,
        cache_ttl_seconds: int = 3600,
        retry_config: RetryConfig | None = None,
        cache_key_chars: int = 500,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize completion client.

        Args:
            provider: Completion provider
            cache: Optional cache store
            backup_model: Model used from the second attempt on
            cache_ttl_seconds: TTL of cached completions
            retry_config: Backoff configuration
            cache_key_chars: System prompt prefix that takes part in the key
            sleep: Awaitable sleep used between attempts
        """
        self._provider = provider
        self._cache = cache
        self._backup_model = backup_model
        self._ttl = cache_ttl_seconds
        self._retry = RetryPolicy(retry_config)
        self._key_chars = cache_key_chars
        self._sleep = sleep

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """
        Generate a completion.

        Args:
            request: Completion request

        Returns:
            Completion result

        Raises:
            PermanentProviderError: Provider rejected the request
            ExhaustedRetriesError: Every attempt failed
        """
        key = self._cache_key(request)
        if key:
            cached = await self._check_cache(key)
            if cached:
                return cached

        start = time.perf_counter()
        reply, model, attempts = await self._call_with_retries(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        result = self._build_result(reply, model, attempts, elapsed_ms)
        if key:
            await self._store(key, result)
        return result

    async def _call_with_retries(
        self, request: CompletionRequest
    ) -> Tuple[ProviderReply, str, int]:
        """
        Run the attempt loop.

        Args:
            request: Completion request

        Returns:
            Tuple of (reply, model used, attempts made)
        """
        model = request.model
        total = self._retry.total_attempts(request.retry_budget)
        last_error: Optional[Exception] = None

        for attempt in range(total):
            if attempt > 0:
                delay = self._retry.delay_before(attempt)
                logger.warning(
                    "Completion attempt failed, retrying",
                    attempt=attempt,
                    delay=delay,
                    error=str(last_error),
                )
                await self._sleep(delay)

            if attempt == 1 and self._backup_model and model != self._backup_model:
                logger.info("Switching to backup model", primary=model, backup=self._backup_model)
                model = self._backup_model

            try:
                reply = await self._provider.send(request, model)
            except ProviderError as e:
                if not self._retry.is_retryable(e):
                    raise
                last_error = e
                continue

            if not reply.content.strip():
                last_error = TransientProviderError(
                    "Provider returned an empty reply", status_code=reply.status_code
                )
                continue

            return reply, model, attempt + 1

        logger.error("Completion retries exhausted", attempts=total, error=str(last_error))
        raise ExhaustedRetriesError(total, last_error)

    def _build_result(
        self, reply: ProviderReply, model: str, attempts: int, elapsed_ms: float
    ) -> CompletionResult:
        return CompletionResult(
            text=sanitize_text(reply.content),
            tokens_used=reply.total_tokens,
            model=reply.model or model,
            finish_reason=FinishReason.parse(reply.finish_reason),
            elapsed_ms=elapsed_ms,
            served_from_cache=False,
            speed_rating=rate_speed(reply.total_tokens, elapsed_ms),
            attempts=attempts,
        )

    def _cache_key(self, request: CompletionRequest) -> Optional[str]:
        if not (request.use_cache and self._cache):
            return None
        return generate_completion_key(
            request.system_prompt,
            request.user_prompt,
            request.model,
            request.temperature,
            prefix_chars=self._key_chars,
        )

    async def _check_cache(self, key: str) -> Optional[CompletionResult]:
        """
        Look up a cached completion.

        Args:
            key: Completion cache key

        Returns:
            Cached result marked as served from cache, or None
        """
        payload = await self._cache.get(key)
        if not payload:
            return None

        try:
            result = CompletionResult.model_validate(payload)
        except PydanticValidationError as e:
            logger.warning("Discarding unreadable cached completion", key=key, error=str(e))
            return None

        return result.model_copy(
            update={"served_from_cache": True, "elapsed_ms": 0.0, "attempts": 0}
        )

    async def _store(self, key: str, result: CompletionResult) -> None:
        await self._cache.set(
            key,
            result.model_dump(mode="json"),
            self._ttl,
            source="completion",
            model=result.model,
            tokens_used=result.tokens_used,
        )
