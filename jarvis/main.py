"""
Main FastAPI application.

Following Sandi Metz:
- Single Responsibility: Application setup and configuration
- Small methods: Each lifecycle stage isolated
- Clear naming: Descriptive function names
"""

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import ConnectionPool
from starlette.middleware.gzip import GZipMiddleware

from jarvis import __version__
from jarvis.api.errors import register_exception_handlers
from jarvis.api.middleware import (
    LoggingConfig,
    RateLimitConfig,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
)
from jarvis.api.routes import cache, chat, health, search, tasks
from jarvis.cache.cache_store import CacheStore
from jarvis.config import AppConfig, config
from jarvis.llm.completion_client import CompletionClient
from jarvis.llm.groq_provider import GroqProvider
from jarvis.llm.retry import RetryConfig
from jarvis.repositories.memory_repository import MemoryRepository
from jarvis.repositories.redis_repository import RedisRepository, create_redis_pool
from jarvis.search.aggregator import SearchAggregator
from jarvis.search.registry import SearchProviderRegistry
from jarvis.services.collaborators import (
    LoggingAnalyticsRecorder,
    LoggingLearningRecorder,
    StaticLocalDataSource,
)
from jarvis.services.prompt_builder import PromptBuilder
from jarvis.services.response_formatter import ResponseFormatter
from jarvis.services.response_pipeline import ResponsePipeline
from jarvis.services.task_service import TaskService
from jarvis.utils.logger import get_logger, setup_logging

setup_logging(config.log_level)
logger = get_logger(__name__)


class ApplicationState:
    """
    Manages application-wide state.

    Single Responsibility: Lifecycle management of shared resources.
    """

    def __init__(self, settings: AppConfig | None = None) -> None:
        self.settings = settings or config
        self.redis_pool: Optional[ConnectionPool] = None
        self.http_client: Optional[httpx.AsyncClient] = None
        self.durable: Optional[RedisRepository] = None
        self.cache: Optional[CacheStore] = None
        self.registry: Optional[SearchProviderRegistry] = None
        self.search: Optional[SearchAggregator] = None
        self.provider: Optional[GroqProvider] = None
        self.completion_client: Optional[CompletionClient] = None
        self.pipeline: Optional[ResponsePipeline] = None
        self.tasks: Optional[TaskService] = None
        self._sweeper: Optional[asyncio.Task] = None

    async def startup(self) -> None:
        """Initialize application resources."""
        s = self.settings
        logger.info("Starting JARVIS", env=s.app_env)
        try:
            self.redis_pool = await create_redis_pool(s)
            self.durable = RedisRepository(self.redis_pool, key_prefix=s.redis_key_prefix)
            self.cache = CacheStore(
                memory=MemoryRepository(max_entries=s.memory_cache_max_entries),
                durable=self.durable,
                enabled=s.enable_caching,
            )

            self.http_client = httpx.AsyncClient(
                timeout=s.search_timeout_ms / 1000, follow_redirects=True
            )
            self.registry = SearchProviderRegistry.from_config(s)
            self.search = SearchAggregator(
                self.registry,
                self.http_client,
                cache=self.cache,
                default_sources=s.default_sources_list,
                max_limit=s.search_max_limit,
                cache_ttl_seconds=s.cache_ttl_seconds,
            )

            if not s.groq_api_key:
                logger.warning("GROQ_API_KEY is not set; completions will fail")
            self.provider = GroqProvider(s.groq_api_key, base_url=s.llm_base_url)
            self.completion_client = CompletionClient(
                self.provider,
                cache=self.cache,
                backup_model=s.backup_model,
                cache_ttl_seconds=s.completion_cache_ttl_seconds,
                retry_config=RetryConfig(
                    initial_delay=s.llm_retry_base_delay,
                    max_delay=s.llm_retry_max_delay,
                ),
                cache_key_chars=s.prompt_cache_key_chars,
            )
            self.pipeline = ResponsePipeline(
                self.completion_client,
                formatter=ResponseFormatter(),
                prompt_builder=PromptBuilder(s),
                cache=self.cache,
                search=self.search,
                local_data=StaticLocalDataSource(),
                analytics=LoggingAnalyticsRecorder(),
                learning=LoggingLearningRecorder(),
                settings=s,
            )
            self.tasks = TaskService(
                self.completion_client, formatter=ResponseFormatter(), settings=s
            )

            if s.cache_sweep_interval_seconds:
                self._sweeper = asyncio.create_task(self._sweep(s.cache_sweep_interval_seconds))
            logger.info("JARVIS started successfully", search_providers=self.registry.names())
        except Exception as e:
            logger.error("Failed to initialize JARVIS", error=str(e))
            raise

    async def shutdown(self) -> None:
        """Cleanup application resources."""
        logger.info("Shutting down JARVIS")
        if self._sweeper:
            self._sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await self._sweeper
            self._sweeper = None
        try:
            if self.http_client:
                await self.http_client.aclose()
            if self.provider:
                await self.provider.close()
            if self.redis_pool:
                await self.redis_pool.disconnect()
                logger.info("Redis pool closed")
            logger.info("JARVIS shut down successfully")
        except Exception as e:
            logger.error("Error during shutdown", error=str(e))

    async def _sweep(self, interval_seconds: int) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            removed = await self.cache.purge_expired()
            logger.debug("Cache sweep", removed=removed)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    state = ApplicationState(getattr(app.state, "settings", None))
    await state.startup()
    app.state.app_state = state

    yield

    await state.shutdown()


def create_application(settings: AppConfig | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Application configuration (global config if None)

    Returns:
        Configured FastAPI application instance.
    """
    s = settings or config
    app = FastAPI(
        title=s.app_name,
        description="JARVIS portfolio assistant: cached, search-enriched LLM answers",
        version=__version__,
        docs_url="/docs" if s.is_development else None,
        redoc_url="/redoc" if s.is_development else None,
        lifespan=lifespan,
    )
    app.state.settings = s

    # Last added runs first
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        RateLimitMiddleware,
        config=RateLimitConfig(
            max_requests=s.rate_limit_requests,
            window_seconds=s.rate_limit_window_seconds,
            enabled=s.enable_rate_limit,
        ),
    )
    app.add_middleware(RequestLoggingMiddleware, config=LoggingConfig())
    app.add_middleware(
        CORSMiddleware,
        allow_origins=s.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(chat.router, prefix="/api/v1", tags=["chat"])
    app.include_router(search.router, prefix="/api/v1", tags=["search"])
    app.include_router(cache.router, prefix="/api/v1", tags=["cache"])
    app.include_router(tasks.router, prefix="/api/v1", tags=["tasks"])

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "jarvis.main:app",
        host=config.api_host,
        port=config.api_port,
        reload=config.is_development,
    )
