"""
API dependency injection.

Services are built once in the application lifespan; these helpers
hand them to route handlers.

Sandi Metz Principles:
- Single Responsibility: Dependency lookup and injection
- Dependency Inversion: Routes receive services, never build them
"""

from fastapi import Request

from jarvis.cache.cache_store import CacheStore
from jarvis.config import AppConfig
from jarvis.exceptions import ConfigurationError
from jarvis.search.aggregator import SearchAggregator
from jarvis.services.response_pipeline import ResponsePipeline
from jarvis.services.task_service import TaskService


def get_app_state(request: Request):
    """
    Get application state.

    Args:
        request: FastAPI request

    Returns:
        ApplicationState built at startup

    Raises:
        ConfigurationError: If startup has not run
    """
    state = getattr(request.app.state, "app_state", None)
    if state is None:
        raise ConfigurationError("Application state not initialized")
    return state


async def get_settings(request: Request) -> AppConfig:
    return get_app_state(request).settings


async def get_pipeline(request: Request) -> ResponsePipeline:
    return get_app_state(request).pipeline


async def get_search_aggregator(request: Request) -> SearchAggregator:
    return get_app_state(request).search


async def get_cache_store(request: Request) -> CacheStore:
    return get_app_state(request).cache


async def get_task_service(request: Request) -> TaskService:
    return get_app_state(request).tasks
