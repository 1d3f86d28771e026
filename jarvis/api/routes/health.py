"""
Health check endpoint.

Sandi Metz Principles:
- Single Responsibility: Health check logic only
- Small functions: Each check isolated
"""

from fastapi import APIRouter, Request

from jarvis import __version__
from jarvis.config import config
from jarvis.models.response import HealthResponse
from jarvis.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


async def check_durable_cache(request: Request) -> bool:
    """Check Redis reachability."""
    state = getattr(request.app.state, "app_state", None)
    if state is None or state.durable is None:
        return False
    return await state.durable.ping()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Degraded when Redis is unreachable; the service still answers
    from the memory cache.

    Returns:
        Health status response
    """
    state = getattr(request.app.state, "app_state", None)
    settings = state.settings if state else config
    durable = await check_durable_cache(request)

    return HealthResponse(
        status="healthy" if durable else "degraded",
        environment=settings.app_env,
        version=__version__,
        cache_enabled=state.cache.enabled if state else settings.enable_caching,
        durable_cache=durable,
        search_providers=state.registry.names() if state else [],
    )
