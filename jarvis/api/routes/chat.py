"""
Chat endpoint.

Sandi Metz Principles:
- Single Responsibility: HTTP request handling
- Small functions: Minimal logic in endpoints
- Dependency Injection: Pipeline injected
"""

from fastapi import APIRouter, Depends, Request

from jarvis.api.deps import get_pipeline
from jarvis.api.middleware.rate_limiter import InMemoryRateLimiter, SESSION_HEADER
from jarvis.models.query import ChatRequest
from jarvis.models.response import ChatResponse
from jarvis.pipeline.request_context import RequestContext
from jarvis.services.response_pipeline import ResponsePipeline

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    request: Request,
    pipeline: ResponsePipeline = Depends(get_pipeline),  # noqa: B008
) -> ChatResponse:
    """
    Generate an answer for a chat message.

    Args:
        body: Chat request
        request: FastAPI request
        pipeline: Response pipeline (injected)

    Returns:
        Chat response
    """
    ctx = RequestContext.create(
        query=body.message,
        session_id=request.headers.get(SESSION_HEADER),
        client_id=InMemoryRateLimiter.client_key(request),
        request_id=getattr(request.state, "request_id", None),
    )
    result = await pipeline.generate(
        body.message,
        analysis=body.analysis,
        context=body.context,
        options=body.to_options(),
        request_context=ctx,
    )
    return ChatResponse(
        response=result.answer,
        analysis=body.analysis,
        metadata=result.metadata,
        raw_results=result.search_results if body.include_raw_results else None,
    )
