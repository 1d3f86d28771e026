"""
Single-shot task endpoints.

Translation, summarization, code assistance and model information.

Sandi Metz Principles:
- Single Responsibility: HTTP request handling
- Dependency Injection: Task service injected
"""

from fastapi import APIRouter, Depends

from jarvis.api.deps import get_task_service
from jarvis.models.task import (
    ApiKeyStatus,
    CodeAssistRequest,
    CodeAssistResponse,
    ModelCatalog,
    SummarizeRequest,
    SummaryResponse,
    TranslateRequest,
    TranslationResponse,
)
from jarvis.services.task_service import TaskService

router = APIRouter()


@router.post("/translate", response_model=TranslationResponse)
async def translate(
    body: TranslateRequest,
    tasks: TaskService = Depends(get_task_service),  # noqa: B008
) -> TranslationResponse:
    """
    Translate text into the target language.

    Args:
        body: Translation request
        tasks: Task service (injected)

    Returns:
        Translated text with formatted answer
    """
    return await tasks.translate(
        body.text, body.target_lang, source_lang=body.source_lang, encoding=body.format
    )


@router.post("/summarize", response_model=SummaryResponse)
async def summarize(
    body: SummarizeRequest,
    tasks: TaskService = Depends(get_task_service),  # noqa: B008
) -> SummaryResponse:
    """
    Summarize text.

    Args:
        body: Summarization request
        tasks: Task service (injected)

    Returns:
        Summary with key points
    """
    return await tasks.summarize(
        body.text,
        ratio=body.ratio,
        style=body.style,
        encoding=body.format,
        include_key_points=body.include_key_points,
    )


@router.post("/code", response_model=CodeAssistResponse)
async def code_assist(
    body: CodeAssistRequest,
    tasks: TaskService = Depends(get_task_service),  # noqa: B008
) -> CodeAssistResponse:
    """
    Answer a programming question.

    Args:
        body: Code assistance request
        tasks: Task service (injected)

    Returns:
        Answer with extracted code blocks
    """
    return await tasks.code_assist(
        body.query, language=body.language, context=body.context, encoding=body.format
    )


@router.get("/models", response_model=ModelCatalog)
async def list_models(
    tasks: TaskService = Depends(get_task_service),  # noqa: B008
) -> ModelCatalog:
    """List the models the service can call."""
    return tasks.list_models()


@router.post("/models/verify", response_model=ApiKeyStatus)
async def verify_api_key(
    tasks: TaskService = Depends(get_task_service),  # noqa: B008
) -> ApiKeyStatus:
    """Check the provider credentials with one minimal completion."""
    return await tasks.check_api_key()
