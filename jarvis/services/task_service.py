"""
Single-shot LLM tasks.

Translation, summarization and code assistance are fixed prompt
templates sent through CompletionClient; the model catalog and the
credential check describe and verify the configured provider.

Sandi Metz Principles:
- Single Responsibility: Prompt templates for one-off tasks
- Small methods: One public method per task
- Dependency Injection: Client, formatter and settings injected
"""

import re
from typing import List

from jarvis.config import AppConfig, config as default_config
from jarvis.exceptions import ProviderError, ValidationError
from jarvis.llm.completion_client import CompletionClient
from jarvis.models.answer import AnswerStyle, FormatOptions, FormattedAnswer
from jarvis.models.llm import CompletionRequest, CompletionResult, SpeedRating
from jarvis.models.task import (
    ApiKeyStatus,
    CodeAssistResponse,
    ModelCatalog,
    ModelInfo,
    SummaryResponse,
    TaskMetadata,
    TranslationResponse,
)
from jarvis.services.response_formatter import ResponseFormatter
from jarvis.utils.logger import get_logger

logger = get_logger(__name__)

MODEL_CATALOG = (
    ModelInfo(
        id="llama-3.3-70b-versatile",
        name="Llama 3.3 70B",
        description="Most capable model, best for complex questions",
        context_window=131072,
        speed=SpeedRating.FAST,
    ),
    ModelInfo(
        id="mixtral-8x7b-32768",
        name="Mixtral 8x7B",
        description="Balance of capability and speed",
        context_window=32768,
        speed=SpeedRating.VERY_FAST,
    ),
    ModelInfo(
        id="gemma2-9b-it",
        name="Gemma2 9B",
        description="Lightweight and very fast",
        context_window=8192,
        speed=SpeedRating.ULTRA_FAST,
    ),
    ModelInfo(
        id="llama-3.2-1b-preview",
        name="Llama 3.2 1B",
        description="Smallest model, fastest replies",
        context_window=8192,
        speed=SpeedRating.ULTRA_FAST,
    ),
)

TRANSLATE_PROMPT = """You are a professional translator.
Translate the user's text from {source} to {target}.

RULES:
1. Keep the original meaning and intent
2. Keep cultural context and use natural phrasing in {target}
3. Render idioms with equivalent expressions
4. Keep technical terms accurate

Reply with the translation only, without commentary."""

SUMMARIZE_PROMPT = """You are a summarization expert.
Summarize the user's text in roughly {percent}% of its length, keeping:
1. Main ideas and key points
2. Important facts and figures
3. Conclusions and recommendations

Use bullet points for key takeaways and keep the original tone."""

CODE_PROMPT = """You are an expert coding assistant for {language}.
You write, explain, debug and optimize code.

RULES:
1. Give complete, runnable examples in fenced code blocks
2. Explain complex parts briefly
3. Include error handling
4. Follow {language} best practices
5. Mention alternatives when they matter"""

CREDENTIAL_PROMPT = 'You are a test assistant. Reply with "API key is valid."'

_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+(.+)$")
_SENTENCE = re.compile(r"(?<=[.!?])\s+")
_CODE_BLOCK = re.compile(r"```[\w+#.-]*\n(.*?)```", re.DOTALL)

MAX_KEY_POINTS = 5


class TaskService:
    """
    Runs translation, summarization and code assistance.

    Every task is one CompletionClient call, so tasks share its cache,
    retry and backup-model behaviour.
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        formatter: ResponseFormatter | None = None,
        settings: AppConfig | None = None,
    ):
        """
        Initialize task service.

        Args:
            completion_client: Completion client
            formatter: Answer formatter
            settings: Application configuration (global config if None)
        """
        self._completion = completion_client
        self._formatter = formatter or ResponseFormatter()
        self._settings = settings or default_config

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str = "auto",
        encoding: str = "plain_text",
    ) -> TranslationResponse:
        """
        Translate text.

        Args:
            text: Text to translate
            target_lang: Target language
            source_lang: Source language ("auto" to detect)
            encoding: Answer encoding

        Returns:
            Translation with formatted answer

        Raises:
            ValidationError: Blank or too long text
            ProviderError: Completion failed
        """
        text = text.strip()
        if not text or not target_lang.strip():
            raise ValidationError("Text and target language are required")
        if len(text) > self._settings.translate_max_chars:
            raise ValidationError(
                f"Text too long for translation, maximum "
                f"{self._settings.translate_max_chars} characters"
            )

        system_prompt = TRANSLATE_PROMPT.format(source=source_lang, target=target_lang)
        result = await self._run("translate", system_prompt, text, temperature=0.3, max_tokens=1000)
        return TranslationResponse(
            original_text=text,
            translated_text=result.text,
            formatted=self._format(result, AnswerStyle.SIMPLE.value, encoding),
            source_lang=source_lang,
            target_lang=target_lang,
            metadata=TaskMetadata.from_result(result),
        )

    async def summarize(
        self,
        text: str,
        ratio: float = 0.3,
        style: str = AnswerStyle.TECHNICAL.value,
        encoding: str = "markup",
        include_key_points: bool = True,
    ) -> SummaryResponse:
        """
        Summarize text.

        Args:
            text: Text to summarize
            ratio: Target length ratio, clamped to [0.1, 1.0]
            style: Answer style
            encoding: Answer encoding
            include_key_points: Extract bullet points from the summary

        Returns:
            Summary with formatted answer and key points

        Raises:
            ValidationError: Text shorter than the minimum
            ProviderError: Completion failed
        """
        s = self._settings
        text = text.strip()
        if len(text) < max(s.summarize_min_chars, 1):
            raise ValidationError(
                f"Text too short for summarization, minimum {s.summarize_min_chars} characters"
            )

        ratio = min(1.0, max(0.1, ratio))
        source = text[: s.summarize_max_input_chars]
        max_tokens = min(max(int(len(source) * ratio), s.min_max_tokens), s.max_max_tokens)

        system_prompt = SUMMARIZE_PROMPT.format(percent=round(ratio * 100))
        result = await self._run(
            "summarize", system_prompt, source, temperature=0.2, max_tokens=max_tokens
        )
        return SummaryResponse(
            summary=result.text,
            formatted=self._format(result, style, encoding),
            key_points=extract_key_points(result.text) if include_key_points else [],
            ratio=ratio,
            original_length=len(text),
            summary_length=len(result.text),
            metadata=TaskMetadata.from_result(result),
        )

    async def code_assist(
        self,
        query: str,
        language: str = "",
        context: str = "",
        encoding: str = "markup",
    ) -> CodeAssistResponse:
        """
        Answer a programming question.

        Args:
            query: Coding question
            language: Programming language (any if empty)
            context: Extra context appended to the question
            encoding: Answer encoding

        Returns:
            Answer with extracted code blocks

        Raises:
            ValidationError: Blank query
            ProviderError: Completion failed
        """
        query = query.strip()
        if not query:
            raise ValidationError("Code assistance query is required")

        language = language.strip() or "multiple programming languages"
        context = context.strip()
        user_prompt = f"{query}\n\nADDITIONAL CONTEXT:\n{context}" if context else query
        system_prompt = CODE_PROMPT.format(language=language)
        result = await self._run(
            "code_assist", system_prompt, user_prompt, temperature=0.3, max_tokens=1500
        )
        return CodeAssistResponse(
            answer=result.text,
            formatted=self._format(result, AnswerStyle.PLAIN.value, encoding),
            code_blocks=extract_code_blocks(result.text),
            language=language,
            metadata=TaskMetadata.from_result(result),
        )

    def list_models(self) -> ModelCatalog:
        """
        Describe the models the service can call.

        Returns:
            Catalog with the configured default and backup models
        """
        return ModelCatalog(
            models=list(MODEL_CATALOG),
            default_model=self._settings.default_model,
            backup_model=self._settings.backup_model,
        )

    async def check_api_key(self) -> ApiKeyStatus:
        """
        Make one uncached, unretried call to verify provider credentials.

        Returns:
            Validity with the answering model, or the provider error
        """
        request = CompletionRequest(
            system_prompt=CREDENTIAL_PROMPT,
            user_prompt="Test message",
            model=self._settings.default_model,
            max_tokens=10,
            use_cache=False,
            retry_budget=0,
            timeout_ms=self._settings.llm_timeout_ms,
        )
        try:
            result = await self._completion.complete(request)
        except ProviderError as e:
            logger.warning("API key check failed", error=str(e), error_type=type(e).__name__)
            return ApiKeyStatus(valid=False, error=str(e))

        return ApiKeyStatus(valid=True, model=result.model, elapsed_ms=round(result.elapsed_ms, 2))

    async def _run(
        self,
        task: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> CompletionResult:
        s = self._settings
        request = CompletionRequest(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model=s.default_model,
            temperature=temperature,
            max_tokens=max_tokens,
            retry_budget=s.llm_retry_budget,
            timeout_ms=s.llm_timeout_ms,
            top_p=s.default_top_p,
            frequency_penalty=s.frequency_penalty,
            presence_penalty=s.presence_penalty,
        )
        result = await self._completion.complete(request)
        logger.info(
            "Task completed",
            task=task,
            model=result.model,
            tokens_used=result.tokens_used,
            cache_hit=result.served_from_cache,
        )
        return result

    def _format(self, result: CompletionResult, style: str, encoding: str) -> FormattedAnswer:
        options = FormatOptions(
            style=style,
            encoding=encoding,
            max_length=max(len(result.text), 1),
            include_sources=False,
        )
        return self._formatter.format(result, options=options)


def extract_key_points(summary: str) -> List[str]:
    """
    Pull key points out of a summary.

    Bullet and numbered lines win; otherwise the leading sentences
    are used.
    """
    bullets = [m.group(1).strip() for m in map(_BULLET.match, summary.splitlines()) if m]
    if bullets:
        return bullets[:MAX_KEY_POINTS]

    sentences = [s.strip() for s in _SENTENCE.split(summary) if s.strip()]
    return sentences[:MAX_KEY_POINTS]


def extract_code_blocks(answer: str) -> List[str]:
    """Return the bodies of fenced code blocks, in order."""
    return [block.strip("\n") for block in _CODE_BLOCK.findall(answer)]
