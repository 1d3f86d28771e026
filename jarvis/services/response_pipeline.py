"""
Response generation pipeline.

Orchestrates answer cache, context gathering, prompt assembly,
completion and formatting for one chat message.

Sandi Metz Principles:
- Single Responsibility: Response orchestration
- Small methods: One method per pipeline state
- Dependency Injection: Every collaborator injected
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from jarvis.cache.cache_store import CacheStore
from jarvis.config import AppConfig, config as default_config
from jarvis.exceptions import (
    PipelineError,
    PipelineTimeoutError,
    ProviderError,
    ValidationError,
)
from jarvis.llm.completion_client import CompletionClient
from jarvis.models.answer import FormatContext, FormatOptions, FormattedAnswer
from jarvis.models.llm import CompletionRequest, CompletionResult
from jarvis.models.query import (
    ConversationTurn,
    GenerateOptions,
    LocalRecord,
    QueryAnalysis,
)
from jarvis.models.response import AnswerMetadata, PipelineResult
from jarvis.models.search import SearchOptions, SearchResult
from jarvis.pipeline.request_context import PipelineState, RequestContext
from jarvis.search.aggregator import SearchAggregator
from jarvis.services.collaborators import (
    AnalyticsRecord,
    AnalyticsRecorder,
    LearningRecord,
    LearningRecorder,
    LocalDataSource,
)
from jarvis.services.prompt_builder import PromptBuilder
from jarvis.services.response_formatter import ResponseFormatter
from jarvis.utils.hasher import fingerprint
from jarvis.utils.logger import get_logger

logger = get_logger(__name__)


class ResponsePipeline:
    """
    Main response generation service.

    Order: answer cache -> search + local records -> prompt ->
    completion -> format -> answer cache.
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        formatter: Optional[ResponseFormatter] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        cache: Optional[CacheStore] = None,
        search: Optional[SearchAggregator] = None,
        local_data: Optional[LocalDataSource] = None,
        analytics: Optional[AnalyticsRecorder] = None,
        learning: Optional[LearningRecorder] = None,
        settings: AppConfig | None = None,
    ):
        """
        Initialize pipeline.

        Args:
            completion_client: Completion client
            formatter: Answer formatter
            prompt_builder: System prompt builder
            cache: Optional cache store for whole answers
            search: Optional search aggregator
            local_data: Optional local record source
            analytics: Optional analytics recorder
            learning: Optional learning recorder
            settings: Application configuration (global config if None)
        """
        self._settings = settings or default_config
        self._completion = completion_client
        self._formatter = formatter or ResponseFormatter()
        self._prompts = prompt_builder or PromptBuilder(self._settings)
        self._cache = cache
        self._search = search
        self._local_data = local_data
        self._analytics = analytics
        self._learning = learning

    async def generate(
        self,
        message: str,
        analysis: Optional[QueryAnalysis] = None,
        context: Sequence[ConversationTurn] = (),
        options: Optional[GenerateOptions] = None,
        request_context: Optional[RequestContext] = None,
    ) -> PipelineResult:
        """
        Generate a formatted answer for a message.

        Args:
            message: User message
            analysis: Externally computed query analysis
            context: Prior conversation turns, oldest first
            options: Per-request overrides
            request_context: Request-scoped context (created if None)

        Returns:
            Formatted answer with metadata

        Raises:
            ValidationError: If the message is blank
            PipelineTimeoutError: If the overall deadline passes
            PipelineError: If completion or formatting fails
        """
        message = (message or "").strip()
        if not message:
            raise ValidationError("Message cannot be empty")

        analysis = analysis or QueryAnalysis()
        options = options or GenerateOptions()
        ctx = request_context or RequestContext.create(query=message)
        timeout_ms = options.timeout_ms or self._settings.pipeline_timeout_ms

        try:
            result = await asyncio.wait_for(
                self._run(message, analysis, list(context), options, ctx),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError:
            error = PipelineTimeoutError(timeout_ms)
            await self._fail(ctx, message, analysis, error)
            raise error from None
        except Exception as e:
            await self._fail(ctx, message, analysis, e)
            raise

        ctx.complete()
        await self._record_analytics(ctx, message, analysis, result=result)
        logger.info("Response generated", **ctx.to_dict())
        return result

    async def _run(
        self,
        message: str,
        analysis: QueryAnalysis,
        context: List[ConversationTurn],
        options: GenerateOptions,
        ctx: RequestContext,
    ) -> PipelineResult:
        temperature, max_tokens = self._clamp(options)
        format_options = self._format_options(options)

        ctx.advance(PipelineState.CACHE_CHECK)
        key = None
        if options.use_cache and self._cache:
            key = self._answer_key(
                message, analysis, context, options, temperature, max_tokens, format_options
            )
            cached = await self._check_answer_cache(key, ctx, analysis, format_options)
            if cached:
                ctx.advance(PipelineState.DONE)
                return cached
        ctx.advance(PipelineState.MISS)

        ctx.advance(PipelineState.GATHER_CONTEXT)
        search_results, local_records = await self._gather_context(message, analysis, options)

        ctx.advance(PipelineState.BUILD_PROMPT)
        system_prompt = self._prompts.build(analysis, local_records, search_results, context)

        ctx.advance(PipelineState.COMPLETE)
        completion = await self._complete(system_prompt, message, options, temperature, max_tokens)

        ctx.advance(PipelineState.FORMAT)
        answer = self._format(completion, analysis, search_results, format_options)

        ctx.advance(PipelineState.STORE_CACHE)
        if key:
            await self._store_answer(key, completion, search_results)

        if not completion.served_from_cache:
            await self._record_learning(message, completion, analysis)

        ctx.advance(PipelineState.DONE)
        return PipelineResult(
            answer=answer,
            metadata=AnswerMetadata(
                tokens_used=completion.tokens_used,
                model=completion.model,
                cache_hit=False,
                elapsed_ms=ctx.elapsed_ms,
                request_id=ctx.request_id,
                session_id=ctx.session_id,
                completion_cached=completion.served_from_cache,
                search_results=len(search_results),
            ),
            search_results=search_results,
        )

    # Cache

    def _answer_key(
        self,
        message: str,
        analysis: QueryAnalysis,
        context: List[ConversationTurn],
        options: GenerateOptions,
        temperature: float,
        max_tokens: int,
        format_options: FormatOptions,
    ) -> str:
        digest = fingerprint(
            message,
            analysis.model_dump(mode="json"),
            [turn.model_dump(mode="json") for turn in context],
            options.model or self._settings.default_model,
            temperature,
            max_tokens,
            format_options.model_dump(mode="json"),
        )
        return f"answer:{digest}"

    async def _check_answer_cache(
        self,
        key: str,
        ctx: RequestContext,
        analysis: QueryAnalysis,
        format_options: FormatOptions,
    ) -> Optional[PipelineResult]:
        """
        Look up a previous completion and format it again.

        The cached completion is marked as served from cache before
        formatting, so the answer metadata reports the hit.

        Args:
            key: Answer cache key
            ctx: Request context
            analysis: Query analysis handed to the formatter
            format_options: Style, encoding and inclusion switches

        Returns:
            Pipeline result marked as a cache hit, or None
        """
        payload = await self._cache.get(key)
        if not payload:
            return None

        try:
            completion = CompletionResult.model_validate(payload["completion"])
            search_results = [
                SearchResult.model_validate(r) for r in payload.get("search_results", [])
            ]
        except (KeyError, TypeError, PydanticValidationError) as e:
            logger.warning("Discarding unreadable cached answer", key=key, error=str(e))
            return None

        ctx.advance(PipelineState.HIT)
        completion = completion.model_copy(
            update={"served_from_cache": True, "elapsed_ms": 0.0, "attempts": 0}
        )
        answer = self._format(completion, analysis, search_results, format_options)
        return PipelineResult(
            answer=answer,
            metadata=AnswerMetadata(
                tokens_used=completion.tokens_used,
                model=completion.model,
                cache_hit=True,
                elapsed_ms=ctx.elapsed_ms,
                request_id=ctx.request_id,
                session_id=ctx.session_id,
                search_results=len(search_results),
            ),
            search_results=search_results,
        )

    async def _store_answer(
        self,
        key: str,
        completion: CompletionResult,
        search_results: List[SearchResult],
    ) -> None:
        payload: Dict[str, Any] = {
            "completion": completion.model_dump(mode="json"),
            "search_results": [r.model_dump(mode="json") for r in search_results],
        }
        await self._cache.set(
            key,
            payload,
            self._settings.answer_cache_ttl_seconds,
            source="pipeline",
            model=completion.model,
            tokens_used=completion.tokens_used,
        )

    # Context

    async def _gather_context(
        self, message: str, analysis: QueryAnalysis, options: GenerateOptions
    ) -> Tuple[List[SearchResult], List[LocalRecord]]:
        """
        Fetch search results and local records concurrently.

        Either may come back empty; partial context is not a failure.
        """
        return await asyncio.gather(
            self._search_web(message, analysis, options),
            self._read_local(message, analysis),
        )

    async def _search_web(
        self, message: str, analysis: QueryAnalysis, options: GenerateOptions
    ) -> List[SearchResult]:
        s = self._settings
        if not (analysis.needs_web_search and self._search and s.enable_web_search):
            return []

        search_options = SearchOptions(
            limit=s.search_results_limit,
            sources=analysis.search_sources,
            force_fresh=not options.use_cache,
            timeout_ms=s.search_timeout_ms,
        )
        try:
            return await self._search.search(message, search_options)
        except Exception as e:
            logger.warning("Web search skipped", error=str(e), error_type=type(e).__name__)
            return []

    async def _read_local(self, message: str, analysis: QueryAnalysis) -> List[LocalRecord]:
        if not (analysis.needs_local_data and self._local_data):
            return []

        try:
            return list(
                await self._local_data.find(message, analysis, self._settings.max_local_records)
            )
        except Exception as e:
            logger.warning("Local records skipped", error=str(e), error_type=type(e).__name__)
            return []

    # Completion

    def _clamp(self, options: GenerateOptions) -> Tuple[float, int]:
        s = self._settings
        temperature = s.default_temperature if options.temperature is None else options.temperature
        max_tokens = options.max_tokens or s.default_max_tokens
        return (
            min(max(temperature, s.min_temperature), s.max_temperature),
            min(max(max_tokens, s.min_max_tokens), s.max_max_tokens),
        )

    async def _complete(
        self,
        system_prompt: str,
        message: str,
        options: GenerateOptions,
        temperature: float,
        max_tokens: int,
    ) -> CompletionResult:
        """
        Call the completion client.

        Raises:
            PipelineError: Provider failure, with the cause attached
        """
        s = self._settings
        request = CompletionRequest(
            system_prompt=system_prompt,
            user_prompt=message,
            model=options.model or s.default_model,
            temperature=temperature,
            max_tokens=max_tokens,
            use_cache=options.use_cache,
            retry_budget=s.llm_retry_budget,
            timeout_ms=s.llm_timeout_ms,
            top_p=s.default_top_p,
            frequency_penalty=s.frequency_penalty,
            presence_penalty=s.presence_penalty,
        )
        try:
            return await self._completion.complete(request)
        except ProviderError as e:
            raise PipelineError(f"Completion failed: {e}", category="provider", cause=e) from e

    # Format

    def _format_options(self, options: GenerateOptions) -> FormatOptions:
        return FormatOptions(
            style=options.style,
            encoding=options.encoding,
            max_length=options.max_length or self._settings.answer_max_length,
            include_sources=options.include_sources,
            include_metadata=options.include_metadata,
            max_sources=self._settings.max_search_snippets,
            language=options.language,
        )

    def _format(
        self,
        completion: CompletionResult,
        analysis: QueryAnalysis,
        search_results: List[SearchResult],
        format_options: FormatOptions,
    ) -> FormattedAnswer:
        try:
            return self._formatter.format(
                completion,
                FormatContext(analysis=analysis, sources=search_results),
                format_options,
            )
        except Exception as e:
            raise PipelineError(f"Formatting failed: {e}", category="format", cause=e) from e

    # Recording

    async def _fail(
        self,
        ctx: RequestContext,
        message: str,
        analysis: QueryAnalysis,
        error: Exception,
    ) -> None:
        ctx.fail(error)
        logger.error(
            "Response generation failed",
            error=str(error),
            error_type=type(error).__name__,
            **ctx.to_dict(),
        )
        await self._record_analytics(ctx, message, analysis, error=error)

    async def _record_analytics(
        self,
        ctx: RequestContext,
        message: str,
        analysis: QueryAnalysis,
        result: Optional[PipelineResult] = None,
        error: Optional[Exception] = None,
    ) -> None:
        if not self._analytics:
            return

        record = AnalyticsRecord(
            request_id=ctx.request_id,
            session_id=ctx.session_id,
            query=message,
            status="failed" if error else "success",
            cache_hit=ctx.cache_hit,
            model=result.metadata.model if result else "unknown",
            tokens_used=result.metadata.tokens_used if result else 0,
            elapsed_ms=round(ctx.elapsed_ms, 2),
            response_length=len(result.answer.content) if result else 0,
            error_category=getattr(error, "category", "internal") if error else None,
            error=str(error) if error else None,
            query_type=analysis.type,
            query_category=analysis.category,
        )
        try:
            await self._analytics.record(record)
        except Exception as e:
            logger.warning("Analytics record failed", error=str(e))

    async def _record_learning(
        self, message: str, completion: CompletionResult, analysis: QueryAnalysis
    ) -> None:
        if not self._learning:
            return

        record = LearningRecord(
            query=message,
            response=completion.text,
            model=completion.model,
            topics=list(analysis.topics),
        )
        try:
            await self._learning.record(record)
        except Exception as e:
            logger.warning("Learning record failed", error=str(e))
