"""
Groq completion provider.

Speaks the OpenAI-compatible chat-completions API through the openai SDK.

Sandi Metz Principles:
- Single Responsibility: Groq API interaction
- Small methods: Each method < 10 lines
- Dependency Injection: API key and client injected
"""

import time

from openai import (
    APIConnectionError,
    APIStatusError,
    AsyncOpenAI,
    InternalServerError,
    OpenAIError,
    RateLimitError,
)

from jarvis.exceptions import (
    NetworkError,
    PermanentProviderError,
    TransientProviderError,
)
from jarvis.llm.provider import BaseCompletionProvider
from jarvis.llm.response_parser import ChatCompletionParser
from jarvis.models.llm import CompletionRequest, ProviderReply
from jarvis.utils.logger import get_logger, log_llm_call

logger = get_logger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class GroqProvider(BaseCompletionProvider):
    """
    Groq implementation of the completion provider.

    SDK retries are disabled; CompletionClient owns the retry loop.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = GROQ_BASE_URL,
        client: AsyncOpenAI | None = None,
    ):
        """
        Initialize Groq provider.

        Args:
            api_key: Groq API key (Bearer auth)
            base_url: OpenAI-compatible endpoint
            client: Optional preconfigured SDK client
        """
        self._api_key = api_key
        self._base_url = base_url
        self._client = client

    async def send(self, request: CompletionRequest, model: str) -> ProviderReply:
        """
        Make one chat-completions call.

        Args:
            request: Completion request
            model: Model to call

        Returns:
            Provider reply

        Raises:
            NetworkError: Connection failure or timeout
            TransientProviderError: Rate limit or server error
            PermanentProviderError: Any other client error
        """
        client = self._get_client()
        start = time.perf_counter()

        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": request.system_prompt},
                    {"role": "user", "content": request.user_prompt},
                ],
                temperature=request.temperature,
                max_tokens=request.max_tokens,
                top_p=request.top_p,
                frequency_penalty=request.frequency_penalty,
                presence_penalty=request.presence_penalty,
                stream=False,
                timeout=request.timeout_ms / 1000,
            )
        except OpenAIError as e:
            status = getattr(e, "status_code", None)
            log_llm_call(model, self._elapsed_ms(start), status, error=type(e).__name__)
            raise self._map_error(e) from e

        reply = ChatCompletionParser.parse(response, model)
        log_llm_call(model, self._elapsed_ms(start), reply.status_code, tokens=reply.total_tokens)
        return reply

    def get_name(self) -> str:
        return "groq"

    def _map_error(self, error: OpenAIError) -> Exception:
        """
        Translate an SDK error into the provider error taxonomy.

        Args:
            error: SDK exception

        Returns:
            Provider error to raise
        """
        message = self._build_error_message(error, "Groq API call failed")
        if isinstance(error, APIConnectionError):
            return NetworkError(message)
        if isinstance(error, (RateLimitError, InternalServerError)):
            return TransientProviderError(message, status_code=error.status_code)
        if isinstance(error, APIStatusError):
            if error.status_code >= 500:
                return TransientProviderError(message, status_code=error.status_code)
            return PermanentProviderError(message, status_code=error.status_code)
        return TransientProviderError(message)

    def _get_client(self) -> AsyncOpenAI:
        """
        Get or create the SDK client.

        Returns:
            OpenAI-compatible async client
        """
        if not self._client:
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                max_retries=0,
            )
        return self._client

    async def close(self) -> None:
        """Release the SDK client's connections."""
        if self._client:
            await self._client.close()

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.perf_counter() - start) * 1000
