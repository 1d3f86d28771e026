"""Test Groq completion provider."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from openai import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    RateLimitError,
)

from jarvis.exceptions import NetworkError, PermanentProviderError, TransientProviderError
from jarvis.llm.groq_provider import GROQ_BASE_URL, GroqProvider
from jarvis.models.llm import CompletionRequest

CHAT_URL = f"{GROQ_BASE_URL}/chat/completions"


def http_response(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", CHAT_URL))


@pytest.fixture
def sample_request():
    """Create sample completion request."""
    return CompletionRequest(
        system_prompt="You are JARVIS.",
        user_prompt="What is Python?",
        model="llama-3.3-70b-versatile",
        temperature=0.5,
        max_tokens=200,
        timeout_ms=5000,
    )


@pytest.fixture
def mock_groq_response():
    """Create mock chat completion response."""
    mock_response = MagicMock()
    mock_response.choices = [MagicMock()]
    mock_response.choices[0].message.content = "Python is a programming language"
    mock_response.choices[0].finish_reason = "stop"
    mock_response.usage.total_tokens = 30
    mock_response.model = "llama-3.3-70b-versatile"
    return mock_response


@pytest.fixture
def mock_client(mock_groq_response):
    client = AsyncMock()
    client.chat.completions.create.return_value = mock_groq_response
    return client


class TestGroqProvider:
    """Test Groq provider implementation."""

    def test_should_get_provider_name(self):
        """Test getting provider name."""
        assert GroqProvider(api_key="test-key").get_name() == "groq"

    @pytest.mark.asyncio
    async def test_should_send_completion(self, sample_request, mock_client):
        """Test one chat-completions call."""
        provider = GroqProvider(api_key="test-key", client=mock_client)

        reply = await provider.send(sample_request, "mixtral-8x7b-32768")

        assert reply.content == "Python is a programming language"
        assert reply.total_tokens == 30
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "mixtral-8x7b-32768"
        assert kwargs["messages"] == [
            {"role": "system", "content": "You are JARVIS."},
            {"role": "user", "content": "What is Python?"},
        ]
        assert kwargs["temperature"] == 0.5
        assert kwargs["max_tokens"] == 200
        assert kwargs["timeout"] == 5.0
        assert kwargs["stream"] is False

    @pytest.mark.asyncio
    async def test_should_build_client_without_sdk_retries(self, sample_request, mock_client):
        """Test lazy client creation."""
        with patch("jarvis.llm.groq_provider.AsyncOpenAI") as mock_client_class:
            mock_client_class.return_value = mock_client
            provider = GroqProvider(api_key="test-key")

            await provider.send(sample_request, sample_request.model)

            mock_client_class.assert_called_once_with(
                api_key="test-key", base_url=GROQ_BASE_URL, max_retries=0
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,expected",
        [
            (
                RateLimitError("slow down", response=http_response(429), body=None),
                TransientProviderError,
            ),
            (
                InternalServerError("boom", response=http_response(500), body=None),
                TransientProviderError,
            ),
            (
                AuthenticationError("bad key", response=http_response(401), body=None),
                PermanentProviderError,
            ),
            (
                BadRequestError("bad request", response=http_response(400), body=None),
                PermanentProviderError,
            ),
            (APIConnectionError(request=httpx.Request("POST", CHAT_URL)), NetworkError),
            (APITimeoutError(request=httpx.Request("POST", CHAT_URL)), NetworkError),
        ],
    )
    async def test_should_map_sdk_errors(self, sample_request, mock_client, error, expected):
        """Test error taxonomy."""
        mock_client.chat.completions.create.side_effect = error
        provider = GroqProvider(api_key="test-key", client=mock_client)

        with pytest.raises(expected, match="Groq API call failed"):
            await provider.send(sample_request, sample_request.model)

    @pytest.mark.asyncio
    async def test_should_keep_status_code(self, sample_request, mock_client):
        """Test status code is carried on the mapped error."""
        mock_client.chat.completions.create.side_effect = RateLimitError(
            "slow down", response=http_response(429), body=None
        )
        provider = GroqProvider(api_key="test-key", client=mock_client)

        with pytest.raises(TransientProviderError) as exc_info:
            await provider.send(sample_request, sample_request.model)

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_should_close_client(self, mock_client):
        """Test close releases the SDK client."""
        provider = GroqProvider(api_key="test-key", client=mock_client)

        await provider.close()

        mock_client.close.assert_awaited_once()
