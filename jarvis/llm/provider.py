"""
Completion provider base class and interface.

Sandi Metz Principles:
- Single Responsibility: Provider abstraction
- Interface Segregation: Minimal provider interface
- Dependency Inversion: Depend on abstraction, not concrete classes
"""

from abc import ABC, abstractmethod

from jarvis.models.llm import CompletionRequest, ProviderReply


class BaseCompletionProvider(ABC):
    """
    Abstract base class for chat-completion providers.

    A provider makes exactly one call per invocation; retries and
    fallback belong to CompletionClient.
    """

    @abstractmethod
    async def send(self, request: CompletionRequest, model: str) -> ProviderReply:
        """
        Send one completion call.

        Args:
            request: Completion request
            model: Model to call (may differ from request.model on fallback)

        Returns:
            Raw provider reply

        Raises:
            TransientProviderError: Retryable failure
            PermanentProviderError: Non-retryable failure
        """

    @abstractmethod
    def get_name(self) -> str:
        """
        Get provider name.

        Returns:
            Provider name (e.g., "groq")
        """

    def _build_error_message(self, error: Exception, context: str) -> str:
        return f"{context}: {type(error).__name__} - {error}"
