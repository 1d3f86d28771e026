"""
Retry schedule for completion calls.

Sandi Metz Principles:
- Single Responsibility: Backoff arithmetic
- Small methods: Each method < 10 lines
- Dependency Injection: Configuration injected
"""

from dataclasses import dataclass

from jarvis.exceptions import TransientProviderError


@dataclass
class RetryConfig:
    """Retry configuration."""

    initial_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0


class RetryPolicy:
    """
    Exponential backoff schedule.

    Attempt 0 runs immediately; attempt i waits
    initial_delay * exponential_base ** (i - 1), capped at max_delay.
    """

    def __init__(self, config: RetryConfig | None = None):
        """
        Initialize retry policy.

        Args:
            config: Retry configuration (uses defaults if None)
        """
        self._config = config or RetryConfig()

    @staticmethod
    def total_attempts(retry_budget: int) -> int:
        """
        Number of provider calls allowed for a retry budget.

        Args:
            retry_budget: Retries after the first call

        Returns:
            retry_budget + 1
        """
        return max(0, retry_budget) + 1

    def delay_before(self, attempt: int) -> float:
        """
        Calculate delay before an attempt.

        Args:
            attempt: Attempt index (0-indexed)

        Returns:
            Delay in seconds
        """
        if attempt <= 0:
            return 0.0
        delay = self._config.initial_delay * (
            self._config.exponential_base ** (attempt - 1)
        )
        return min(delay, self._config.max_delay)

    @staticmethod
    def is_retryable(error: Exception) -> bool:
        """Check whether an error warrants another attempt."""
        return isinstance(error, TransientProviderError)
