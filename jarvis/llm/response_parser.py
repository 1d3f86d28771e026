"""
Completion response parsing and clean-up.

Sandi Metz Principles:
- Single Responsibility: Normalize provider output
- Small methods: Each function does one thing
- Pure functions: No side effects
"""

import html
import re
from typing import Any

from jarvis.models.llm import ProviderReply, SpeedRating

_BLOCK_PATTERN = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_PATTERN = re.compile(r"<[^>]+>")
_CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_HSPACE_PATTERN = re.compile(r"[ \t\f\v]+")
_BLANK_LINES_PATTERN = re.compile(r"\n{3,}")

# Tokens per second lower bounds, fastest first
_SPEED_THRESHOLDS = (
    (200, SpeedRating.ULTRA_FAST),
    (100, SpeedRating.VERY_FAST),
    (50, SpeedRating.FAST),
    (20, SpeedRating.MODERATE),
)


class ChatCompletionParser:
    """
    Parser for OpenAI-compatible chat completion responses.

    Converts SDK response objects into ProviderReply.
    """

    @staticmethod
    def parse(response: Any, requested_model: str) -> ProviderReply:
        """
        Parse a chat completion response.

        Args:
            response: SDK ChatCompletion object
            requested_model: Model asked for (used if the response omits it)

        Returns:
            Provider reply
        """
        content = ""
        finish_reason = None
        if response.choices:
            choice = response.choices[0]
            content = choice.message.content or ""
            finish_reason = choice.finish_reason

        usage = getattr(response, "usage", None)
        return ProviderReply(
            content=content,
            total_tokens=(usage.total_tokens or 0) if usage else 0,
            finish_reason=finish_reason,
            model=getattr(response, "model", None) or requested_model,
        )


def sanitize_text(text: str) -> str:
    """
    Make generated text safe to display.

    Removes script/style blocks and tags, HTML-escapes what is left,
    drops control characters and collapses horizontal whitespace.
    Line breaks survive.

    Args:
        text: Raw generated text

    Returns:
        Sanitized text
    """
    text = _BLOCK_PATTERN.sub("", text)
    text = _TAG_PATTERN.sub("", text)
    text = html.escape(text, quote=True)
    text = _CONTROL_PATTERN.sub("", text.replace("\r\n", "\n").replace("\r", "\n"))
    lines = [_HSPACE_PATTERN.sub(" ", line).strip() for line in text.split("\n")]
    text = _BLANK_LINES_PATTERN.sub("\n\n", "\n".join(lines))
    return text.strip()


def rate_speed(tokens: int, elapsed_ms: float) -> SpeedRating:
    """
    Rate generation throughput.

    Args:
        tokens: Tokens produced
        elapsed_ms: Wall time in milliseconds

    Returns:
        Speed rating (UNKNOWN without tokens or elapsed time)
    """
    if tokens <= 0 or elapsed_ms <= 0:
        return SpeedRating.UNKNOWN

    tokens_per_second = tokens / (elapsed_ms / 1000)
    for threshold, rating in _SPEED_THRESHOLDS:
        if tokens_per_second > threshold:
            return rating
    return SpeedRating.SLOW
