"""
Answer formatting.

Sandi Metz Principles:
- Single Responsibility: Completion result -> formatted answer
- Open/Closed: Styles and encodings dispatched through handler maps
- Pure: No I/O, no clock; identical inputs give identical output
"""

import json
import re
from typing import Any, Callable, Dict, List

from jarvis.models.answer import (
    AnswerEncoding,
    AnswerStyle,
    FormatContext,
    FormatOptions,
    FormattedAnswer,
)
from jarvis.models.llm import CompletionResult
from jarvis.models.search import SearchResult

ELLIPSIS = "..."

GREETINGS = {
    "en": "Sir, ",
    "uz": "Sir, ",
    "ru": "Сэр, ",
}

EMPHASIS_WORDS = ("amazing", "incredible", "wonderful", "fantastic")

_LIST_ITEM = re.compile(r"^(\d+[.)]|[-•*])\s*")
_MD_HEADER = re.compile(r"^#+\s+")
_SUMMARY_LINE = re.compile(r"^(Summary|Conclusion|Recommendation):", re.IGNORECASE)
_PERCENT = re.compile(r"(?<!\*)\b(\d+(?:[.,]\d+)?%)")
_SENTENCE_END = re.compile(r"\.[ \t]+")
_EMPHASIS = re.compile(r"(?<!\*)\b(" + "|".join(EMPHASIS_WORDS) + r")\b(?!\*)", re.IGNORECASE)
_MARKUP = re.compile(r"<[^>]+>|[*`#]+")
_BLANK_LINES = re.compile(r"\n\s*\n+")


class ResponseFormatter:
    """
    Turns a CompletionResult into a FormattedAnswer.

    Unknown styles fall back to plain, unknown encodings to plain text.
    """

    def __init__(self):
        self._styles: Dict[AnswerStyle, Callable[[str, str], str]] = {
            AnswerStyle.JARVIS: self._jarvis,
            AnswerStyle.TECHNICAL: self._technical,
            AnswerStyle.CREATIVE: self._creative,
            AnswerStyle.SIMPLE: self._simple,
            AnswerStyle.PLAIN: lambda text, language: text,
        }
        self._encoders: Dict[AnswerEncoding, Callable[..., str]] = {
            AnswerEncoding.PLAIN_TEXT: self._encode_plain,
            AnswerEncoding.MARKUP: self._encode_markup,
            AnswerEncoding.STRUCTURED: self._encode_structured,
        }

    def format(
        self,
        result: CompletionResult,
        context: FormatContext | None = None,
        options: FormatOptions | None = None,
    ) -> FormattedAnswer:
        """
        Format a completion result.

        Args:
            result: Completion result
            context: Optional analysis and sources
            options: Style, encoding, length and inclusion switches

        Returns:
            Formatted answer
        """
        context = context or FormatContext()
        options = options or FormatOptions()
        style = AnswerStyle.resolve(options.style)
        encoding = AnswerEncoding.resolve(options.encoding)

        text = self._truncate(self._styles[style](result.text, options.language), options.max_length)
        sources = context.sources[: options.max_sources] if options.include_sources else []
        metadata = self._metadata(result, context) if options.include_metadata else {}

        return FormattedAnswer(
            content=self._encoders[encoding](text, sources, metadata),
            sources=sources,
            metadata=metadata,
            style=style,
            encoding=encoding,
        )

    @staticmethod
    def _truncate(text: str, max_length: int) -> str:
        if len(text) <= max_length:
            return text
        return text[:max_length] + ELLIPSIS

    @staticmethod
    def _metadata(result: CompletionResult, context: FormatContext) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {
            "model": result.model,
            "tokens_used": result.tokens_used,
            "elapsed_ms": round(result.elapsed_ms, 2),
            "finish_reason": result.finish_reason.value,
            "speed_rating": result.speed_rating.value,
            "cache_hit": result.served_from_cache,
        }
        if context.analysis is not None:
            metadata["analysis"] = context.analysis.summary()
        return metadata

    # Styles

    @staticmethod
    def _jarvis(text: str, language: str) -> str:
        greeting = GREETINGS.get(language, GREETINGS["en"])
        if not text.startswith(tuple(set(GREETINGS.values())) + ("Sir",)):
            text = greeting + text

        paragraphs = []
        for paragraph in re.split(r"\n+", text):
            paragraph = paragraph.strip()
            if not paragraph:
                continue
            if _LIST_ITEM.match(paragraph):
                paragraph = "• " + _LIST_ITEM.sub("", paragraph, count=1)
            paragraphs.append(paragraph)
        return "\n\n".join(paragraphs)

    @staticmethod
    def _technical(text: str, language: str) -> str:
        lines = []
        for line in text.split("\n"):
            line = _PERCENT.sub(r"**\1**", line.strip())
            if _MD_HEADER.match(line):
                lines.append("## " + _MD_HEADER.sub("", line))
            elif _SUMMARY_LINE.match(line):
                lines.append(f"**{line}**")
            else:
                lines.append(line)
        return "\n".join(lines).strip()

    @staticmethod
    def _creative(text: str, language: str) -> str:
        text = _SENTENCE_END.sub(".\n\n", text)
        return _EMPHASIS.sub(r"*\1*", text).strip()

    @staticmethod
    def _simple(text: str, language: str) -> str:
        text = _MARKUP.sub("", text)
        return _BLANK_LINES.sub("\n", text).strip()

    # Encodings

    @staticmethod
    def _encode_plain(text: str, sources: List[SearchResult], metadata: Dict[str, Any]) -> str:
        return text

    @staticmethod
    def _encode_markup(text: str, sources: List[SearchResult], metadata: Dict[str, Any]) -> str:
        parts = [text]
        if sources:
            lines = ["**Sources:**"]
            lines.extend(f"- [{s.title}]({s.url}) ({s.source.value})" for s in sources)
            parts.append("\n".join(lines))
        if metadata:
            lines = ["**Metadata:**"]
            for key in sorted(metadata):
                value = metadata[key]
                if isinstance(value, (dict, list)):
                    value = json.dumps(value, sort_keys=True, ensure_ascii=False)
                lines.append(f"- {key}: {value}")
            parts.append("\n".join(lines))
        return "\n\n".join(parts)

    @staticmethod
    def _encode_structured(
        text: str, sources: List[SearchResult], metadata: Dict[str, Any]
    ) -> str:
        document = {
            "text": text,
            "sources": [_source_entry(s) for s in sources],
            "metadata": metadata,
        }
        return json.dumps(document, sort_keys=True, ensure_ascii=False)


def _source_entry(result: SearchResult) -> Dict[str, Any]:
    return {
        "title": result.title,
        "url": result.url,
        "source": result.source.value,
        "kind": result.kind.value,
        "confidence": result.confidence,
    }
