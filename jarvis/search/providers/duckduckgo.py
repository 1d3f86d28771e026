"""DuckDuckGo instant answer provider."""

from typing import Any, Dict, List, Tuple
from urllib.parse import quote_plus

from jarvis.models.search import ResultKind, SearchResult, SearchSource
from jarvis.search.providers.base import RELATED_TOPIC_CONFIDENCE, SearchProvider


class DuckDuckGoProvider(SearchProvider):
    """General web answers: one abstract plus related topics."""

    source = SearchSource.DUCKDUCKGO
    endpoint = "https://api.duckduckgo.com/"

    def build_request(self, query: str) -> Tuple[str, Dict[str, Any]]:
        return self.endpoint, {
            "q": query,
            "format": "json",
            "no_html": 1,
            "skip_disambig": 1,
        }

    def parse(self, data: Any) -> List[SearchResult]:
        results = []
        abstract = data.get("AbstractText")
        if abstract:
            heading = data.get("Heading") or ""
            results.append(
                self._result(
                    ResultKind.GENERAL,
                    title=heading or "DuckDuckGo Result",
                    snippet=abstract,
                    url=data.get("AbstractURL")
                    or f"https://duckduckgo.com/?q={quote_plus(heading)}",
                    extra={"type": "abstract"},
                )
            )

        for topic in data.get("RelatedTopics") or []:
            # Grouped topics carry a "Topics" list and no text of their own
            if not topic.get("Text") or not topic.get("FirstURL"):
                continue
            results.append(
                self._result(
                    ResultKind.GENERAL,
                    title=topic["Text"],
                    snippet=topic["Text"],
                    url=topic["FirstURL"],
                    confidence=RELATED_TOPIC_CONFIDENCE,
                    extra={"type": "related"},
                )
            )
            if len(results) >= self.max_results:
                break

        return results
