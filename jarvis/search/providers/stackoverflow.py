"""StackExchange (Stack Overflow) question search provider."""

import html
import re
from typing import Any, Dict, List, Tuple

from jarvis.models.search import ResultKind, SearchResult, SearchSource
from jarvis.search.providers.base import SearchProvider

_TAG_PATTERN = re.compile(r"<[^>]+>")


class StackOverflowProvider(SearchProvider):
    """Relevant Stack Overflow questions by title."""

    source = SearchSource.STACKOVERFLOW
    endpoint = "https://api.stackexchange.com/2.3/search"

    def __init__(self, max_results: int = 3, **kwargs: Any):
        super().__init__(max_results=max_results, **kwargs)

    def build_request(self, query: str) -> Tuple[str, Dict[str, Any]]:
        return self.endpoint, {
            "order": "desc",
            "sort": "relevance",
            "intitle": query,
            "site": "stackoverflow",
            "pagesize": self.max_results,
        }

    def parse(self, data: Any) -> List[SearchResult]:
        results = []
        for item in data.get("items") or []:
            excerpt = item.get("excerpt")
            results.append(
                self._result(
                    ResultKind.TECHNICAL,
                    title=html.unescape(item["title"]),
                    snippet=_TAG_PATTERN.sub("", excerpt) if excerpt else "StackOverflow question",
                    url=item["link"],
                    extra={
                        "score": item.get("score"),
                        "answers": item.get("answer_count"),
                        "views": item.get("view_count"),
                    },
                )
            )
        return results
