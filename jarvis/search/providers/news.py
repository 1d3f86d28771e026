"""NewsAPI provider. Registered only when an API key is configured."""

from typing import Any, Dict, List, Tuple

from jarvis.models.search import ResultKind, SearchResult, SearchSource
from jarvis.search.providers.base import SearchProvider


class NewsProvider(SearchProvider):
    """Recent news articles ranked by relevancy."""

    source = SearchSource.NEWS
    endpoint = "https://newsapi.org/v2/everything"

    def __init__(self, api_key: str, language: str = "en", **kwargs: Any):
        super().__init__(**kwargs)
        self._api_key = api_key
        self._language = language

    def build_request(self, query: str) -> Tuple[str, Dict[str, Any]]:
        return self.endpoint, {
            "q": query,
            "pageSize": self.max_results,
            "sortBy": "relevancy",
            "language": self._language,
        }

    def headers(self) -> Dict[str, str]:
        return {**super().headers(), "X-Api-Key": self._api_key}

    def parse(self, data: Any) -> List[SearchResult]:
        results = []
        for article in data.get("articles") or []:
            results.append(
                self._result(
                    ResultKind.NEWS,
                    title=article.get("title") or "",
                    snippet=article.get("description") or "",
                    url=article.get("url") or "",
                    extra={
                        "publisher": (article.get("source") or {}).get("name") or "News",
                        "published_at": article.get("publishedAt"),
                    },
                )
            )
        return results
