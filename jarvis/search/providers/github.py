"""GitHub repository search provider."""

from typing import Any, Dict, List, Tuple

from jarvis.models.search import ResultKind, SearchResult, SearchSource
from jarvis.search.providers.base import SearchProvider


class GitHubProvider(SearchProvider):
    """Most-starred repositories matching the query."""

    source = SearchSource.GITHUB
    endpoint = "https://api.github.com/search/repositories"

    def __init__(self, max_results: int = 3, **kwargs: Any):
        super().__init__(max_results=max_results, **kwargs)

    def build_request(self, query: str) -> Tuple[str, Dict[str, Any]]:
        return self.endpoint, {
            "q": query,
            "sort": "stars",
            "order": "desc",
            "per_page": self.max_results,
        }

    def headers(self) -> Dict[str, str]:
        return {**super().headers(), "Accept": "application/vnd.github.v3+json"}

    def parse(self, data: Any) -> List[SearchResult]:
        results = []
        for item in data.get("items") or []:
            results.append(
                self._result(
                    ResultKind.CODE,
                    title=item["full_name"],
                    snippet=item.get("description") or "GitHub repository",
                    url=item["html_url"],
                    extra={
                        "stars": item.get("stargazers_count"),
                        "language": item.get("language"),
                        "forks": item.get("forks_count"),
                    },
                )
            )
        return results
