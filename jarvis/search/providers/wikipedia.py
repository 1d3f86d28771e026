"""Wikipedia extracts provider."""

from typing import Any, Dict, List, Tuple
from urllib.parse import quote

from jarvis.models.search import ResultKind, SearchResult, SearchSource
from jarvis.search.providers.base import SearchProvider

SNIPPET_CHARS = 300


class WikipediaProvider(SearchProvider):
    """Encyclopedia intro extracts for pages titled like the query."""

    source = SearchSource.WIKIPEDIA
    endpoint = "https://en.wikipedia.org/w/api.php"

    def build_request(self, query: str) -> Tuple[str, Dict[str, Any]]:
        return self.endpoint, {
            "action": "query",
            "format": "json",
            "prop": "extracts|info",
            "exintro": 1,
            "explaintext": 1,
            "inprop": "url",
            "redirects": 1,
            "titles": query,
        }

    def parse(self, data: Any) -> List[SearchResult]:
        pages = (data.get("query") or {}).get("pages") or {}
        results = []
        for page in pages.values():
            extract = page.get("extract")
            if not extract:
                continue
            title = page["title"]
            snippet = extract if len(extract) <= SNIPPET_CHARS else extract[:SNIPPET_CHARS] + "..."
            results.append(
                self._result(
                    ResultKind.ENCYCLOPEDIA,
                    title=title,
                    snippet=snippet,
                    url=page.get("fullurl")
                    or f"https://en.wikipedia.org/wiki/{quote(title.replace(' ', '_'))}",
                    extra={"page_id": page.get("pageid")},
                )
            )
        return results[: self.max_results]
