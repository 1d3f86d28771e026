"""
Search provider base class.

Sandi Metz Principles:
- Single Responsibility: One provider = one endpoint + one parser
- Open/Closed: New providers subclass, orchestration stays untouched
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

import httpx

from jarvis.models.search import ResultKind, SearchResult, SearchSource

DEFAULT_USER_AGENT = "JARVIS-AI/5.0"

# Static weighting: encyclopedia >= code >= technical/news >= general
CONFIDENCE = {
    ResultKind.ENCYCLOPEDIA: 0.95,
    ResultKind.CODE: 0.85,
    ResultKind.TECHNICAL: 0.80,
    ResultKind.NEWS: 0.80,
    ResultKind.GENERAL: 0.70,
}
RELATED_TOPIC_CONFIDENCE = 0.60


class SearchProvider(ABC):
    """
    Abstract HTTP search provider.

    Subclasses describe their GET request and parse the JSON body;
    fetch() does the I/O.
    """

    source: SearchSource

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, max_results: int = 5):
        """
        Initialize provider.

        Args:
            user_agent: User-Agent header sent with every request
            max_results: Results requested from the upstream API
        """
        self.user_agent = user_agent
        self.max_results = max_results

    @property
    def name(self) -> str:
        return self.source.value

    @abstractmethod
    def build_request(self, query: str) -> Tuple[str, Dict[str, Any]]:
        """
        Describe the GET request.

        Args:
            query: Search query

        Returns:
            Tuple of (url, query params)
        """

    @abstractmethod
    def parse(self, data: Any) -> List[SearchResult]:
        """
        Parse the decoded JSON body.

        Args:
            data: Decoded response

        Returns:
            Normalized results
        """

    def headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/json"}

    async def fetch(self, client: httpx.AsyncClient, query: str) -> List[SearchResult]:
        """
        Call the provider and parse its response.

        Args:
            client: Shared HTTP client
            query: Search query

        Returns:
            Normalized results

        Raises:
            httpx.HTTPError: On transport or status failure
            ValueError: On an undecodable body
        """
        url, params = self.build_request(query)
        response = await client.get(url, params=params, headers=self.headers())
        response.raise_for_status()
        return self.parse(response.json())

    def _result(self, kind: ResultKind, **fields: Any) -> SearchResult:
        fields.setdefault("confidence", CONFIDENCE[kind])
        return SearchResult(source=self.source, kind=kind, **fields)
