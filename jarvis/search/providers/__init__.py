"""Search provider implementations."""

from jarvis.search.providers.base import SearchProvider
from jarvis.search.providers.duckduckgo import DuckDuckGoProvider
from jarvis.search.providers.github import GitHubProvider
from jarvis.search.providers.news import NewsProvider
from jarvis.search.providers.stackoverflow import StackOverflowProvider
from jarvis.search.providers.wikipedia import WikipediaProvider

__all__ = [
    "DuckDuckGoProvider",
    "GitHubProvider",
    "NewsProvider",
    "SearchProvider",
    "StackOverflowProvider",
    "WikipediaProvider",
]
