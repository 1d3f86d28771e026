"""
Search provider registry.

Sandi Metz Principles:
- Single Responsibility: Manage provider instances
- Open/Closed: Easy to add/remove providers
- Dependency Inversion: Depends on provider interface
"""

from typing import Dict, List, Optional

from jarvis.config import AppConfig
from jarvis.exceptions import ConfigurationError
from jarvis.search.providers import (
    DuckDuckGoProvider,
    GitHubProvider,
    NewsProvider,
    SearchProvider,
    StackOverflowProvider,
    WikipediaProvider,
)
from jarvis.utils.logger import get_logger

logger = get_logger(__name__)


class SearchProviderRegistry:
    """
    Name -> provider map, resolved once at startup.

    Lookups of unknown names return None so callers can skip them.
    """

    def __init__(self):
        """Initialize empty provider registry."""
        self._providers: Dict[str, SearchProvider] = {}

    def register(self, provider: SearchProvider) -> None:
        """
        Register a provider instance.

        Args:
            provider: Provider instance to register

        Raises:
            ConfigurationError: If a provider with the same name is registered
        """
        if provider.name in self._providers:
            raise ConfigurationError(f"Search provider '{provider.name}' is already registered")

        self._providers[provider.name] = provider
        logger.info("Registered search provider", provider=provider.name)

    def get(self, name: str) -> Optional[SearchProvider]:
        return self._providers.get(name.strip().lower())

    def names(self) -> List[str]:
        return list(self._providers)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __len__(self) -> int:
        return len(self._providers)

    @classmethod
    def from_config(cls, settings: AppConfig) -> "SearchProviderRegistry":
        """
        Build the registry from provider switches.

        Args:
            settings: Application configuration

        Returns:
            Populated registry
        """
        registry = cls()
        options = {"user_agent": settings.search_user_agent}

        if settings.enable_duckduckgo:
            registry.register(DuckDuckGoProvider(max_results=settings.search_results_limit, **options))
        if settings.enable_wikipedia:
            registry.register(WikipediaProvider(max_results=settings.search_results_limit, **options))
        if settings.enable_news and settings.newsapi_key:
            registry.register(
                NewsProvider(settings.newsapi_key, max_results=settings.search_results_limit, **options)
            )
        elif settings.enable_news:
            logger.warning("News search enabled without NEWSAPI_KEY; provider skipped")
        if settings.enable_github:
            registry.register(GitHubProvider(**options))
        if settings.enable_stackoverflow:
            registry.register(StackOverflowProvider(**options))

        return registry
