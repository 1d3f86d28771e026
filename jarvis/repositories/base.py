"""
Cache repository interface.

Sandi Metz Principles:
- Interface Segregation: Minimal backend interface
- Dependency Inversion: CacheStore depends on this abstraction
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from jarvis.models.cache_entry import CacheEntry


class CacheRepository(ABC):
    """
    Abstract keyed store of cache entries.

    Implementations raise CacheBackendError on I/O failure.
    """

    name: str = "backend"

    @abstractmethod
    async def fetch(self, key: str, now: datetime) -> Optional[CacheEntry]:
        """
        Fetch a live entry, purging it when expired.

        Args:
            key: Cache key
            now: Current time

        Returns:
            Live cache entry or None
        """

    @abstractmethod
    async def store(self, entry: CacheEntry, now: datetime) -> bool:
        """
        Store (overwrite) an entry until its expiry.

        Args:
            entry: Entry to store
            now: Current time

        Returns:
            True if stored
        """

    @abstractmethod
    async def delete(self, key: str) -> int:
        """
        Delete an entry.

        Returns:
            Number of entries removed (0 or 1)
        """

    @abstractmethod
    async def clear(self, older_than: Optional[datetime] = None) -> int:
        """
        Remove every entry, or only those created before ``older_than``.

        Returns:
            Number of entries removed
        """

    @abstractmethod
    async def purge_expired(self, now: datetime) -> int:
        """
        Remove entries whose expiry has passed.

        Returns:
            Number of entries removed
        """

    @abstractmethod
    async def count(self) -> int:
        """Number of stored entries."""

    async def ping(self) -> bool:
        """Check backend reachability."""
        return True
