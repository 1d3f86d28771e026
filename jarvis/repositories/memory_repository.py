"""
In-process cache repository.

Sandi Metz Principles:
- Single Responsibility: Ephemeral entry storage
- Small methods: Each operation isolated
"""

import asyncio
from datetime import datetime
from typing import Dict, Optional

from jarvis.models.cache_entry import CacheEntry
from jarvis.repositories.base import CacheRepository
from jarvis.utils.logger import get_logger

logger = get_logger(__name__)


class MemoryRepository(CacheRepository):
    """
    Ephemeral backend holding entries in a dict.

    Entries are frozen models replaced as a whole, guarded by one lock.
    Payloads are deep-copied on the way in and out, matching the
    serialize-on-write behaviour of the durable backend.
    """

    name = "memory"

    def __init__(self, max_entries: int = 10000):
        """
        Initialize repository.

        Args:
            max_entries: Oldest entries are evicted beyond this size
        """
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self._max_entries = max_entries

    async def fetch(self, key: str, now: datetime) -> Optional[CacheEntry]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not entry.is_live(now):
                del self._entries[key]
                return None
            return entry.model_copy(deep=True)

    async def store(self, entry: CacheEntry, now: datetime) -> bool:
        async with self._lock:
            self._entries.pop(entry.key, None)
            self._entries[entry.key] = entry.model_copy(deep=True)
            while len(self._entries) > self._max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("Memory cache evicted", key=oldest)
            return True

    async def delete(self, key: str) -> int:
        async with self._lock:
            return 1 if self._entries.pop(key, None) is not None else 0

    async def clear(self, older_than: Optional[datetime] = None) -> int:
        async with self._lock:
            if older_than is None:
                count = len(self._entries)
                self._entries.clear()
                return count

            stale = [k for k, e in self._entries.items() if e.created_at < older_than]
            for key in stale:
                del self._entries[key]
            return len(stale)

    async def purge_expired(self, now: datetime) -> int:
        async with self._lock:
            expired = [k for k, e in self._entries.items() if not e.is_live(now)]
            for key in expired:
                del self._entries[key]
            return len(expired)

    async def count(self) -> int:
        return len(self._entries)
