"""
Two-tier cache store.

Sandi Metz Principles:
- Single Responsibility: Cache operations orchestration
- Dependency Injection: Backends and clock injected
- Fail open: Backend errors degrade to misses
"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from jarvis.exceptions import CacheBackendError, ValidationError
from jarvis.models.cache_entry import CacheEntry, CacheScope, CacheStats, utc_now
from jarvis.repositories.base import CacheRepository
from jarvis.repositories.memory_repository import MemoryRepository
from jarvis.utils.hasher import generate_tag_key
from jarvis.utils.logger import get_logger, log_cache_hit, log_cache_miss

logger = get_logger(__name__)

Clock = Callable[[], datetime]
Loader = Callable[[List[str]], Awaitable[Dict[str, Any]]]


class CacheStore:
    """
    Cache over an ephemeral and an optional durable backend.

    Reads check memory first, then the durable backend, promoting durable
    hits into memory. Backend failures are logged and never raised.
    """

    def __init__(
        self,
        memory: Optional[MemoryRepository] = None,
        durable: Optional[CacheRepository] = None,
        enabled: bool = True,
        clock: Clock = utc_now,
    ):
        """
        Initialize cache store.

        Args:
            memory: Ephemeral backend (a fresh one if None)
            durable: Durable backend (memory-only if None)
            enabled: Initial enabled flag
            clock: Source of the current time
        """
        self._backends: Dict[CacheScope, CacheRepository] = {
            CacheScope.MEMORY: memory or MemoryRepository()
        }
        if durable is not None:
            self._backends[CacheScope.DURABLE] = durable
        self._enabled = enabled
        self._clock = clock
        self._tag_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def has_durable(self) -> bool:
        return CacheScope.DURABLE in self._backends

    def enable(self) -> None:
        """Turn caching on."""
        self._enabled = True
        logger.info("Cache enabled")

    def disable(self) -> None:
        """Turn caching off; reads miss and writes are no-ops."""
        self._enabled = False
        logger.info("Cache disabled")

    async def get(self, key: str, scope: CacheScope = CacheScope.ALL) -> Any:
        """
        Get cached payload.

        Args:
            key: Cache key
            scope: Backends to consult

        Returns:
            Payload if a live entry exists, None otherwise
        """
        entry = await self.get_entry(key, scope)
        return entry.payload if entry else None

    async def get_entry(
        self, key: str, scope: CacheScope = CacheScope.ALL
    ) -> Optional[CacheEntry]:
        """
        Get the full cache entry.

        Args:
            key: Cache key
            scope: Backends to consult

        Returns:
            Live cache entry or None
        """
        if not self._enabled:
            return None

        now = self._clock()
        for backend_scope, backend in self._selected(scope):
            entry = await self._guarded(backend, "fetch", None, key, now)
            if entry is None:
                continue

            log_cache_hit(key, source=backend.name)
            if backend_scope is CacheScope.DURABLE and scope.includes(CacheScope.MEMORY):
                await self._promote(entry, now)
            return entry

        log_cache_miss(key)
        return None

    async def set(
        self,
        key: str,
        payload: Any,
        ttl_seconds: float,
        tags: Iterable[str] = (),
        source: str = "cache",
        model: str = "unknown",
        tokens_used: int = 0,
        scope: CacheScope = CacheScope.ALL,
    ) -> bool:
        """
        Store payload under key, overwriting any previous entry.

        Args:
            key: Cache key
            payload: JSON-serializable value
            ttl_seconds: Time to live (must be positive)
            tags: Invalidation tags recorded on the entry
            source: Producer label
            model: Model label
            tokens_used: Token count
            scope: Backends to write

        Returns:
            True if at least one backend stored the entry

        Raises:
            ValidationError: If ttl_seconds is not positive
        """
        if ttl_seconds <= 0:
            raise ValidationError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if not self._enabled:
            return False

        now = self._clock()
        entry = CacheEntry.create(
            key=key,
            payload=payload,
            ttl_seconds=ttl_seconds,
            now=now,
            tags=list(tags),
            source=source,
            model=model,
            tokens_used=tokens_used,
        )

        stored = False
        for _, backend in self._selected(scope):
            if await self._guarded(backend, "store", False, entry, now):
                stored = True
        return stored

    async def delete(self, key: str, scope: CacheScope = CacheScope.ALL) -> int:
        """
        Delete key from the selected backends.

        Returns:
            Entries removed, summed over backends
        """
        removed = 0
        for _, backend in self._selected(scope):
            removed += await self._guarded(backend, "delete", 0, key)
        return removed

    async def clear(
        self,
        scope: CacheScope = CacheScope.ALL,
        older_than: Optional[datetime] = None,
    ) -> Dict[str, int]:
        """
        Remove entries, optionally only those created before a cutoff.

        Args:
            scope: Backends to clear
            older_than: Creation cutoff

        Returns:
            Count removed per backend name
        """
        counts = {}
        for _, backend in self._selected(scope):
            counts[backend.name] = await self._guarded(backend, "clear", 0, older_than)
        logger.info("Cache cleared", scope=scope.value, counts=counts)
        return counts

    async def purge_expired(self) -> Dict[str, int]:
        """
        Sweep expired entries from every backend.

        Returns:
            Count removed per backend name
        """
        now = self._clock()
        counts = {}
        for _, backend in self._selected(CacheScope.ALL):
            counts[backend.name] = await self._guarded(backend, "purge_expired", 0, now)
        return counts

    async def cache_with_tags(
        self,
        key: str,
        payload: Any,
        tags: Iterable[str],
        ttl_seconds: float,
        source: str = "cache",
        model: str = "unknown",
        tokens_used: int = 0,
    ) -> bool:
        """
        Store payload and register key under each tag index.

        Tag indexes live twice as long as the entry and carry no tags.

        Returns:
            True if the entry was stored
        """
        tags = list(dict.fromkeys(tags))
        stored = await self.set(
            key,
            payload,
            ttl_seconds,
            tags=tags,
            source=source,
            model=model,
            tokens_used=tokens_used,
        )
        if not stored:
            return False

        async with self._tag_lock:
            for tag in tags:
                index_key = generate_tag_key(tag)
                existing: List[str] = await self.get(index_key) or []
                keys = existing if key in existing else [*existing, key]
                await self.set(index_key, keys, ttl_seconds * 2, source="tag_index")
        return True

    async def invalidate_tag(self, tag: str) -> int:
        """
        Delete every key registered under tag, then the tag index.

        Args:
            tag: Tag name

        Returns:
            Number of tagged keys removed
        """
        index_key = generate_tag_key(tag)
        async with self._tag_lock:
            keys: List[str] = await self.get(index_key) or []
            removed = 0
            for key in keys:
                if key == index_key:
                    continue
                if await self.delete(key) > 0:
                    removed += 1
            await self.delete(index_key)

        logger.info("Tag invalidated", tag=tag, removed=removed)
        return removed

    async def get_by_tag(self, tag: str) -> Dict[str, Any]:
        """
        Collect live payloads registered under tag.

        Returns:
            Mapping of key to payload
        """
        keys: List[str] = await self.get(generate_tag_key(tag)) or []
        found = {}
        for key in keys:
            payload = await self.get(key)
            if payload is not None:
                found[key] = payload
        return found

    async def prefetch(
        self,
        keys: Iterable[str],
        loader: Loader,
        ttl_seconds: float,
        source: str = "prefetch",
    ) -> Dict[str, Any]:
        """
        Resolve many keys at once, loading and caching only the misses.

        The loader is awaited once with every missing key and returns a
        mapping for the keys it could produce. None values are skipped.

        Args:
            keys: Keys to resolve
            loader: Async callable producing payloads for missing keys
            ttl_seconds: Time to live for loaded payloads
            source: Producer label for loaded entries

        Returns:
            Mapping of key to payload, cached and loaded
        """
        found: Dict[str, Any] = {}
        missing: List[str] = []
        for key in dict.fromkeys(keys):
            payload = await self.get(key)
            if payload is None:
                missing.append(key)
            else:
                found[key] = payload

        if not missing:
            return found

        hits = len(found)
        loaded = await loader(missing)
        wanted = set(missing)
        for key, payload in loaded.items():
            if key not in wanted or payload is None:
                continue
            await self.set(key, payload, ttl_seconds, source=source)
            found[key] = payload

        logger.debug("Cache prefetch", hits=hits, loaded=len(found) - hits)
        return found

    async def stats(self) -> CacheStats:
        """
        Get per-backend entry counts and reachability.

        Returns:
            Cache statistics
        """
        counts = {}
        reachable = {}
        for _, backend in self._selected(CacheScope.ALL):
            counts[backend.name] = await self._guarded(backend, "count", 0)
            reachable[backend.name] = await backend.ping()

        return CacheStats(
            enabled=self._enabled,
            memory_entries=counts.get(CacheScope.MEMORY.value, 0),
            durable_entries=counts.get(CacheScope.DURABLE.value, 0),
            backends=reachable,
        )

    def _selected(self, scope: CacheScope):
        return [(s, b) for s, b in self._backends.items() if scope.includes(s)]

    async def _promote(self, entry: CacheEntry, now: datetime) -> None:
        memory = self._backends[CacheScope.MEMORY]
        await self._guarded(memory, "store", False, entry, now)

    async def _guarded(self, backend: CacheRepository, operation: str, default, *args):
        try:
            return await getattr(backend, operation)(*args)
        except CacheBackendError as e:
            logger.warning(
                "Cache backend failed",
                backend=backend.name,
                operation=operation,
                error=str(e),
            )
            return default
