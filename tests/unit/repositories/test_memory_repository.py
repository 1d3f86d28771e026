"""Test in-process cache repository."""

from datetime import datetime, timedelta, timezone

import pytest

from jarvis.models.cache_entry import CacheEntry
from jarvis.repositories.memory_repository import MemoryRepository

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def entry(key: str, ttl: float = 60, now: datetime = NOW) -> CacheEntry:
    return CacheEntry.create(key, {"value": key}, ttl_seconds=ttl, now=now)


class TestMemoryRepository:
    """Test MemoryRepository."""

    @pytest.mark.asyncio
    async def test_should_store_and_fetch_entry(self):
        """Test round trip."""
        repo = MemoryRepository()
        await repo.store(entry("a"), NOW)

        result = await repo.fetch("a", NOW)

        assert result.payload == {"value": "a"}

    @pytest.mark.asyncio
    async def test_should_hand_out_copies(self):
        """Test stored and fetched entries do not share payload objects."""
        repo = MemoryRepository()
        original = entry("a")
        await repo.store(original, NOW)
        original.payload["value"] = "changed"

        first = await repo.fetch("a", NOW)
        first.payload["value"] = "changed again"

        assert (await repo.fetch("a", NOW)).payload == {"value": "a"}

    @pytest.mark.asyncio
    async def test_should_purge_expired_entry_on_fetch(self):
        """Test expired entries are removed when read."""
        repo = MemoryRepository()
        await repo.store(entry("a", ttl=10), NOW)

        result = await repo.fetch("a", NOW + timedelta(seconds=10))

        assert result is None
        assert await repo.count() == 0

    @pytest.mark.asyncio
    async def test_should_overwrite_existing_entry(self):
        """Test last write wins."""
        repo = MemoryRepository()
        await repo.store(entry("a"), NOW)
        await repo.store(CacheEntry.create("a", "new", ttl_seconds=60, now=NOW), NOW)

        result = await repo.fetch("a", NOW)

        assert result.payload == "new"
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_should_evict_oldest_beyond_capacity(self):
        """Test size bound."""
        repo = MemoryRepository(max_entries=2)
        for key in ("a", "b", "c"):
            await repo.store(entry(key), NOW)

        assert await repo.fetch("a", NOW) is None
        assert await repo.fetch("c", NOW) is not None
        assert await repo.count() == 2

    @pytest.mark.asyncio
    async def test_should_delete_entry(self):
        """Test delete counts."""
        repo = MemoryRepository()
        await repo.store(entry("a"), NOW)

        assert await repo.delete("a") == 1
        assert await repo.delete("a") == 0

    @pytest.mark.asyncio
    async def test_should_clear_only_entries_older_than_cutoff(self):
        """Test age-filtered clear."""
        repo = MemoryRepository()
        await repo.store(entry("old", now=NOW), NOW)
        later = NOW + timedelta(seconds=30)
        await repo.store(entry("new", now=later), later)

        removed = await repo.clear(older_than=NOW + timedelta(seconds=10))

        assert removed == 1
        assert await repo.fetch("new", later) is not None

    @pytest.mark.asyncio
    async def test_should_purge_expired_entries(self):
        """Test sweep."""
        repo = MemoryRepository()
        await repo.store(entry("short", ttl=5), NOW)
        await repo.store(entry("long", ttl=500), NOW)

        removed = await repo.purge_expired(NOW + timedelta(seconds=6))

        assert removed == 1
        assert await repo.count() == 1
