"""Test cache entry models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from jarvis.models.cache_entry import CacheEntry, CacheScope

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


class TestCacheEntry:
    """Test CacheEntry model."""

    def test_should_create_entry_with_ttl(self):
        """Test expiry is computed from the TTL."""
        entry = CacheEntry.create("k", {"a": 1}, ttl_seconds=60, now=NOW, tags=["t"])

        assert entry.created_at == NOW
        assert entry.expires_at == NOW + timedelta(seconds=60)
        assert entry.tags == ["t"]
        assert entry.source == "cache"

    def test_should_reject_expiry_before_creation(self):
        """Test expires_at must follow created_at."""
        with pytest.raises(ValidationError):
            CacheEntry(key="k", payload=1, created_at=NOW, expires_at=NOW)

    def test_should_be_live_until_expiry(self):
        """Test liveness boundary."""
        entry = CacheEntry.create("k", "v", ttl_seconds=10, now=NOW)

        assert entry.is_live(NOW + timedelta(seconds=9)) is True
        assert entry.is_live(NOW + timedelta(seconds=10)) is False

    def test_should_report_remaining_seconds(self):
        """Test remaining TTL never goes negative."""
        entry = CacheEntry.create("k", "v", ttl_seconds=10, now=NOW)

        assert entry.remaining_seconds(NOW + timedelta(seconds=4)) == 6
        assert entry.remaining_seconds(NOW + timedelta(seconds=20)) == 0

    def test_should_round_trip_through_json(self):
        """Test serialization for the durable backend."""
        entry = CacheEntry.create("k", {"text": "hi"}, ttl_seconds=10, now=NOW, model="m")

        restored = CacheEntry.model_validate_json(entry.model_dump_json())

        assert restored == entry

    def test_should_be_immutable(self):
        """Test frozen model."""
        entry = CacheEntry.create("k", "v", ttl_seconds=10, now=NOW)
        with pytest.raises(ValidationError):
            entry.key = "other"


class TestCacheScope:
    """Test CacheScope selection."""

    def test_all_should_include_every_backend(self):
        """Test ALL covers both backends."""
        assert CacheScope.ALL.includes(CacheScope.MEMORY)
        assert CacheScope.ALL.includes(CacheScope.DURABLE)

    def test_single_scope_should_include_only_itself(self):
        """Test single backend scopes."""
        assert CacheScope.MEMORY.includes(CacheScope.MEMORY)
        assert not CacheScope.MEMORY.includes(CacheScope.DURABLE)
