"""
Pytest configuration and fixtures.

Provides common fixtures for testing.
"""

from datetime import datetime, timedelta, timezone

import pytest

from jarvis.cache.cache_store import CacheStore
from jarvis.config import AppConfig
from jarvis.models.query import QueryAnalysis
from jarvis.repositories.memory_repository import MemoryRepository


class FakeClock:
    """Controllable clock returning aware UTC datetimes."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def test_config() -> AppConfig:
    """
    Create test configuration.

    Returns:
        Test configuration instance
    """
    return AppConfig(
        app_env="development",
        debug=False,
        redis_host="localhost",
        redis_port=6379,
        groq_api_key="test-key",
        default_model="primary-model",
        backup_model="backup-model",
        llm_retry_base_delay=0.0,
        cache_sweep_interval_seconds=0,
        enable_rate_limit=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock."""
    return FakeClock()


@pytest.fixture
def cache_store(clock) -> CacheStore:
    """Memory-only cache store driven by the fake clock."""
    return CacheStore(memory=MemoryRepository(), clock=clock)


@pytest.fixture
def sample_query() -> str:
    """
    Sample query for testing.

    Returns:
        Sample query text
    """
    return "What is Uzbekistan's capital?"


@pytest.fixture
def web_analysis() -> QueryAnalysis:
    """Analysis asking for web results."""
    return QueryAnalysis(
        type="question",
        category="geography",
        topics=["uzbekistan", "capital"],
        needs_web_search=True,
    )
