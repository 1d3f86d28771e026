"""Unit tests for Rate Limiting Middleware."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from jarvis.api.middleware.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimitMiddleware,
)


class FakeTime:
    """Controllable seconds clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestRateLimitConfig:
    """Tests for RateLimitConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = RateLimitConfig()

        assert config.max_requests == 20
        assert config.window_seconds == 60
        assert config.enabled is True


class TestInMemoryRateLimiter:
    """Tests for InMemoryRateLimiter."""

    def test_should_allow_requests_under_limit(self):
        """Test requests within the window."""
        limiter = InMemoryRateLimiter(RateLimitConfig(max_requests=3), clock=FakeTime())

        assert all(limiter.check("ip:1")[0] for _ in range(3))
        assert limiter.remaining("ip:1") == 0

    def test_should_block_requests_over_limit(self):
        """Test the limit."""
        clock = FakeTime()
        limiter = InMemoryRateLimiter(RateLimitConfig(max_requests=2, window_seconds=60), clock)
        limiter.check("ip:1")
        clock.now += 10
        limiter.check("ip:1")

        allowed, retry_after = limiter.check("ip:1")

        assert allowed is False
        assert retry_after == 50

    def test_should_allow_again_after_window(self):
        """Test sliding window."""
        clock = FakeTime()
        limiter = InMemoryRateLimiter(RateLimitConfig(max_requests=1, window_seconds=60), clock)
        limiter.check("ip:1")

        clock.now += 61

        assert limiter.check("ip:1") == (True, 0)

    def test_should_track_callers_separately(self):
        """Test per-key limits."""
        limiter = InMemoryRateLimiter(RateLimitConfig(max_requests=1), clock=FakeTime())
        limiter.check("ip:1")

        assert limiter.check("ip:2")[0] is True

    def test_should_allow_everything_when_disabled(self):
        """Test disabled limiter."""
        limiter = InMemoryRateLimiter(RateLimitConfig(max_requests=1, enabled=False))

        assert all(limiter.check("ip:1")[0] for _ in range(5))


def create_app(config: RateLimitConfig) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, config=config)

    @app.get("/api/v1/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


class TestRateLimitMiddleware:
    """Tests for RateLimitMiddleware."""

    def test_should_add_rate_limit_headers(self):
        """Test headers on allowed requests."""
        client = TestClient(create_app(RateLimitConfig(max_requests=5)))

        response = client.get("/api/v1/ping")

        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "5"
        assert response.headers["X-RateLimit-Remaining"] == "4"

    def test_should_return_429_over_limit(self):
        """Test rejection body."""
        client = TestClient(create_app(RateLimitConfig(max_requests=1)))
        client.get("/api/v1/ping")

        response = client.get("/api/v1/ping")

        assert response.status_code == 429
        assert response.json()["error_code"] == "RATE_LIMIT_EXCEEDED"
        assert "Retry-After" in response.headers

    def test_should_limit_per_session_header(self):
        """Test session identity."""
        client = TestClient(create_app(RateLimitConfig(max_requests=1)))
        client.get("/api/v1/ping", headers={"X-Session-ID": "a"})

        response = client.get("/api/v1/ping", headers={"X-Session-ID": "b"})

        assert response.status_code == 200

    def test_should_exempt_health_check(self):
        """Test exempt paths."""
        client = TestClient(create_app(RateLimitConfig(max_requests=1)))

        statuses = [client.get("/health").status_code for _ in range(3)]

        assert statuses == [200, 200, 200]
