import pytest
from fastapi.testclient import TestClient

from devkit.config import ServiceSettings
from school_service.app import create_app
from school_service.rate_limit import FixedWindowRateLimiter, InMemoryRateLimitStore, RedisRateLimitStore
from school_service.store import SchoolStore


class FakeRedis:
    def __init__(self) -> None:
        self.counts: dict[str, int] = {}
        self.expiry: dict[str, int] = {}
        self.closed = False

    async def incr(self, name: str, amount: int = 1) -> int:
        self.counts[name] = self.counts.get(name, 0) + amount
        return self.counts[name]

    async def expire(self, name: str, time: int) -> bool:
        self.expiry[name] = time
        return True

    async def aclose(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_rate_limiter_blocks_after_limit() -> None:
    limiter = FixedWindowRateLimiter(InMemoryRateLimitStore(), limit=2, window_seconds=60)
    now = 1200.0

    assert await limiter.allow("10.0.0.1", now) is True
    assert await limiter.allow("10.0.0.1", now + 1) is True
    assert await limiter.allow("10.0.0.1", now + 2) is False
    assert await limiter.allow("10.0.0.2", now + 2) is True


@pytest.mark.asyncio
async def test_rate_limiter_resets_on_next_window() -> None:
    limiter = FixedWindowRateLimiter(InMemoryRateLimitStore(), limit=1, window_seconds=60)

    assert await limiter.allow("10.0.0.1", 1200.0) is True
    assert await limiter.allow("10.0.0.1", 1259.0) is False
    assert await limiter.allow("10.0.0.1", 1260.0) is True


@pytest.mark.asyncio
async def test_decision_reports_remaining_and_reset() -> None:
    limiter = FixedWindowRateLimiter(InMemoryRateLimitStore(), limit=3, window_seconds=60)

    decision = await limiter.check("10.0.0.1", 1210.0)

    assert decision.allowed is True
    assert decision.remaining == 2
    assert decision.reset_after_seconds == 50


@pytest.mark.asyncio
async def test_redis_store_counts_per_window_and_sets_expiry() -> None:
    client = FakeRedis()
    limiter = FixedWindowRateLimiter(RedisRateLimitStore(client), limit=1, window_seconds=60)

    assert await limiter.allow("10.0.0.1", 1200.0) is True
    assert await limiter.allow("10.0.0.1", 1230.0) is False
    assert client.expiry == {"rate_limit:10.0.0.1:1200": 65}


def test_rejects_non_positive_limits() -> None:
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(InMemoryRateLimitStore(), limit=0)


@pytest.mark.asyncio
async def test_closing_limiter_closes_redis_client() -> None:
    client = FakeRedis()
    limiter = FixedWindowRateLimiter(RedisRateLimitStore(client), limit=1, window_seconds=60)

    await limiter.close()

    assert client.closed is True


def test_app_shutdown_closes_rate_limit_client() -> None:
    redis_client = FakeRedis()
    limiter = FixedWindowRateLimiter(RedisRateLimitStore(redis_client), limit=10, window_seconds=60)
    settings = ServiceSettings(_env_file=None, STORE_BACKEND="memory")
    app = create_app(settings=settings, store=SchoolStore(), rate_limiter=limiter)

    with TestClient(app) as http:
        assert http.get("/listSchools?latitude=0&longitude=0").status_code == 200
        assert redis_client.closed is False

    assert redis_client.closed is True
