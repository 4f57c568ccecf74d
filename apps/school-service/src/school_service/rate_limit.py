from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Protocol


class RateLimitStore(ABC):
    @abstractmethod
    async def increment(self, key: str, window_start: int, window_seconds: int) -> int:
        """Count one more request in the window and return the window total."""
        raise NotImplementedError

    async def close(self) -> None:
        return None


class RedisLikeClient(Protocol):
    async def incr(self, name: str, amount: int = 1) -> int: ...

    async def expire(self, name: str, time: int) -> bool: ...

    async def aclose(self) -> None: ...


class InMemoryRateLimitStore(RateLimitStore):
    def __init__(self) -> None:
        self._windows: dict[str, tuple[int, int]] = {}

    async def increment(self, key: str, window_start: int, window_seconds: int) -> int:
        started, count = self._windows.get(key, (window_start, 0))
        if started != window_start:
            count = 0
        count += 1
        self._windows[key] = (window_start, count)
        return count


class RedisRateLimitStore(RateLimitStore):
    def __init__(self, client: RedisLikeClient) -> None:
        self._client = client

    async def increment(self, key: str, window_start: int, window_seconds: int) -> int:
        redis_key = f"rate_limit:{key}:{window_start}"
        count = await self._client.incr(redis_key)
        if count == 1:
            await self._client.expire(redis_key, window_seconds + 5)
        return int(count)

    async def close(self) -> None:
        await self._client.aclose()


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after_seconds: int


class FixedWindowRateLimiter:
    def __init__(
        self,
        store: RateLimitStore,
        limit: int = 100,
        window_seconds: int = 15 * 60,
    ) -> None:
        if limit <= 0 or window_seconds <= 0:
            raise ValueError("limit and window_seconds must be > 0")
        self._store = store
        self._limit = limit
        self._window_seconds = window_seconds

    async def check(self, key: str, now_seconds: float) -> RateLimitDecision:
        window_start = int(now_seconds // self._window_seconds) * self._window_seconds
        count = await self._store.increment(key, window_start, self._window_seconds)
        reset_after = max(1, math.ceil(window_start + self._window_seconds - now_seconds))
        return RateLimitDecision(
            allowed=count <= self._limit,
            limit=self._limit,
            remaining=max(0, self._limit - count),
            reset_after_seconds=reset_after,
        )

    async def allow(self, key: str, now_seconds: float) -> bool:
        return (await self.check(key, now_seconds)).allowed

    async def close(self) -> None:
        await self._store.close()


def create_rate_limit_store(redis_url: str | None) -> RateLimitStore:
    if not redis_url:
        return InMemoryRateLimitStore()
    import redis.asyncio as redis

    client: Any = redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
    return RedisRateLimitStore(client)
