"""
Fixed-window rate limiting keyed by client identifier.

Two stores share the same contract: ``await limiter.check_limit(key)``
returns a ``RateLimitDecision``. ``FixedWindowRateLimiter`` keeps its
records in process memory; ``RedisRateLimiter`` keeps them in Redis so
several workers can share one budget.
"""
from __future__ import annotations

import asyncio
import datetime
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from redis.asyncio import Redis

from logos_api.config import logger

UNKNOWN_CLIENT = "unknown"


@dataclass
class RateLimitRecord:
    count: int
    window_start: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single rate limit check."""

    allowed: bool
    remaining: int
    reset_at: float  # epoch seconds
    limit: int

    def retry_after(self, now: float) -> int:
        """Whole seconds until the window resets, at least 1."""
        return max(1, math.ceil(self.reset_at - now))

    @property
    def reset_at_iso(self) -> str:
        return datetime.datetime.fromtimestamp(self.reset_at, tz=datetime.timezone.utc).isoformat()


class RateLimiter(Protocol):
    max_requests: int
    window_seconds: float

    async def check_limit(self, key: Optional[str]) -> RateLimitDecision: ...

    def now(self) -> float: ...


class FixedWindowRateLimiter:
    """
    In-memory fixed-window counter.

    A rejected request does not consume budget: the stored count never
    exceeds ``max_requests``.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = asyncio.Lock()

    def now(self) -> float:
        return self._clock()

    def __len__(self) -> int:
        return len(self._records)

    def get_record(self, key: str) -> Optional[RateLimitRecord]:
        return self._records.get(key)

    async def check_limit(self, key: Optional[str]) -> RateLimitDecision:
        key = key or UNKNOWN_CLIENT
        async with self._lock:
            now = self._clock()
            record = self._records.get(key)

            if record is None or now - record.window_start > self.window_seconds:
                self._records[key] = RateLimitRecord(count=1, window_start=now)
                return RateLimitDecision(
                    allowed=True,
                    remaining=self.max_requests - 1,
                    reset_at=now + self.window_seconds,
                    limit=self.max_requests,
                )

            reset_at = record.window_start + self.window_seconds

            if record.count >= self.max_requests:
                return RateLimitDecision(
                    allowed=False,
                    remaining=0,
                    reset_at=reset_at,
                    limit=self.max_requests,
                )

            record.count += 1
            return RateLimitDecision(
                allowed=True,
                remaining=self.max_requests - record.count,
                reset_at=reset_at,
                limit=self.max_requests,
            )

    async def sweep(self) -> int:
        """Evict records whose window has expired. Returns the number removed."""
        async with self._lock:
            now = self._clock()
            stale = [
                key for key, record in self._records.items()
                if now - record.window_start > self.window_seconds
            ]
            for key in stale:
                del self._records[key]
        if stale:
            logger.debug("Rate limiter sweep evicted %d records", len(stale))
        return len(stale)

    async def run_sweeper(self, interval_seconds: float) -> None:
        """Sweep forever at a fixed interval; cancel the task to stop."""
        while True:
            await asyncio.sleep(interval_seconds)
            await self.sweep()


# Returns {allowed, count, pttl}. A request is only counted while count < limit.
_FIXED_WINDOW_LUA = """
local count = tonumber(redis.call("GET", KEYS[1]) or "0")
if count >= tonumber(ARGV[1]) then
  return {0, count, redis.call("PTTL", KEYS[1])}
end
count = redis.call("INCR", KEYS[1])
if count == 1 then
  redis.call("PEXPIRE", KEYS[1], ARGV[2])
end
return {1, count, redis.call("PTTL", KEYS[1])}
"""


class RedisRateLimiter:
    """Fixed-window counter stored in Redis; keys expire at the end of their window."""

    KEY_PREFIX = "logos:rl:"

    def __init__(
        self,
        redis: Redis,
        max_requests: int = 5,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self.redis = redis
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{key}"

    async def check_limit(self, key: Optional[str]) -> RateLimitDecision:
        key = key or UNKNOWN_CLIENT
        window_ms = int(self.window_seconds * 1000)
        allowed, count, pttl = await self.redis.eval(
            _FIXED_WINDOW_LUA, 1, self._key(key), self.max_requests, window_ms
        )
        pttl = int(pttl)
        if pttl < 0:
            pttl = window_ms
        reset_at = self._clock() + pttl / 1000

        if not int(allowed):
            return RateLimitDecision(allowed=False, remaining=0, reset_at=reset_at, limit=self.max_requests)

        return RateLimitDecision(
            allowed=True,
            remaining=max(0, self.max_requests - int(count)),
            reset_at=reset_at,
            limit=self.max_requests,
        )

    async def close(self) -> None:
        await self.redis.aclose()


async def create_redis_client(url: str) -> Redis:
    """Create and ping a Redis client. Fails loudly when Redis is unreachable."""
    try:
        client = Redis.from_url(url, decode_responses=True, socket_timeout=2, socket_connect_timeout=2)
        await client.ping()
        logger.info("Redis client initialized and validated")
        return client
    except Exception as exc:
        logger.error("Failed to initialize Redis client: %s", exc)
        raise RuntimeError(f"Redis initialization failed: {exc}") from exc
