"""
Sliding-window rate limiter backed by Redis.

The window is approximated the way hosted KV rate limiters do it: requests
are counted in fixed windows, and the previous window's count is weighted by
how much of it still overlaps the trailing interval. The check and the
increment run as one Lua script so concurrent callers sharing a key see
atomic updates.
"""
import time
import logging
import redis.asyncio as redis
from redis.exceptions import RedisError

from moderation_api.core.errors import RateLimiterUnavailableError
from moderation_api.schemas.moderation import RateLimitResult
from moderation_api.services.base.rate_limiter import BaseRateLimiter

logger = logging.getLogger(__name__)

# KEYS[1] current window counter, KEYS[2] previous window counter
# ARGV[1] limit, ARGV[2] now (ms), ARGV[3] window (ms)
# Returns the remaining permits, or -1 when the request is denied.
SLIDING_WINDOW_SCRIPT = """
local limit = tonumber(ARGV[1])
local now = tonumber(ARGV[2])
local window = tonumber(ARGV[3])

local current = tonumber(redis.call("GET", KEYS[1]) or "0")
local previous = tonumber(redis.call("GET", KEYS[2]) or "0")

local elapsed_fraction = (now % window) / window
local weighted_previous = math.floor((1 - elapsed_fraction) * previous)

if weighted_previous + current >= limit then
    return -1
end

local updated = redis.call("INCR", KEYS[1])
if updated == 1 then
    redis.call("PEXPIRE", KEYS[1], window * 2 + 1000)
end
return limit - (updated + weighted_previous)
"""


class SlidingWindowRateLimiter(BaseRateLimiter):
    def __init__(self, client, max_requests: int = 5, window_seconds: int = 60,
                 prefix: str = "moderation_api", clock=time.time):
        self.redis = client
        self.max_requests = max_requests
        self.window_ms = window_seconds * 1000
        self.prefix = prefix
        self.clock = clock
        self._script = self.redis.register_script(SLIDING_WINDOW_SCRIPT)

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "SlidingWindowRateLimiter":
        return cls(redis.from_url(url, decode_responses=True), **kwargs)

    def _key(self, identifier: str, window: int) -> str:
        return f"{self.prefix}:{identifier}:{window}"

    async def limit(self, key: str) -> RateLimitResult:
        now_ms = int(self.clock() * 1000)
        current_window = now_ms // self.window_ms
        keys = [self._key(key, current_window), self._key(key, current_window - 1)]

        try:
            remaining = await self._script(keys=keys, args=[self.max_requests, now_ms, self.window_ms])
        except RedisError as e:
            raise RateLimiterUnavailableError(f"Rate limiter store unavailable: {e}") from e

        return RateLimitResult(
            success=int(remaining) >= 0,
            reset=(current_window + 1) * self.window_ms,
        )

    async def close(self) -> None:
        await self.redis.aclose()
