import asyncio
import functools
import logging
import math
import time
from typing import Callable, Dict, Tuple

from fastapi import Request
from redis.asyncio import Redis
from redis.exceptions import RedisError

from tweetvid.core.errors import RateLimitExceeded
from tweetvid.i18n import i18n
from tweetvid.utils.locale import get_locale

logger = logging.getLogger(__name__)


class MemoryRateLimitBackend:
    """Fixed-window counters held in process memory"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str, limit: int, window: int) -> Tuple[bool, int]:
        """Count one request; return (allowed, seconds until reset)."""
        async with self._lock:
            now = self.clock()
            count, reset_at = self._windows.get(key, (0, 0.0))
            if now >= reset_at:
                count, reset_at = 0, now + window
                self._purge(now)
            count += 1
            self._windows[key] = (count, reset_at)

        if count > limit:
            return False, max(1, math.ceil(reset_at - now))
        return True, 0

    def _purge(self, now: float) -> None:
        expired = [k for k, (_, reset_at) in self._windows.items() if reset_at <= now]
        for k in expired:
            del self._windows[k]

    def reset(self) -> None:
        self._windows.clear()


class RedisRateLimitBackend:
    """Redis-based fixed window with Lua script"""

    lua_script = """
    local key = KEYS[1]
    local limit = tonumber(ARGV[1])
    local window = tonumber(ARGV[2])

    local current = redis.call('INCR', key)
    if current == 1 then
        redis.call('EXPIRE', key, window)
    end

    if current > limit then
        local ttl = redis.call('TTL', key)
        return {0, ttl}
    end

    return {1, 0}
    """

    def __init__(self, redis: Redis):
        self.redis = redis

    async def hit(self, key: str, limit: int, window: int) -> Tuple[bool, int]:
        allowed, ttl = await self.redis.eval(self.lua_script, 1, key, limit, window)
        if not allowed:
            return False, max(1, int(ttl))
        return True, 0


class RateLimiter:
    """
    Per-address request cap shared by every /api route that depends on it.

    Reads its settings and backend from ``request.app.state`` so each app
    instance built by ``create_app`` keeps its own counters.
    """

    async def __call__(self, request: Request):
        config = request.app.state.config
        if not config.rate_limit.enabled:
            return True

        client_ip = request.client.host if request.client else "unknown"
        key = f"rate:{client_ip}"
        backend = request.app.state.rate_limit_backend

        try:
            allowed, retry_after = await backend.hit(
                key,
                config.rate_limit.max_requests,
                config.rate_limit.window_seconds
            )
        except RedisError as e:
            logger.warning(f"Rate limit backend unavailable, allowing request: {e}")
            return True

        if not allowed:
            locale = get_locale(request.headers.get("accept-language"), config.i18n)
            _ = functools.partial(i18n.get, locale=locale)
            raise RateLimitExceeded(
                _("error.rate_limit"),
                headers={"Retry-After": str(retry_after)}
            )

        return True


rate_limiter = RateLimiter()
