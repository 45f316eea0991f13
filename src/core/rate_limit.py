"""Fixed-window write rate limiting on Redis counters."""

from typing import TYPE_CHECKING

from src.core.errors import RateLimitExceededError


if TYPE_CHECKING:
    from redis.asyncio import Redis


class RateLimiter:
    """Per-user fixed-window counter.

    ``check`` raises once the window's budget is spent; ``hit`` records a
    successful write. Without a Redis client both are no-ops.
    """

    def __init__(
        self,
        redis: "Redis | None",
        scope: str,
        limit: int,
        window_seconds: int,
        message: str = "Too many requests",
    ):
        self.redis = redis
        self.scope = scope
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message

    def _key(self, user_id: int) -> str:
        return f"ratelimit:{self.scope}:{user_id}"

    async def check(self, user_id: int) -> None:
        if not self.redis:
            return

        current = await self.redis.get(self._key(user_id))
        if current and int(current) >= self.limit:
            raise RateLimitExceededError(self.message)

    async def hit(self, user_id: int) -> None:
        if not self.redis:
            return

        key = self._key(user_id)
        pipe = self.redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, self.window_seconds)
        await pipe.execute()
