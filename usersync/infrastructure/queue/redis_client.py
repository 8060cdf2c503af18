# usersync/infrastructure/queue/redis_client.py

import redis.asyncio as redis

from usersync.config.settings import settings


class RedisClient:
    def __init__(self, url: str | None = None):
        self.client = redis.from_url(
            url or settings.redis_url,
            decode_responses=True,
        )

    async def push(self, key: str, value: str) -> int:
        """Append value to the tail of list key. Returns the new length."""
        return await self.client.rpush(key, value)

    async def move_head_blocking(self, src: str, dst: str, timeout: float) -> str | None:
        """Atomically move the head of src to the tail of dst, waiting up to timeout seconds."""
        return await self.client.blmove(src, dst, timeout, "LEFT", "RIGHT")

    async def move_tail_to_head(self, src: str, dst: str) -> str | None:
        """Atomically move the tail of src to the head of dst. Returns None when src is empty."""
        return await self.client.lmove(src, dst, "RIGHT", "LEFT")

    async def remove(self, key: str, value: str) -> int:
        """Remove one occurrence of value from list key."""
        return await self.client.lrem(key, 1, value)

    async def length(self, key: str) -> int:
        return await self.client.llen(key)

    async def close(self) -> None:
        await self.client.aclose()
