"""
Redis-backed store client.
"""

import logging

from redis import asyncio as aioredis

logger = logging.getLogger(__name__)


class RedisStore:
    """
    Store client over a Redis connection pool.

    Each method maps onto a single Redis command, so every operation is
    atomic on the server. Connection errors propagate to the caller.
    """

    def __init__(self, client: aioredis.Redis):
        """
        Initialize the store.

        Args:
            client: An asyncio Redis client created with decode_responses=True.
        """
        self._client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float | None = None) -> "RedisStore":
        """
        Create a store from a Redis URL.

        Args:
            url: Redis connection URL.
            socket_timeout: Seconds before a socket operation times out.

        Returns:
            RedisStore: A store backed by a new connection pool.
        """
        client = aioredis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
        )
        return cls(client)

    async def list_push(self, key: str, value: str) -> int:
        return await self._client.rpush(key, value)

    async def list_pop_front(self, key: str) -> str | None:
        return await self._client.lpop(key)

    async def list_length(self, key: str) -> int:
        return await self._client.llen(key)

    async def list_range(self, key: str, start: int, stop: int) -> list[str]:
        return await self._client.lrange(key, start, stop)

    async def set_add(self, key: str, member: str) -> None:
        await self._client.sadd(key, member)

    async def set_remove(self, key: str, member: str) -> None:
        await self._client.srem(key, member)

    async def set_members(self, key: str) -> set[str]:
        return set(await self._client.smembers(key))

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str) -> None:
        await self._client.set(key, value)

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._client.delete(*keys)

    async def incr(self, key: str) -> int:
        return await self._client.incr(key)

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis connection closed")
