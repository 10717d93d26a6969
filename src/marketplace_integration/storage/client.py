from urllib.parse import urlsplit

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..logging_config import get_logger

logger = get_logger(__name__)


def _display_url(url: str) -> str:
    parts = urlsplit(url)
    if parts.password is None:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return parts._replace(netloc=netloc).geturl()


class RedisClient:
    """Owns the Redis connection shared by all stores.

    ``connect`` pings the server so a bad URL fails at startup rather than on the
    first request.
    """

    def __init__(self, redis_url: str):
        if not redis_url:
            raise ValueError("redis_url is required")
        self.redis_url = redis_url
        self._redis: redis.Redis | None = None

    async def connect(self) -> None:
        if self._redis is not None:
            return
        client = redis.from_url(self.redis_url, decode_responses=True)
        try:
            await client.ping()
        except RedisError:
            await client.aclose()
            logger.error("redis_connect_failed", redis_url=_display_url(self.redis_url))
            raise
        self._redis = client
        logger.info("redis_connected", redis_url=_display_url(self.redis_url))

    async def close(self) -> None:
        if self._redis is None:
            return
        await self._redis.aclose()
        self._redis = None
        logger.info("redis_closed")

    @property
    def redis(self) -> redis.Redis:
        if self._redis is None:
            raise RuntimeError("RedisClient.connect() has not been awaited")
        return self._redis
