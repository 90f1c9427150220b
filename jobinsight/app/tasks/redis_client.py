"""
Redis client connection management.

Owns the process-wide redis connection used by the result cache.
"""

from typing import Optional

import redis

from jobinsight.app.config import DEFAULT_REDIS_URL


class RedisClient:
    """
    Redis client wrapper.

    No connection is made until connect() is called.
    """

    def __init__(self):
        self._client: Optional[redis.Redis] = None

    def connect(self, url: str = DEFAULT_REDIS_URL) -> redis.Redis:
        """
        Connect to Redis.

        Args:
            url: Redis connection URL (e.g., redis://localhost:6379/0)

        Returns:
            The underlying redis.Redis client
        """
        if self._client is None:
            self._client = redis.Redis.from_url(url, decode_responses=True)
        return self._client

    def disconnect(self) -> None:
        """Close the connection pool, if any."""
        if self._client is not None:
            self._client.close()
            self._client = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> redis.Redis:
        """
        The connected redis.Redis client.

        Raises:
            RuntimeError: If connect() has not been called
        """
        if self._client is None:
            raise RuntimeError("Redis client is not connected; call connect() first")
        return self._client


_redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """Get the global RedisClient instance (not necessarily connected)."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client
