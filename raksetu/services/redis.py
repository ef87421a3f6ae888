# SPDX-License-Identifier: Apache-2.0

"""
Redis backend for the per-client preference store.

Every operation degrades to a logged failure value instead of raising, so a
Redis outage costs clients their saved theme and language, never a request.
"""

import os
from typing import Any, Callable, Optional
import redis
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class RedisConnectionError(Exception):
    """Raised when Redis does not answer the startup ping."""
    pass


class RedisService:
    """
    Preference backend over the standard redis-py client.

    Values are plain strings. Writes carry a TTL so preferences of clients
    that never come back eventually expire.
    """

    def __init__(self, redis_url: Optional[str] = None, default_ttl: Optional[int] = None):
        """
        Connect to Redis.

        Args:
            redis_url: Connection URL (redis://host:port/db)
            default_ttl: Expiry in seconds applied by set() when none is given
        """
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379")
        self.default_ttl = default_ttl
        self.client: Optional[redis.Redis] = None

        try:
            client = redis.from_url(self.redis_url, decode_responses=True)
            if not client.ping():
                raise RedisConnectionError("Redis ping failed")
            self.client = client
            logger.info("Preference store connected to Redis", extra={"redis_url": self.redis_url})
        except (redis.RedisError, RedisConnectionError) as e:
            logger.error(
                "Redis unavailable, preferences will not persist",
                extra={"redis_url": self.redis_url, "error": str(e)}
            )

    def is_available(self) -> bool:
        return self.client is not None

    def _run(self, operation: str, key: str, call: Callable[[redis.Redis], Any], failed: Any) -> Any:
        if self.client is None:
            logger.debug("Redis not connected, skipping operation", extra={"operation": operation, "key": key})
            return failed

        with tracer.start_as_current_span(f"redis.{operation}") as span:
            span.set_attribute("redis.key", key)
            try:
                result = call(self.client)
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(
                    "Redis operation failed",
                    extra={"operation": operation, "key": key, "error": str(e)}
                )
                return failed

            span.set_attribute("redis.result", "miss" if result is None else "ok")
            return result

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """
        Store a preference value.

        Returns:
            True if Redis accepted the write
        """
        ttl = ttl or self.default_ttl
        if ttl:
            return bool(self._run("setex", key, lambda client: client.setex(key, ttl, value), False))
        return bool(self._run("set", key, lambda client: client.set(key, value), False))

    def get(self, key: str) -> Optional[str]:
        """Stored value, or None when missing or Redis is unreachable."""
        return self._run("get", key, lambda client: client.get(key), None)

    def delete(self, key: str) -> bool:
        return bool(self._run("delete", key, lambda client: client.delete(key), 0))

    def health_check(self) -> dict:
        """Ping Redis for the health endpoint."""
        if self.client is None:
            return {"status": "unhealthy", "error": "Redis not connected"}

        try:
            self.client.ping()
        except redis.RedisError as e:
            logger.error("Redis health check failed", extra={"error": str(e)})
            return {"status": "unhealthy", "error": str(e)}
        return {"status": "healthy", "url": self.redis_url}
