"""Redis client backing the session token store.

Failures never propagate: a missing or unreachable Redis reports itself
through is_available() and every operation degrades to a no-op.
"""

import json
import logging
from typing import Any, Optional
from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisClient:
    """Error-tolerant Redis wrapper with JSON helpers."""

    def __init__(self, url: str, client: Optional[Redis] = None):
        self.url = url
        self.client: Optional[Redis] = client
        if self.client is None:
            self._initialize_client()

    def _initialize_client(self) -> None:
        """Connect from URL and verify with PING."""
        try:
            self.client = Redis.from_url(
                self.url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            self.client.ping()
            logger.info(f"✓ Redis client connected to {self._safe_url()}")
        except RedisError as e:
            logger.warning(
                f"Redis connection failed ({self._safe_url()}): {e}. "
                "Session tokens will not be persisted in Redis."
            )
            self.client = None

    def _safe_url(self) -> str:
        # Drop credentials from log output
        return self.url.split("@")[-1]

    def get(self, key: str) -> Optional[str]:
        """Get value from Redis with error handling."""
        if not self.client:
            return None

        try:
            return self.client.get(key)
        except RedisError as e:
            logger.warning(f"Redis GET error for key {key}: {e}")
            return None

    def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        """Set value in Redis with error handling."""
        if not self.client:
            return False

        try:
            self.client.set(key, value, ex=ex)
            return True
        except RedisError as e:
            logger.warning(f"Redis SET error for key {key}: {e}")
            return False

    def delete(self, *keys: str) -> bool:
        """Delete keys with error handling."""
        if not self.client or not keys:
            return False

        try:
            self.client.delete(*keys)
            return True
        except RedisError as e:
            logger.warning(f"Redis DEL error for keys {keys}: {e}")
            return False

    def get_json(self, key: str) -> Optional[Any]:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding malformed JSON stored under {key}")
            return None

    def set_json(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        return self.set(key, json.dumps(value), ex=ex)

    def ping(self) -> bool:
        """Live connectivity check used by readiness probes."""
        if not self.client:
            return False

        try:
            return bool(self.client.ping())
        except RedisError as e:
            logger.warning(f"Redis PING failed: {e}")
            return False

    def is_available(self) -> bool:
        """Check if Redis is available."""
        return self.client is not None
