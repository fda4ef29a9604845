"""Token store implementations: in-process memory and Redis"""

import logging
from threading import Lock
from typing import Any, Dict, Optional

from ..core.models import AuthTokens
from ..core.token_store import ITokenStore
from .redis_client import RedisClient

logger = logging.getLogger(__name__)


class MemoryTokenStore(ITokenStore):
    """Per-process token store (development, tests, Redis fallback)."""

    def __init__(self):
        self._tokens: Dict[str, AuthTokens] = {}
        self._profiles: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()

    def set_tokens(self, session_id: str, tokens: AuthTokens) -> None:
        with self._lock:
            self._tokens[session_id] = tokens

    def get_tokens(self, session_id: str) -> Optional[AuthTokens]:
        with self._lock:
            return self._tokens.get(session_id)

    def set_profile(self, session_id: str, profile: Dict[str, Any]) -> None:
        with self._lock:
            self._profiles[session_id] = dict(profile)

    def get_profile(self, session_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            profile = self._profiles.get(session_id)
            return dict(profile) if profile is not None else None

    def remove_auth_data(self, session_id: str) -> None:
        with self._lock:
            self._tokens.pop(session_id, None)
            self._profiles.pop(session_id, None)

    def is_available(self) -> bool:
        return True

    def get_backend_name(self) -> str:
        return "memory"


class RedisTokenStore(ITokenStore):
    """
    Redis-backed token store shared by all gateway processes.

    Layout per session:
        <prefix>:<session_id>:tokens   JSON of AuthTokens.to_dict()
        <prefix>:<session_id>:profile  JSON profile record
    Both keys expire after `ttl` seconds.
    """

    def __init__(self, redis_client: RedisClient, prefix: str, ttl: int):
        self.redis = redis_client
        self.prefix = prefix
        self.ttl = ttl

    def _key(self, session_id: str, kind: str) -> str:
        return f"{self.prefix}:{session_id}:{kind}"

    def set_tokens(self, session_id: str, tokens: AuthTokens) -> None:
        if not self.redis.set_json(self._key(session_id, "tokens"), tokens.to_dict(), ex=self.ttl):
            logger.warning(f"Tokens for session {session_id[:8]}… were not persisted")

    def get_tokens(self, session_id: str) -> Optional[AuthTokens]:
        data = self.redis.get_json(self._key(session_id, "tokens"))
        if not data:
            return None
        try:
            return AuthTokens.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable token record: {e}")
            return None

    def set_profile(self, session_id: str, profile: Dict[str, Any]) -> None:
        self.redis.set_json(self._key(session_id, "profile"), profile, ex=self.ttl)

    def get_profile(self, session_id: str) -> Optional[Dict[str, Any]]:
        return self.redis.get_json(self._key(session_id, "profile"))

    def remove_auth_data(self, session_id: str) -> None:
        self.redis.delete(
            self._key(session_id, "tokens"),
            self._key(session_id, "profile"),
        )

    def is_available(self) -> bool:
        return self.redis.ping()

    def get_backend_name(self) -> str:
        return "redis"
