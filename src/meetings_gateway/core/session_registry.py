"""Registry of live AuthSession objects keyed by session identifier"""

import asyncio
import logging
import secrets
import time
from collections import OrderedDict
from typing import Callable, Dict, Optional

from .auth_session import AuthSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str], AuthSession]


class SessionRegistry:
    """
    Creates, initializes and caches one AuthSession per client.

    A session is initialized exactly once, when first requested; concurrent
    first requests for the same id wait on a lock held for that id only.

    Bounds:
    - Sessions idle for longer than `idle_ttl` seconds are dropped
    - Past `max_sessions`, the least recently used session is dropped

    A dropped session is rebuilt from the token store on its next request.
    """

    def __init__(
        self,
        factory: SessionFactory,
        idle_ttl: Optional[float] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self.idle_ttl = idle_ttl
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: "OrderedDict[str, AuthSession]" = OrderedDict()
        self._last_seen: Dict[str, float] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(32)

    async def get_or_create(self, session_id: Optional[str]) -> AuthSession:
        session_id = session_id or self.new_session_id()
        self._prune()

        session = self._touch(session_id)
        if session is not None:
            return session

        lock = self._locks.setdefault(session_id, asyncio.Lock())
        async with lock:
            session = self._touch(session_id)
            if session is None:
                session = self._factory(session_id)
                try:
                    await session.initialize()
                finally:
                    self._locks.pop(session_id, None)
                self._register(session_id, session)
        return session

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)

    def _touch(self, session_id: str) -> Optional[AuthSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
            self._last_seen[session_id] = self._clock()
        return session

    def _register(self, session_id: str, session: AuthSession) -> None:
        self._sessions[session_id] = session
        self._last_seen[session_id] = self._clock()

        if self.max_sessions is not None:
            while len(self._sessions) > self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                self._last_seen.pop(evicted, None)
                logger.debug(f"Evicted session {evicted[:8]} (limit {self.max_sessions})")

        logger.debug(f"Registered session {session_id[:8]} ({len(self._sessions)} live)")

    def _prune(self) -> None:
        """Drop idle sessions; entries are kept in least-recently-used order."""
        if self.idle_ttl is None:
            return
        cutoff = self._clock() - self.idle_ttl
        while self._sessions:
            oldest = next(iter(self._sessions))
            if self._last_seen.get(oldest, 0.0) > cutoff:
                break
            self.discard(oldest)
            logger.debug(f"Expired idle session {oldest[:8]}")

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
