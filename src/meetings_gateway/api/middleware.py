"""Session binding middleware"""

import logging
from typing import Callable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-ID"

# Endpoints that never read session state
SESSION_FREE_PREFIXES = ("/health", "/api/v1/professions", "/docs", "/redoc", "/openapi.json")


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Binds session-bound API requests to an AuthSession.

    CORS preflights and SESSION_FREE_PREFIXES pass through untouched, so they
    neither create a session nor receive a cookie.

    Flow:
    1. Read the session id from the session cookie (or X-Session-ID header)
    2. Get or create the AuthSession (first use runs initialize())
    3. Expose it as request.state.auth_session
    4. Set the cookie when the session id was newly issued
    """

    def __init__(self, app, registry: SessionRegistry, settings=None):
        """
        Initialize session middleware.

        Args:
            app: FastAPI application
            registry: Session registry shared with the routes
            settings: Application settings (optional)
        """
        super().__init__(app)
        self.registry = registry
        self.cookie_name = settings.session_cookie_name if settings else "meetings_session"
        self.secure_cookies = settings.secure_cookies if settings else False
        self.cookie_max_age = settings.session_ttl if settings else None

        logger.info(f"Initialized SessionMiddleware with cookie: {self.cookie_name}")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Attach the session and forward the request.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            Response from downstream handler
        """
        if request.method == "OPTIONS" or self._is_public_endpoint(request.url.path):
            return await call_next(request)

        session_id = self._extract_session_id(request)
        issued = session_id is None
        if issued:
            session_id = self.registry.new_session_id()

        request.state.auth_session = await self.registry.get_or_create(session_id)

        response = await call_next(request)

        if issued:
            response.set_cookie(
                self.cookie_name,
                value=session_id,
                httponly=True,
                samesite="lax",
                secure=self.secure_cookies,
                max_age=self.cookie_max_age,
            )
            logger.debug(f"Issued session {session_id[:8]} for {request.url.path}")
        return response

    def _extract_session_id(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.cookie_name) or request.headers.get(SESSION_HEADER)

    def _is_public_endpoint(self, path: str) -> bool:
        """Health probes, professions and docs never touch session state."""
        return path.startswith(SESSION_FREE_PREFIXES)
