"""
Meetings Gateway - Main Application

Backend-for-frontend holding client session state:
- Auth session provider over the Firebase identity API and the user-record API
- Profession list provider over the profession API (fetched once at startup)
- Per-session token storage (in-memory or Redis)
- Errors surfaced as per-session notifications
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .core.auth_session import AuthSession
from .core.health_checker import HealthChecker
from .core.identity_provider import IIdentityProvider
from .core.notifications import Notifier
from .core.professions import ProfessionProvider
from .core.session_registry import SessionRegistry
from .core.token_store import ITokenStore
from .infrastructure import (
    FirebaseIdentityProvider,
    HttpService,
    MemoryTokenStore,
    ProfessionService,
    RedisClient,
    RedisTokenStore,
    UserService,
)
from .api import SessionMiddleware, register_exception_handlers, router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager for startup/shutdown events"""
    # Startup
    settings: Settings = app.state.settings
    logger.info("Starting meetings-gateway v1.0.0")
    logger.info(f"Identity provider: {settings.primary_identity_provider}")
    logger.info(f"Token store: {app.state.token_store.get_backend_name()}")
    logger.info(f"Gateway listening on {settings.gateway_host}:{settings.gateway_port}")

    await app.state.profession_provider.load()

    yield

    # Shutdown
    logger.info(f"Shutting down meetings-gateway ({len(app.state.sessions)} live sessions)")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Application settings (defaults to the environment)
        transport: Optional httpx transport for every outbound call

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    identity_provider = _create_identity_provider(settings, transport)
    token_store = _create_token_store(settings)

    http = HttpService(
        base_url=settings.api_endpoint,
        token_store=token_store,
        identity_provider=identity_provider,
        is_firebase=settings.is_firebase,
        timeout=settings.http_timeout,
        transport=transport,
    )
    user_service = UserService(http, token_store)
    profession_provider = ProfessionProvider(ProfessionService(http), Notifier())

    def _new_session(session_id: str) -> AuthSession:
        return AuthSession(
            session_id=session_id,
            identity_provider=identity_provider,
            user_service=user_service,
            token_store=token_store,
            notifier=Notifier(),
            avatar_url_template=settings.avatar_url_template,
            logout_redirect_url=settings.logout_redirect_url,
        )

    sessions = SessionRegistry(
        _new_session,
        idle_ttl=settings.session_idle_ttl,
        max_sessions=settings.max_sessions,
    )

    app = FastAPI(
        title="Meetings Gateway",
        description="Session state for the meetings web application",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.token_store = token_store
    app.state.profession_provider = profession_provider
    app.state.sessions = sessions
    app.state.health_checker = HealthChecker(
        token_store=token_store,
        identity_provider=identity_provider,
        profession_provider=profession_provider,
        identity_configured=bool(settings.firebase_api_key),
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Bind requests to sessions
    app.add_middleware(SessionMiddleware, registry=sessions, settings=settings)

    register_exception_handlers(app)
    app.include_router(router)

    return app


def _create_identity_provider(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> IIdentityProvider:
    """
    Create identity provider based on configuration.

    Raises:
        ValueError: If provider is not supported
    """
    if settings.primary_identity_provider == "firebase":
        logger.info("Using Firebase identity provider")
        return FirebaseIdentityProvider(
            api_key=settings.firebase_api_key,
            identity_url=settings.identity_api_url,
            secure_token_url=settings.secure_token_url,
            timeout=settings.http_timeout,
            transport=transport,
        )
    raise ValueError(
        f"Unsupported identity provider: {settings.primary_identity_provider}"
    )


def _create_token_store(settings: Settings) -> ITokenStore:
    """Redis token store when configured and reachable, memory otherwise."""
    if settings.token_store_backend == "redis":
        redis_client = RedisClient(settings.redis_url)
        if redis_client.is_available():
            return RedisTokenStore(
                redis_client,
                prefix=settings.token_key_prefix,
                ttl=settings.session_ttl,
            )
        logger.warning("Redis unavailable, falling back to in-memory token store")
    return MemoryTokenStore()


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    # Configure logging level from settings
    logging.getLogger().setLevel(settings.log_level)

    uvicorn.run(
        "meetings_gateway.main:app",
        host=settings.gateway_host,
        port=settings.gateway_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
