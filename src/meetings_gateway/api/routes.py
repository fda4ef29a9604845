"""API routes for health checks, the auth session and professions"""

import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from ..core.auth_session import AuthSession
from ..core.errors import NotAuthenticatedError
from ..core.health_checker import HealthChecker
from ..core.professions import ProfessionProvider
from .schemas import SignInRequest, SignUpRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _session(request: Request) -> AuthSession:
    return request.state.auth_session


def _health_checker(request: Request) -> HealthChecker:
    return request.app.state.health_checker


def _professions(request: Request) -> ProfessionProvider:
    return request.app.state.profession_provider


def _envelope(session: AuthSession, content: Any, **extra: Any) -> Dict[str, Any]:
    """Response body carrying content plus the session's pending toasts."""
    return {
        "content": content,
        **extra,
        "notifications": [n.to_dict() for n in session.notifier.drain()],
    }


def _user_record(session: AuthSession) -> Optional[Dict[str, Any]]:
    return session.current_user.to_record() if session.current_user else None


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Only verifies the process is responsive; use /health/ready for a check
    of the token store, identity provider and profession list.
    """
    return {
        "status": "healthy",
        "service": "meetings-gateway",
        "version": "1.0.0",
    }


@router.get("/health/live")
async def liveness_probe(request: Request) -> Dict[str, Any]:
    """Liveness probe (200 = alive)"""
    health = await _health_checker(request).check_liveness()
    return health.to_dict()


@router.get("/health/ready")
async def readiness_probe(request: Request) -> Response:
    """
    Readiness probe.

    Returns:
        200 if ready, 503 if not ready
    """
    health = await _health_checker(request).check_readiness()
    status_code = status.HTTP_200_OK if health.ready else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=health.to_dict())


@router.get("/api/v1/auth/state")
async def auth_state(request: Request) -> Dict[str, Any]:
    """Current state of the session: loading/authenticated/anonymous"""
    session = _session(request)
    return _envelope(session, session.to_dict())


@router.post("/api/v1/auth/sign-up")
async def sign_up(request: Request, body: SignUpRequest) -> Response:
    """
    Create an account and its profile.

    A duplicate email raises a field-level error (400 with "errors");
    any other failure comes back as 400 with the failure in "notifications".
    """
    session = _session(request)
    user = await session.sign_up(body.email, body.password, **body.profile_fields())
    if user is None:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_envelope(session, None, error="sign_up_failed"),
        )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=_envelope(session, user.to_record()),
    )


@router.post("/api/v1/auth/sign-in")
async def sign_in(request: Request, body: SignInRequest) -> Dict[str, Any]:
    """Sign in; a rejected sign-in answers 401 with a localized message"""
    session = _session(request)
    await session.sign_in(body.email, body.password)
    return _envelope(session, _user_record(session), state=session.state.value)


@router.post("/api/v1/auth/logout")
async def log_out(request: Request) -> Response:
    """Clear tokens and user, drop the session, then redirect to the root route"""
    session = _session(request)
    redirect_url = session.log_out()
    request.app.state.sessions.discard(session.session_id)
    return RedirectResponse(url=redirect_url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/api/v1/users/me")
async def get_current_user(request: Request) -> Dict[str, Any]:
    session = _session(request)
    if session.current_user is None:
        raise NotAuthenticatedError()
    return _envelope(session, _user_record(session))


@router.patch("/api/v1/users/me")
async def update_current_user(
    request: Request, fields: Dict[str, Any] = Body(...)
) -> Dict[str, Any]:
    """Merge fields into the current profile"""
    session = _session(request)
    await session.update_current_user(fields)
    return _envelope(session, _user_record(session))


@router.get("/api/v1/notifications")
async def get_notifications(request: Request) -> Dict[str, Any]:
    """Drain pending toasts for this session"""
    session = _session(request)
    return {"content": [n.to_dict() for n in session.notifier.drain()]}


@router.get("/api/v1/professions")
async def list_professions(request: Request) -> Dict[str, Any]:
    provider = _professions(request)
    return {
        "isLoading": provider.is_loading,
        "content": [p.to_record() for p in provider.professions],
        "notifications": [n.to_dict() for n in provider.notifier.pending()],
    }


@router.get("/api/v1/professions/{profession_id}")
async def get_profession(request: Request, profession_id: str) -> Response:
    profession = _professions(request).get_profession(profession_id)
    if profession is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"content": None})
    return JSONResponse(content={"content": profession.to_record()})
