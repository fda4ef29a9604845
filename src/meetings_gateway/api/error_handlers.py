"""Map gateway errors escaping a route to JSON error bodies"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..core.errors import (
    FieldValidationError,
    GatewayError,
    IdentityAPIError,
    NotAuthenticatedError,
    ServiceError,
    SignInError,
)

logger = logging.getLogger(__name__)


async def _field_validation_error(request: Request, exc: FieldValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "validation_error", "message": exc.message, "errors": exc.errors},
    )


async def _sign_in_error(request: Request, exc: SignInError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": "sign_in_failed", "message": exc.message},
    )


async def _not_authenticated(request: Request, exc: NotAuthenticatedError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": "not_authenticated", "message": exc.message},
    )


async def _upstream_error(request: Request, exc: GatewayError) -> JSONResponse:
    logger.error(f"Upstream failure on {request.method} {request.url.path}: {exc.message}")
    error = "identity_error" if isinstance(exc, IdentityAPIError) else "backend_error"
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"error": error, "message": exc.message},
    )


async def _gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    logger.error(f"Unhandled gateway error on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "gateway_error", "message": exc.message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FieldValidationError, _field_validation_error)
    app.add_exception_handler(SignInError, _sign_in_error)
    app.add_exception_handler(NotAuthenticatedError, _not_authenticated)
    app.add_exception_handler(IdentityAPIError, _upstream_error)
    app.add_exception_handler(ServiceError, _upstream_error)
    app.add_exception_handler(GatewayError, _gateway_error)
