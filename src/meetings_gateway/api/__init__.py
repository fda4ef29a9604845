"""API layer - Middleware, routing and error mapping"""

from .error_handlers import register_exception_handlers
from .middleware import SessionMiddleware
from .routes import router

__all__ = ["SessionMiddleware", "register_exception_handlers", "router"]
