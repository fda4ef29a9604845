"""Gateway error types and user-facing messages"""

from typing import Dict, Optional

EMAIL_EXISTS_MESSAGE = "Пользователь с таким Email уже существует"
INVALID_CREDENTIALS_MESSAGE = "Email или пароль введены некорректно"
TOO_MANY_ATTEMPTS_MESSAGE = "Слишком много попыток входа. Попробуйте позже"
UNKNOWN_ERROR_MESSAGE = "Произошла неизвестная ошибка"

# Identity API codes that mean "wrong email or password"
INVALID_CREDENTIAL_CODES = frozenset(
    {"INVALID_PASSWORD", "EMAIL_NOT_FOUND", "INVALID_LOGIN_CREDENTIALS"}
)


class GatewayError(Exception):
    """Base class for errors raised by providers and HTTP clients"""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class IdentityAPIError(GatewayError):
    """
    Error response from the identity API.

    The identity API reports errors as {"error": {"code": 400, "message":
    "EMAIL_EXISTS"}}. Messages may carry a detail suffix separated by
    " : " (e.g. "WEAK_PASSWORD : Password should be at least 6 characters"),
    so `code` holds only the leading identifier.
    """

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.code = message.split(" : ")[0].strip() if message else ""


class ServiceError(GatewayError):
    """Error response (or no response) from the user/profession backend"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FieldValidationError(GatewayError):
    """Field-level validation failure, e.g. {"email": "..."}"""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors


class SignInError(GatewayError):
    """Localized sign-in failure shown next to the sign-in form"""


class NotAuthenticatedError(GatewayError):
    """Operation requires a signed-in user"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


def error_message(error: BaseException) -> str:
    """Human-readable text for a notification"""
    if isinstance(error, GatewayError) and error.message:
        return error.message
    return str(error) or UNKNOWN_ERROR_MESSAGE
