"""Firebase Identity Toolkit provider implementation"""

import logging
from typing import Any, Dict, Optional
import httpx

from ..core.errors import IdentityAPIError
from ..core.identity_provider import IIdentityProvider
from ..core.models import AuthTokens

logger = logging.getLogger(__name__)


class FirebaseIdentityProvider(IIdentityProvider):
    """
    Identity provider backed by the Firebase REST APIs.

    Features:
    - Email/password sign-up (accounts:signUp)
    - Email/password sign-in (accounts:signInWithPassword)
    - Refresh-token exchange via the secure token API
    - Error bodies mapped to IdentityAPIError(status, code)
    """

    def __init__(
        self,
        api_key: str,
        identity_url: str = "https://identitytoolkit.googleapis.com/v1/",
        secure_token_url: str = "https://securetoken.googleapis.com/v1/",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Firebase identity provider.

        Args:
            api_key: Firebase web API key
            identity_url: Base URL of the identity toolkit API
            secure_token_url: Base URL of the secure token API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.api_key = api_key
        # "accounts:signUp" is not a valid relative reference, so URLs are
        # joined as strings rather than through httpx base_url.
        self.identity_url = identity_url.rstrip("/") + "/"
        self.secure_token_url = secure_token_url.rstrip("/") + "/"
        self.timeout = timeout
        self._transport = transport

        if not api_key:
            logger.warning("FirebaseIdentityProvider initialized without an API key")
        logger.info(f"Initialized FirebaseIdentityProvider with endpoint: {self.identity_url}")

    async def sign_up(self, email: str, password: str) -> AuthTokens:
        data = await self._post(
            f"{self.identity_url}accounts:signUp",
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        logger.info(f"Created identity account {data.get('localId')}")
        return AuthTokens.from_identity_response(data)

    async def sign_in(self, email: str, password: str) -> AuthTokens:
        data = await self._post(
            f"{self.identity_url}accounts:signInWithPassword",
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        logger.info(f"Signed in identity account {data.get('localId')}")
        return AuthTokens.from_identity_response(data)

    async def refresh(self, refresh_token: str) -> AuthTokens:
        data = await self._post(
            f"{self.secure_token_url}token",
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
        )
        logger.debug(f"Refreshed access token for {data.get('user_id')}")
        return AuthTokens.from_identity_response(data)

    def get_provider_name(self) -> str:
        """Return the name of this identity provider"""
        return "firebase"

    async def _post(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """
        POST to a Firebase endpoint with the API key attached.

        Raises:
            IdentityAPIError: On error responses, unreachable API, or a
                body that is not JSON or carries no ID token
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(url, params={"key": self.api_key}, **kwargs)
        except httpx.TimeoutException:
            logger.error(f"Identity API timeout for {url}")
            raise IdentityAPIError(None, "Identity service did not respond in time")
        except httpx.RequestError as e:
            logger.error(f"Identity API request error for {url}: {str(e)}")
            raise IdentityAPIError(None, f"Failed to connect to identity service: {str(e)}")

        if response.status_code >= 400:
            raise self._to_error(response)

        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict) or not (data.get("idToken") or data.get("id_token")):
            logger.error(f"Identity API response from {url} carries no ID token")
            raise IdentityAPIError(response.status_code, "Malformed identity API response")
        return data

    @staticmethod
    def _to_error(response: httpx.Response) -> IdentityAPIError:
        """Map a Firebase error body {"error": {"code", "message"}}."""
        try:
            error = response.json().get("error") or {}
        except (ValueError, AttributeError):
            error = {}

        status_code = error.get("code", response.status_code)
        message = error.get("message") or f"Identity API returned {response.status_code}"
        logger.warning(f"Identity API error {status_code}: {message}")
        return IdentityAPIError(status_code, message)
