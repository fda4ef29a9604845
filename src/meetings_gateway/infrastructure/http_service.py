"""HTTP client for the user-record and profession backend"""

import logging
from typing import Any, Dict, Optional
import httpx

from ..core.errors import IdentityAPIError, ServiceError
from ..core.identity_provider import IIdentityProvider
from ..core.token_store import ITokenStore

logger = logging.getLogger(__name__)


class HttpService:
    """
    Backend client that attaches the session's access token.

    Request flow:
    1. Resolve the target URL (".json" suffix for a Firebase realtime DB)
    2. Refresh the session's access token if it has expired
    3. Attach the token ("auth" query param for Firebase, Bearer otherwise)
    4. Unwrap the response into its content
    """

    def __init__(
        self,
        base_url: str,
        token_store: ITokenStore,
        identity_provider: IIdentityProvider,
        is_firebase: bool = False,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self.token_store = token_store
        self.identity_provider = identity_provider
        self.is_firebase = is_firebase
        self.timeout = timeout
        self._transport = transport

    async def get(self, path: str, session_id: Optional[str] = None) -> Any:
        return await self.request("GET", path, session_id=session_id)

    async def put(self, path: str, payload: Dict[str, Any], session_id: Optional[str] = None) -> Any:
        return await self.request("PUT", path, session_id=session_id, json=payload)

    async def post(self, path: str, payload: Dict[str, Any], session_id: Optional[str] = None) -> Any:
        return await self.request("POST", path, session_id=session_id, json=payload)

    async def delete(self, path: str, session_id: Optional[str] = None) -> Any:
        return await self.request("DELETE", path, session_id=session_id)

    async def request(
        self,
        method: str,
        path: str,
        session_id: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send a request to the backend and return the response content.

        Args:
            method: HTTP method
            path: Path relative to the backend endpoint (e.g. "user/abc")
            session_id: Session whose access token authorizes the call
            json: JSON body

        Returns:
            The "content" of the response

        Raises:
            ServiceError: On error responses or an unreachable backend
        """
        url = self._build_url(path)
        params: Dict[str, str] = {}
        headers: Dict[str, str] = {}

        access_token = await self._access_token(session_id) if session_id else None
        if access_token:
            if self.is_firebase:
                params["auth"] = access_token
            else:
                headers["Authorization"] = f"Bearer {access_token}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method, url, params=params, headers=headers, json=json
                )
        except httpx.TimeoutException:
            logger.error(f"Backend timeout for {method} {url}")
            raise ServiceError("Backend service did not respond in time", status_code=504)
        except httpx.RequestError as e:
            logger.error(f"Backend request error for {method} {url}: {str(e)}")
            raise ServiceError(f"Failed to connect to backend service: {str(e)}", status_code=502)

        logger.info(f"{method} {path} -> {response.status_code}")

        if response.status_code >= 400:
            raise ServiceError(self._error_message(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise ServiceError("Malformed backend response", status_code=response.status_code)
        return self._content(data, path)

    def _build_url(self, path: str) -> str:
        path = path.lstrip("/")
        if self.is_firebase:
            return f"{self.base_url}{path.rstrip('/')}.json"
        return f"{self.base_url}{path}"

    async def _access_token(self, session_id: str) -> Optional[str]:
        """Stored access token, refreshed first when expired."""
        tokens = self.token_store.get_tokens(session_id)
        if tokens is None:
            return None
        if not tokens.is_expired():
            return tokens.access_token

        logger.info(f"Access token expired for user {tokens.user_id}, refreshing")
        try:
            refreshed = await self.identity_provider.refresh(tokens.refresh_token)
        except IdentityAPIError as e:
            raise ServiceError(f"Session expired: {e.message}", status_code=401)
        self.token_store.set_tokens(session_id, refreshed)
        return refreshed.access_token

    def _content(self, data: Any, path: str) -> Any:
        if self.is_firebase:
            return transform_firebase_data(data) if _is_collection(path) else data
        if isinstance(data, dict) and "content" in data:
            return data["content"]
        return data

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return error["message"]
            if body.get("message"):
                return body["message"]
            if isinstance(error, str):
                return error
        return f"Backend returned {response.status_code}"


def _is_collection(path: str) -> bool:
    """True for a collection path such as "profession/", False for "user/<id>"."""
    return "/" not in path.strip("/")


def transform_firebase_data(data: Any) -> Any:
    """
    Flatten a realtime-DB collection into a list.

    Collections come back keyed by id ({"id1": {...}, "id2": {...}}) and an
    empty collection comes back as null.
    """
    if data is None:
        return []
    if isinstance(data, dict):
        return list(data.values())
    return data

