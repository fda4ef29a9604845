"""User-record API client"""

from typing import Any, Dict, List

from ..core.errors import NotAuthenticatedError
from ..core.token_store import ITokenStore
from .http_service import HttpService

USER_ENDPOINT = "user/"


class UserService:
    """CRUD calls against the user/ endpoint."""

    def __init__(self, http: HttpService, token_store: ITokenStore):
        self.http = http
        self.token_store = token_store

    async def get(self, session_id: str) -> List[Dict[str, Any]]:
        return await self.http.get(USER_ENDPOINT, session_id=session_id)

    async def create(self, payload: Dict[str, Any], session_id: str) -> Dict[str, Any]:
        """Create or replace the record stored under payload["_id"]"""
        return await self.http.put(
            USER_ENDPOINT + payload["_id"], payload, session_id=session_id
        )

    async def get_current_user(self, session_id: str) -> Dict[str, Any]:
        """Fetch the record of the identity user stored for this session"""
        user_id = self.token_store.get_user_id(session_id)
        if not user_id:
            raise NotAuthenticatedError("No signed-in user for this session")
        return await self.http.get(USER_ENDPOINT + user_id, session_id=session_id)
