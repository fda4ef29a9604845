"""Profession-list API client"""

from typing import Any, Dict, List

from .http_service import HttpService

PROFESSION_ENDPOINT = "profession/"


class ProfessionService:
    """Read-only access to the profession/ endpoint."""

    def __init__(self, http: HttpService):
        self.http = http

    async def get(self) -> List[Dict[str, Any]]:
        return await self.http.get(PROFESSION_ENDPOINT)
