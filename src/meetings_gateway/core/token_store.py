"""Token storage interface (per-session equivalent of browser local storage)"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .models import AuthTokens


class ITokenStore(ABC):
    """
    Per-session storage for identity tokens and the locally cached profile.

    Every method is keyed by the session identifier bound to a client.
    """

    @abstractmethod
    def set_tokens(self, session_id: str, tokens: AuthTokens) -> None:
        pass

    @abstractmethod
    def get_tokens(self, session_id: str) -> Optional[AuthTokens]:
        pass

    @abstractmethod
    def set_profile(self, session_id: str, profile: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def get_profile(self, session_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def remove_auth_data(self, session_id: str) -> None:
        """Forget tokens and profile for the session"""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        pass

    def get_access_token(self, session_id: str) -> Optional[str]:
        tokens = self.get_tokens(session_id)
        return tokens.access_token if tokens else None

    def get_refresh_token(self, session_id: str) -> Optional[str]:
        tokens = self.get_tokens(session_id)
        return tokens.refresh_token if tokens else None

    def get_user_id(self, session_id: str) -> Optional[str]:
        tokens = self.get_tokens(session_id)
        return tokens.user_id if tokens else None

    def get_expires_at(self, session_id: str) -> Optional[float]:
        tokens = self.get_tokens(session_id)
        return tokens.expires_at if tokens else None
