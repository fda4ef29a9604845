"""Identity provider interface for pluggable account backends"""

from abc import ABC, abstractmethod
from .models import AuthTokens


class IIdentityProvider(ABC):
    """
    Interface for identity providers.

    Implementations must:
    1. Create accounts and sign in with email/password
    2. Return issued access/refresh tokens as AuthTokens
    3. Exchange a refresh token for a fresh access token
    4. Report API failures as IdentityAPIError
    """

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthTokens:
        """
        Create an account.

        Args:
            email: Account email
            password: Account password

        Returns:
            AuthTokens for the new account

        Raises:
            IdentityAPIError: If the identity API rejects the request
        """
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthTokens:
        """
        Sign in with email and password.

        Raises:
            IdentityAPIError: If the identity API rejects the request
        """
        pass

    @abstractmethod
    async def refresh(self, refresh_token: str) -> AuthTokens:
        """Exchange a refresh token for new tokens"""
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the name of this identity provider"""
        pass
