"""Core domain models, interfaces and session providers"""

from .identity_provider import IIdentityProvider
from .models import AuthTokens, Profession, UserProfile
from .notifications import Notification, Notifier
from .token_store import ITokenStore

__all__ = [
    "IIdentityProvider",
    "ITokenStore",
    "AuthTokens",
    "UserProfile",
    "Profession",
    "Notification",
    "Notifier",
]
