"""Infrastructure layer - Identity provider, HTTP clients and token storage"""

from .firebase_provider import FirebaseIdentityProvider
from .http_service import HttpService
from .profession_service import ProfessionService
from .redis_client import RedisClient
from .token_store import MemoryTokenStore, RedisTokenStore
from .user_service import UserService

__all__ = [
    "FirebaseIdentityProvider",
    "HttpService",
    "ProfessionService",
    "RedisClient",
    "MemoryTokenStore",
    "RedisTokenStore",
    "UserService",
]
