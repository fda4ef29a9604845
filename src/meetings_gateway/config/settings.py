"""Gateway configuration using pydantic-settings"""

from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Gateway configuration from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Identity Provider
    primary_identity_provider: Literal["firebase"] = Field(
        default="firebase",
        description="Identity provider used for sign-up and sign-in",
    )
    firebase_api_key: str = Field(
        default="",
        description="Web API key sent as the 'key' query parameter",
    )
    identity_api_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1/",
        description="Base URL of the identity toolkit REST API",
    )
    secure_token_url: str = Field(
        default="https://securetoken.googleapis.com/v1/",
        description="Base URL of the secure token API used for refreshes",
    )

    # Backend (user records and professions)
    api_endpoint: str = Field(
        default="http://localhost:8080/api/v1/",
        description="Base URL of the CRUD backend serving user/ and profession/",
    )
    is_firebase: bool = Field(
        default=False,
        description="Backend is a Firebase realtime database (.json paths, auth param)",
    )
    http_timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for outbound HTTP calls",
    )

    # Token storage
    token_store_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Where session tokens are persisted",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (token_store_backend=redis)",
    )
    token_key_prefix: str = Field(
        default="meetings:session",
        description="Key prefix for token records in Redis",
    )
    session_ttl: int = Field(
        default=60 * 60 * 24 * 30,
        description="Lifetime of a stored session record in seconds",
    )

    # Sessions
    session_cookie_name: str = Field(
        default="meetings_session",
        description="Cookie carrying the session identifier",
    )
    secure_cookies: bool = Field(
        default=False,
        description="Only send the session cookie over HTTPS",
    )
    logout_redirect_url: str = Field(
        default="/",
        description="Route the client is sent to after logout",
    )
    session_idle_ttl: int = Field(
        default=60 * 60,
        description="Seconds an unused in-process session is kept before it is dropped",
    )
    max_sessions: int = Field(
        default=10000,
        description="Upper bound on in-process sessions; least recently used go first",
    )

    # Profile placeholders
    avatar_url_template: str = Field(
        default="https://avatars.dicebear.com/api/avataaars/{seed}.svg",
        description="Avatar URL assigned on sign-up; {seed} is random",
    )

    # Gateway Configuration
    gateway_host: str = Field(
        default="0.0.0.0",
        description="Gateway bind host",
    )
    gateway_port: int = Field(
        default=8080,
        description="Gateway bind port",
    )

    # CORS Configuration
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]


# Singleton settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings singleton"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
