"""
tests/conftest.py -- Shared fixtures for the gateway tests.

Every outbound HTTP call goes through an httpx.MockTransport wired to
FakeBackend, which plays three roles:
  - Firebase identity toolkit (accounts:signUp, accounts:signInWithPassword)
  - Firebase secure token API (token refresh)
  - The user-record / profession CRUD backend at http://backend.test/api/v1/

FakeBackend records every request so tests can assert on what was (or was
not) sent, e.g. that a rejected sign-up never creates a profile record.
"""

from __future__ import annotations

import json
import random
import time
from collections.abc import Generator
from typing import Any, Optional
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from meetings_gateway.config import Settings
from meetings_gateway.core.auth_session import AuthSession
from meetings_gateway.core.notifications import Notifier
from meetings_gateway.infrastructure import (
    FirebaseIdentityProvider,
    HttpService,
    MemoryTokenStore,
    UserService,
)
from meetings_gateway.main import create_app

API_KEY = "test-api-key"
BACKEND_URL = "http://backend.test/api/v1/"
JWT_SECRET = "test-signing-secret"

PROFESSIONS = [
    {"_id": "67rdca3eeb7f6fgeed471818", "name": "Доктор"},
    {"_id": "67rdca3eeb7f6fgeed471820", "name": "Официант"},
    {"_id": "67rdca3eeb7f6fgeed471814", "name": "Физик"},
]


def make_id_token(user_id: str, expires_in: int = 3600) -> str:
    """Mint a JWT shaped like a Firebase ID token."""
    claims = {"user_id": user_id, "sub": user_id, "exp": int(time.time()) + expires_in}
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")


def _json(status_code: int, body: Any) -> httpx.Response:
    return httpx.Response(status_code, json=body)


def _identity_error(message: str) -> httpx.Response:
    return _json(400, {"error": {"code": 400, "message": message, "errors": [{"message": message}]}})


class FakeBackend:
    """In-memory stand-in for the identity APIs and the CRUD backend."""

    def __init__(self) -> None:
        self.accounts: dict[str, dict[str, str]] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self.professions: list[dict[str, str]] = list(PROFESSIONS)
        self.requests: list[httpx.Request] = []
        self.sign_in_error: Optional[str] = None
        self.sign_up_error: Optional[str] = None
        self.fail_professions = False
        self.fail_user_writes = False
        self.omit_id_token = False
        self.user_write_content: Optional[Any] = None
        self.token_lifetime = 3600
        self._next_id = 1

    # -- helpers used by tests ------------------------------------------------

    def register(self, email: str, password: str) -> str:
        local_id = f"uid-{self._next_id}"
        self._next_id += 1
        self.accounts[email] = {"password": password, "local_id": local_id}
        return local_id

    def requests_to(self, path_fragment: str, method: Optional[str] = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if path_fragment in r.url.path and (method is None or r.method == method)
        ]

    def _tokens(self, local_id: str, email: str) -> dict[str, Any]:
        if self.omit_id_token:
            return {"kind": "identitytoolkit#VerifyPasswordResponse", "localId": local_id}
        return {
            "kind": "identitytoolkit#VerifyPasswordResponse",
            "localId": local_id,
            "email": email,
            "idToken": make_id_token(local_id, self.token_lifetime),
            "refreshToken": f"refresh-{local_id}",
            "expiresIn": str(self.token_lifetime),
        }

    # -- transport handler ------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "identitytoolkit.googleapis.com":
            return self._identity(request)
        if host == "securetoken.googleapis.com":
            return self._secure_token(request)
        if host == "backend.test":
            return self._crud(request)
        return _json(404, {"message": f"unknown host {host}"})

    def _identity(self, request: httpx.Request) -> httpx.Response:
        if request.url.params.get("key") != API_KEY:
            return _identity_error("API key not valid. Please pass a valid API key.")
        body = json.loads(request.content)
        email, password = body["email"], body["password"]

        if request.url.path.endswith("accounts:signUp"):
            if self.sign_up_error:
                return _identity_error(self.sign_up_error)
            if email in self.accounts:
                return _identity_error("EMAIL_EXISTS")
            local_id = self.register(email, password)
            return _json(200, self._tokens(local_id, email))

        if request.url.path.endswith("accounts:signInWithPassword"):
            if self.sign_in_error:
                return _identity_error(self.sign_in_error)
            account = self.accounts.get(email)
            if account is None:
                return _identity_error("EMAIL_NOT_FOUND")
            if account["password"] != password:
                return _identity_error("INVALID_PASSWORD")
            return _json(200, self._tokens(account["local_id"], email))

        return _json(404, {"error": {"code": 404, "message": "NOT_FOUND"}})

    def _secure_token(self, request: httpx.Request) -> httpx.Response:
        form = parse_qs(request.content.decode())
        refresh_token = form.get("refresh_token", [""])[0]
        if not refresh_token.startswith("refresh-"):
            return _identity_error("INVALID_REFRESH_TOKEN")
        local_id = refresh_token[len("refresh-"):]
        return _json(200, {
            "expires_in": "3600",
            "token_type": "Bearer",
            "refresh_token": refresh_token,
            "id_token": make_id_token(local_id),
            "user_id": local_id,
        })

    def _crud(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/api/v1/profession"):
            if self.fail_professions:
                return _json(500, {"message": "Database unavailable"})
            return _json(200, {"content": self.professions})

        if path.startswith("/api/v1/user/"):
            user_id = path[len("/api/v1/user/"):]
            if request.method == "PUT":
                if self.fail_user_writes:
                    return _json(500, {"message": "Write failed"})
                self.users[user_id] = json.loads(request.content)
                if self.user_write_content is not None:
                    return _json(200, {"content": self.user_write_content})
                return _json(200, {"content": self.users[user_id]})
            if request.method == "GET":
                if user_id in self.users:
                    return _json(200, {"content": self.users[user_id]})
                return _json(404, {"message": "User not found"})

        return _json(404, {"message": "Not found"})


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def transport(backend: FakeBackend) -> httpx.MockTransport:
    return httpx.MockTransport(backend.handler)


@pytest.fixture
def token_store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def identity(transport: httpx.MockTransport) -> FirebaseIdentityProvider:
    return FirebaseIdentityProvider(api_key=API_KEY, transport=transport)


@pytest.fixture
def http_service(
    token_store: MemoryTokenStore,
    identity: FirebaseIdentityProvider,
    transport: httpx.MockTransport,
) -> HttpService:
    return HttpService(BACKEND_URL, token_store, identity, transport=transport)


@pytest.fixture
def make_session(
    identity: FirebaseIdentityProvider,
    http_service: HttpService,
    token_store: MemoryTokenStore,
):
    """Factory for AuthSession objects sharing the fake backend."""

    def _make(session_id: str = "session-under-test") -> AuthSession:
        return AuthSession(
            session_id=session_id,
            identity_provider=identity,
            user_service=UserService(http_service, token_store),
            token_store=token_store,
            notifier=Notifier(),
            rng=random.Random(7),
        )

    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings(
        firebase_api_key=API_KEY,
        api_endpoint=BACKEND_URL,
        token_store_backend="memory",
    )


@pytest.fixture
def client(settings: Settings, transport: httpx.MockTransport) -> Generator[TestClient, None, None]:
    """TestClient over a fresh app; the lifespan loads the profession list.

    follow_redirects=False so logout's redirect Location can be asserted.
    """
    app = create_app(settings=settings, transport=transport)
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
