"""Authentication session provider.

One AuthSession exists per client session. It mediates sign-up, sign-in,
logout and profile reads/updates against the identity API and the
user-record API, and holds the resulting current-user state.

State machine:
    LOADING -> AUTHENTICATED   stored access token and profile fetch succeeded
    LOADING -> ANONYMOUS       no stored token, or the profile fetch failed
    ANONYMOUS <-> AUTHENTICATED  through sign-in/sign-up and logout

Errors the client cannot act on are caught here and pushed to the session's
Notifier; only field-level and sign-in form errors are raised.
"""

import logging
import random
import string
from enum import Enum
from typing import Any, Dict, Optional

from ..infrastructure.user_service import UserService
from .errors import (
    EMAIL_EXISTS_MESSAGE,
    INVALID_CREDENTIAL_CODES,
    INVALID_CREDENTIALS_MESSAGE,
    TOO_MANY_ATTEMPTS_MESSAGE,
    FieldValidationError,
    GatewayError,
    IdentityAPIError,
    NotAuthenticatedError,
    ServiceError,
    SignInError,
    error_message,
)
from .identity_provider import IIdentityProvider
from .models import UserProfile
from .notifications import Notifier
from .token_store import ITokenStore

logger = logging.getLogger(__name__)

DEFAULT_AVATAR_TEMPLATE = "https://avatars.dicebear.com/api/avataaars/{seed}.svg"


class AuthState(Enum):
    """Session authentication states."""
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class AuthSession:
    """
    Current-user state for one client session.

    Example:
        session = AuthSession(session_id, identity, users, store, Notifier())
        await session.initialize()
        await session.sign_in("user@example.com", "secret")
        session.current_user.email
    """

    def __init__(
        self,
        session_id: str,
        identity_provider: IIdentityProvider,
        user_service: UserService,
        token_store: ITokenStore,
        notifier: Notifier,
        avatar_url_template: str = DEFAULT_AVATAR_TEMPLATE,
        logout_redirect_url: str = "/",
        rng: Optional[random.Random] = None,
    ):
        self.session_id = session_id
        self.identity_provider = identity_provider
        self.user_service = user_service
        self.token_store = token_store
        self.notifier = notifier
        self.avatar_url_template = avatar_url_template
        self.logout_redirect_url = logout_redirect_url
        self._rng = rng or random.Random()

        self.state = AuthState.LOADING
        self.current_user: Optional[UserProfile] = None

    @property
    def is_loading(self) -> bool:
        return self.state is AuthState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    async def initialize(self) -> AuthState:
        """Resolve the LOADING state from whatever the token store holds."""
        if self.token_store.get_access_token(self.session_id):
            await self._load_user_data()
        else:
            self.state = AuthState.ANONYMOUS
        logger.debug(f"Session {self._short_id()} initialized as {self.state.value}")
        return self.state

    async def sign_up(
        self, email: str, password: str, **profile_fields: Any
    ) -> Optional[UserProfile]:
        """
        Create an identity account and its profile record.

        The profile gets placeholder rate, completedMeetings and image values;
        any of them present in profile_fields wins.

        Returns:
            The created profile, or None when the failure was notified

        Raises:
            FieldValidationError: If the email is already registered
        """
        try:
            tokens = await self.identity_provider.sign_up(email, password)
        except IdentityAPIError as e:
            if e.status_code == 400 and e.code == "EMAIL_EXISTS":
                logger.info(f"Sign-up rejected, email already registered: {email}")
                raise FieldValidationError({"email": EMAIL_EXISTS_MESSAGE})
            self._report(e)
            return None

        self.token_store.set_tokens(self.session_id, tokens)
        await self._create_user({
            "rate": self._rng.randint(1, 5),
            "completedMeetings": self._rng.randint(0, 200),
            "image": self._random_avatar(),
            **profile_fields,
            "_id": tokens.user_id,
            "email": email,
        })
        return self.current_user

    async def sign_in(self, email: str, password: str) -> Optional[UserProfile]:
        """
        Sign in and load the profile record.

        Raises:
            SignInError: Localized message for a rejected sign-in (HTTP 400)
            IdentityAPIError: For any other identity API failure
        """
        try:
            tokens = await self.identity_provider.sign_in(email, password)
        except IdentityAPIError as e:
            if e.status_code == 400:
                if e.code in INVALID_CREDENTIAL_CODES:
                    raise SignInError(INVALID_CREDENTIALS_MESSAGE)
                raise SignInError(TOO_MANY_ATTEMPTS_MESSAGE)
            self._report(e)
            raise

        self.token_store.set_tokens(self.session_id, tokens)
        logger.info(f"User {tokens.user_id} signed in (session {self._short_id()})")
        await self._load_user_data()
        return self.current_user

    def log_out(self) -> str:
        """Forget tokens and user; return the route to navigate to."""
        user_id = self.current_user.id if self.current_user else None
        self.token_store.remove_auth_data(self.session_id)
        self.current_user = None
        self.state = AuthState.ANONYMOUS
        logger.info(f"User {user_id} logged out (session {self._short_id()})")
        return self.logout_redirect_url

    async def update_current_user(self, fields: Dict[str, Any]) -> Optional[UserProfile]:
        """
        Merge fields into the current profile and write it back.

        Raises:
            NotAuthenticatedError: If nobody is signed in
        """
        if self.current_user is None:
            raise NotAuthenticatedError()

        payload = self.current_user.merged(fields).to_record()
        try:
            content = await self.user_service.create(payload, self.session_id)
            updated = _profile_from(content, payload)
        except GatewayError as e:
            self._report(e)
            return self.current_user

        self.current_user = updated
        self.token_store.set_profile(self.session_id, self.current_user.to_record())
        logger.info(f"Updated profile of user {self.current_user.id}")
        return self.current_user

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "isLoading": self.is_loading,
            "currentUser": self.current_user.to_record() if self.current_user else None,
        }

    async def _create_user(self, data: Dict[str, Any]) -> None:
        try:
            content = await self.user_service.create(data, self.session_id)
            created = _profile_from(content, data)
        except GatewayError as e:
            self._report(e)
            self._settle()
            return

        self.current_user = created
        self.token_store.set_profile(self.session_id, self.current_user.to_record())
        logger.info(f"Created profile record for user {self.current_user.id}")
        self._settle()

    async def _load_user_data(self) -> None:
        try:
            content = await self.user_service.get_current_user(self.session_id)
            known = {"_id": self.token_store.get_user_id(self.session_id)}
            self.current_user = _profile_from(content, known) if content else None
            if self.current_user is not None:
                self.token_store.set_profile(self.session_id, self.current_user.to_record())
        except GatewayError as e:
            self._report(e)
        finally:
            self._settle()

    def _settle(self) -> None:
        self.state = (
            AuthState.AUTHENTICATED if self.current_user is not None else AuthState.ANONYMOUS
        )

    def _report(self, error: BaseException) -> None:
        self.notifier.notify(error_message(error))

    def _random_avatar(self) -> str:
        alphabet = string.ascii_lowercase + string.digits
        seed = "".join(self._rng.choice(alphabet) for _ in range(6))
        return self.avatar_url_template.format(seed=seed)

    def _short_id(self) -> str:
        return self.session_id[:8]


def _profile_from(content: Any, sent: Dict[str, Any]) -> UserProfile:
    """
    Profile from a user-record response.

    The backend may answer with a partial record (or nothing); what was sent
    fills the gaps, and the record id is always the one the session knows.

    Raises:
        ServiceError: If the response is not a record at all
    """
    if content and not isinstance(content, dict):
        raise ServiceError("Malformed user record in backend response")
    record = {**sent, **(content or {}), "_id": sent["_id"]}
    return UserProfile.from_record(record)
