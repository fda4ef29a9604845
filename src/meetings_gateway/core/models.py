"""Session, profile and profession data models"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from jose import jwt
from jose.exceptions import JWTError

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600


@dataclass
class AuthTokens:
    """Tokens issued by the identity API for one signed-in user"""

    user_id: str
    access_token: str
    refresh_token: str
    expires_at: float

    @classmethod
    def from_identity_response(
        cls, data: Dict[str, Any], now: Optional[float] = None
    ) -> "AuthTokens":
        """
        Build tokens from an identity or secure-token API response.

        Accepts both the camelCase shape of accounts:signUp /
        accounts:signInWithPassword (idToken, localId, expiresIn) and the
        snake_case shape of the token refresh endpoint (id_token, user_id,
        expires_in). Missing user id or lifetime is read from the unverified
        claims of the access token.

        Args:
            data: Decoded JSON response body
            now: Current epoch time (defaults to time.time())

        Returns:
            AuthTokens with an absolute expiry timestamp

        Raises:
            ValueError: If the response carries no access token
        """
        now = time.time() if now is None else now
        access_token = data.get("idToken") or data.get("id_token")
        if not access_token:
            raise ValueError("Identity response contains no access token")

        user_id = data.get("localId") or data.get("user_id")
        expires_in = data.get("expiresIn") or data.get("expires_in")

        expires_at = None
        if expires_in is not None:
            expires_at = now + int(expires_in)

        if not user_id or expires_at is None:
            claims = _unverified_claims(access_token)
            user_id = user_id or claims.get("user_id") or claims.get("sub", "")
            if expires_at is None:
                expires_at = float(claims.get("exp", now + DEFAULT_EXPIRES_IN))

        return cls(
            user_id=user_id,
            access_token=access_token,
            refresh_token=data.get("refreshToken") or data.get("refresh_token", ""),
            expires_at=expires_at,
        )

    def is_expired(self, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return self.expires_at <= now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "expiresAt": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthTokens":
        return cls(
            user_id=data["userId"],
            access_token=data["accessToken"],
            refresh_token=data.get("refreshToken", ""),
            expires_at=float(data["expiresAt"]),
        )


def _unverified_claims(token: str) -> Dict[str, Any]:
    """Read JWT claims without signature checks (the identity API issued them)"""
    try:
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        logger.warning(f"Could not read claims from access token: {str(e)}")
        return {}


@dataclass
class UserProfile:
    """Application-level profile record, distinct from the identity account"""

    id: str
    email: str = ""
    rate: Optional[int] = None
    completed_meetings: Optional[int] = None
    image: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "UserProfile":
        """Build a profile from a user-record API document"""
        attributes = {
            key: value
            for key, value in record.items()
            if key not in ("_id", "email", "rate", "completedMeetings", "image")
        }
        return cls(
            id=record["_id"],
            email=record.get("email", ""),
            rate=record.get("rate"),
            completed_meetings=record.get("completedMeetings"),
            image=record.get("image"),
            attributes=attributes,
        )

    def to_record(self) -> Dict[str, Any]:
        """Serialize back to the user-record API document shape"""
        record: Dict[str, Any] = {"_id": self.id, "email": self.email}
        if self.rate is not None:
            record["rate"] = self.rate
        if self.completed_meetings is not None:
            record["completedMeetings"] = self.completed_meetings
        if self.image is not None:
            record["image"] = self.image
        record.update(self.attributes)
        return record

    def merged(self, fields: Dict[str, Any]) -> "UserProfile":
        """Return a copy with fields merged in; the identifier never changes"""
        record = {**self.to_record(), **fields, "_id": self.id}
        return UserProfile.from_record(record)


@dataclass(frozen=True)
class Profession:
    """Reference record: identifier plus display name"""

    id: str
    name: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Profession":
        return cls(id=record["_id"], name=record.get("name", ""))

    def to_record(self) -> Dict[str, str]:
        return {"_id": self.id, "name": self.name}
