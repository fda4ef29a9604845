"""Request bodies for the session API"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class SignInRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class SignUpRequest(SignInRequest):
    """Email and password plus any profile attributes (name, sex, profession, ...)"""

    model_config = ConfigDict(extra="allow")

    def profile_fields(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})
