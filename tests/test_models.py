"""
tests/test_models.py -- AuthTokens and UserProfile construction rules.
"""

from __future__ import annotations

import pytest

from meetings_gateway.core.models import AuthTokens, UserProfile

from .conftest import make_id_token


class TestAuthTokens:
    def test_identity_response_sets_absolute_expiry(self) -> None:
        tokens = AuthTokens.from_identity_response(
            {"idToken": "abc", "refreshToken": "r", "localId": "uid-1", "expiresIn": "3600"},
            now=1000.0,
        )
        assert tokens == AuthTokens(
            user_id="uid-1", access_token="abc", refresh_token="r", expires_at=4600.0
        )

    def test_refresh_response_shape(self) -> None:
        tokens = AuthTokens.from_identity_response(
            {"id_token": "abc", "refresh_token": "r2", "user_id": "uid-1", "expires_in": "60"},
            now=0.0,
        )
        assert tokens.refresh_token == "r2"
        assert tokens.expires_at == 60.0

    def test_missing_fields_read_from_token_claims(self) -> None:
        token = make_id_token("uid-claims", expires_in=120)
        tokens = AuthTokens.from_identity_response({"idToken": token, "refreshToken": "r"})

        assert tokens.user_id == "uid-claims"
        assert not tokens.is_expired()

    def test_missing_access_token_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            AuthTokens.from_identity_response({"localId": "uid-1"})

    def test_expiry_boundary(self) -> None:
        tokens = AuthTokens("u", "a", "r", expires_at=100.0)
        assert not tokens.is_expired(now=99.9)
        assert tokens.is_expired(now=100.0)

    def test_dict_round_trip(self) -> None:
        tokens = AuthTokens("u", "a", "r", expires_at=123.5)
        assert AuthTokens.from_dict(tokens.to_dict()) == tokens


class TestUserProfile:
    def test_record_keeps_unknown_attributes(self) -> None:
        record = {
            "_id": "uid-1",
            "email": "a@b.c",
            "rate": 5,
            "completedMeetings": 12,
            "image": "x.svg",
            "qualities": ["q1", "q2"],
            "licence": True,
        }
        profile = UserProfile.from_record(record)

        assert profile.completed_meetings == 12
        assert profile.attributes == {"qualities": ["q1", "q2"], "licence": True}
        assert profile.to_record() == record

    def test_merged_pins_identifier(self) -> None:
        profile = UserProfile(id="uid-1", email="a@b.c", rate=2)
        merged = profile.merged({"_id": "other", "rate": 4, "name": "N"})

        assert merged.id == "uid-1"
        assert merged.rate == 4
        assert merged.attributes == {"name": "N"}
        assert profile.rate == 2
