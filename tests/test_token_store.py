"""
tests/test_token_store.py -- Memory and Redis token stores.

RedisTokenStore is exercised against a MagicMock standing in for redis.Redis,
so no server is needed; the mock stores values in a dict.
"""

from __future__ import annotations

from unittest.mock import MagicMock

from redis.exceptions import RedisError

from meetings_gateway.core.models import AuthTokens
from meetings_gateway.infrastructure import MemoryTokenStore, RedisClient, RedisTokenStore

TOKENS = AuthTokens(user_id="uid-1", access_token="a", refresh_token="r", expires_at=1234.0)


def _fake_redis() -> MagicMock:
    data: dict[str, str] = {}
    fake = MagicMock()
    fake.get.side_effect = data.get
    fake.set.side_effect = lambda key, value, ex=None: data.__setitem__(key, value)
    fake.delete.side_effect = lambda *keys: [data.pop(k, None) for k in keys]
    fake.ping.return_value = True
    fake.data = data
    return fake


class TestMemoryTokenStore:
    def test_tokens_and_accessors(self) -> None:
        store = MemoryTokenStore()
        store.set_tokens("s1", TOKENS)

        assert store.get_access_token("s1") == "a"
        assert store.get_refresh_token("s1") == "r"
        assert store.get_user_id("s1") == "uid-1"
        assert store.get_expires_at("s1") == 1234.0
        assert store.get_access_token("other") is None

    def test_remove_auth_data_clears_tokens_and_profile(self) -> None:
        store = MemoryTokenStore()
        store.set_tokens("s1", TOKENS)
        store.set_profile("s1", {"_id": "uid-1"})

        store.remove_auth_data("s1")

        assert store.get_tokens("s1") is None
        assert store.get_profile("s1") is None

    def test_profile_is_copied(self) -> None:
        store = MemoryTokenStore()
        profile = {"_id": "uid-1"}
        store.set_profile("s1", profile)
        profile["name"] = "mutated"
        assert store.get_profile("s1") == {"_id": "uid-1"}


class TestRedisTokenStore:
    def test_round_trip_with_ttl(self) -> None:
        fake = _fake_redis()
        store = RedisTokenStore(RedisClient("redis://unused", client=fake), prefix="p", ttl=60)

        store.set_tokens("s1", TOKENS)
        store.set_profile("s1", {"_id": "uid-1"})

        assert store.get_tokens("s1") == TOKENS
        assert store.get_profile("s1") == {"_id": "uid-1"}
        assert set(fake.data) == {"p:s1:tokens", "p:s1:profile"}
        fake.set.assert_any_call("p:s1:tokens", fake.data["p:s1:tokens"], ex=60)

    def test_remove_auth_data(self) -> None:
        fake = _fake_redis()
        store = RedisTokenStore(RedisClient("redis://unused", client=fake), prefix="p", ttl=60)
        store.set_tokens("s1", TOKENS)

        store.remove_auth_data("s1")

        assert store.get_tokens("s1") is None
        assert fake.data == {}

    def test_redis_errors_degrade_to_missing_data(self) -> None:
        fake = MagicMock()
        fake.get.side_effect = RedisError("down")
        fake.ping.side_effect = RedisError("down")
        store = RedisTokenStore(RedisClient("redis://unused", client=fake), prefix="p", ttl=60)

        assert store.get_tokens("s1") is None
        assert not store.is_available()

    def test_malformed_record_is_ignored(self) -> None:
        fake = _fake_redis()
        fake.data["p:s1:tokens"] = "{not json"
        store = RedisTokenStore(RedisClient("redis://unused", client=fake), prefix="p", ttl=60)

        assert store.get_tokens("s1") is None
