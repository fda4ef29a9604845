"""
tests/test_professions.py -- ProfessionProvider fetch-once and lookup.
"""

from __future__ import annotations

from meetings_gateway.core.models import Profession
from meetings_gateway.core.notifications import Notifier
from meetings_gateway.core.professions import ProfessionProvider
from meetings_gateway.infrastructure import ProfessionService

from .conftest import PROFESSIONS


def _provider(http_service) -> ProfessionProvider:
    return ProfessionProvider(ProfessionService(http_service), Notifier())


class TestProfessionProvider:
    async def test_loading_until_fetched(self, http_service) -> None:
        provider = _provider(http_service)
        assert provider.is_loading
        assert provider.professions == ()

        professions = await provider.load()

        assert not provider.is_loading
        assert [p.id for p in professions] == [p["_id"] for p in PROFESSIONS]

    async def test_lookup_known_and_unknown_id(self, http_service) -> None:
        provider = _provider(http_service)
        await provider.load()

        assert provider.get_profession("67rdca3eeb7f6fgeed471820") == Profession(
            id="67rdca3eeb7f6fgeed471820", name="Официант"
        )
        assert provider.get_profession("does-not-exist") is None

    async def test_fetches_only_once(self, http_service, backend) -> None:
        provider = _provider(http_service)
        await provider.load()
        backend.professions.append({"_id": "late", "name": "Late"})

        await provider.load()

        assert len(backend.requests_to("/profession")) == 1
        assert provider.get_profession("late") is None

    async def test_failure_leaves_list_empty_and_notifies(self, http_service, backend) -> None:
        backend.fail_professions = True
        provider = _provider(http_service)

        await provider.load()

        assert not provider.is_loading
        assert provider.load_failed
        assert provider.professions == ()
        assert [n.message for n in provider.notifier.pending()] == ["Database unavailable"]

    async def test_profession_requests_carry_no_session_token(self, http_service, backend) -> None:
        await _provider(http_service).load()
        request = backend.requests_to("/profession")[0]
        assert "authorization" not in request.headers
