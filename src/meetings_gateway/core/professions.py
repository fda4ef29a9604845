"""Profession list provider: fetch once, look up by identifier"""

import logging
from typing import Optional, Tuple

from ..infrastructure.profession_service import ProfessionService
from .errors import GatewayError, error_message
from .models import Profession
from .notifications import Notifier

logger = logging.getLogger(__name__)


class ProfessionProvider:
    """
    Read-only profession reference list.

    The list is fetched on the first load() and never again for the lifetime
    of the provider; a failed fetch leaves it empty and produces a
    notification.
    """

    def __init__(self, profession_service: ProfessionService, notifier: Notifier):
        self.profession_service = profession_service
        self.notifier = notifier
        self.is_loading = True
        self.load_failed = False
        self._professions: Tuple[Profession, ...] = ()
        self._load_attempted = False

    @property
    def professions(self) -> Tuple[Profession, ...]:
        return self._professions

    async def load(self) -> Tuple[Profession, ...]:
        if self._load_attempted:
            return self._professions
        self._load_attempted = True

        try:
            content = await self.profession_service.get()
            self._professions = tuple(Profession.from_record(r) for r in content or [])
            logger.info(f"Loaded {len(self._professions)} professions")
        except (GatewayError, KeyError, TypeError) as e:
            self.load_failed = True
            self.notifier.notify(error_message(e))
        finally:
            self.is_loading = False
        return self._professions

    def get_profession(self, profession_id: str) -> Optional[Profession]:
        return next((p for p in self._professions if p.id == profession_id), None)
