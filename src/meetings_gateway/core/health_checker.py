"""Aggregated health checks for liveness and readiness probes.

Readiness validates:
- Token store backend (Redis or in-memory fallback)
- Identity provider configuration (API key present)
- Profession reference list (loaded without failure)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from .identity_provider import IIdentityProvider
from .professions import ProfessionProvider
from .token_store import ITokenStore

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    """Overall health status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    name: str
    status: HealthStatus
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AggregatedHealth:
    """Aggregated health check result."""
    status: HealthStatus
    components: List[ComponentHealth]
    ready: bool
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "status": self.status.value,
            "ready": self.ready,
            "timestamp": self.timestamp,
            "components": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    "details": c.details,
                }
                for c in self.components
            ],
        }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class HealthChecker:
    """
    Aggregated health checker.

    Usage:
        checker = HealthChecker(token_store, identity_provider, professions)
        health = await checker.check_readiness()
        if not health.ready:
            # remove from load balancer
    """

    def __init__(
        self,
        token_store: ITokenStore,
        identity_provider: IIdentityProvider,
        profession_provider: ProfessionProvider,
        identity_configured: bool = True,
    ):
        self.token_store = token_store
        self.identity_provider = identity_provider
        self.profession_provider = profession_provider
        self.identity_configured = identity_configured

    async def check_liveness(self) -> AggregatedHealth:
        """Liveness probe - the process answers, nothing else is checked."""
        return AggregatedHealth(
            status=HealthStatus.HEALTHY,
            ready=True,
            timestamp=_now(),
            components=[
                ComponentHealth(
                    name="gateway_process",
                    status=HealthStatus.HEALTHY,
                    message="Gateway process is running",
                )
            ],
        )

    async def check_readiness(self) -> AggregatedHealth:
        """Readiness probe - can the gateway serve sessions end-to-end?"""
        components = [
            self._check_token_store(),
            self._check_identity_provider(),
            self._check_professions(),
        ]
        overall_status, ready = self._aggregate_status(components)

        return AggregatedHealth(
            status=overall_status,
            ready=ready,
            timestamp=_now(),
            components=components,
        )

    def _check_token_store(self) -> ComponentHealth:
        backend = self.token_store.get_backend_name()
        if self.token_store.is_available():
            return ComponentHealth(
                name="token_store",
                status=HealthStatus.HEALTHY,
                message=f"Token store ({backend}) is responsive",
                details={"backend": backend},
            )

        logger.error(f"Token store ({backend}) health check failed")
        return ComponentHealth(
            name="token_store",
            status=HealthStatus.UNHEALTHY,
            message=f"Token store ({backend}) is unreachable",
            details={"backend": backend},
        )

    def _check_identity_provider(self) -> ComponentHealth:
        provider = self.identity_provider.get_provider_name()
        if not self.identity_configured:
            return ComponentHealth(
                name="identity_provider",
                status=HealthStatus.UNHEALTHY,
                message=f"Identity provider ({provider}) has no API key",
                details={"provider": provider},
            )
        return ComponentHealth(
            name="identity_provider",
            status=HealthStatus.HEALTHY,
            message=f"Identity provider ({provider}) configured",
            details={"provider": provider},
        )

    def _check_professions(self) -> ComponentHealth:
        provider = self.profession_provider
        details = {"count": len(provider.professions), "loading": provider.is_loading}
        if provider.is_loading:
            return ComponentHealth(
                name="professions",
                status=HealthStatus.DEGRADED,
                message="Profession list still loading",
                details=details,
            )
        if provider.load_failed:
            # Served empty until restart; clients still work without it
            return ComponentHealth(
                name="professions",
                status=HealthStatus.DEGRADED,
                message="Profession list failed to load",
                details=details,
            )
        return ComponentHealth(
            name="professions",
            status=HealthStatus.HEALTHY,
            message=f"{details['count']} professions loaded",
            details=details,
        )

    def _aggregate_status(
        self, components: List[ComponentHealth]
    ) -> tuple[HealthStatus, bool]:
        """
        Aggregate component statuses into overall status and readiness.

        Logic:
        - UNHEALTHY components -> UNHEALTHY, not ready
        - Only DEGRADED -> DEGRADED, ready
        - All HEALTHY -> HEALTHY, ready
        """
        if any(c.status == HealthStatus.UNHEALTHY for c in components):
            return HealthStatus.UNHEALTHY, False

        if any(c.status == HealthStatus.DEGRADED for c in components):
            return HealthStatus.DEGRADED, True

        return HealthStatus.HEALTHY, True
