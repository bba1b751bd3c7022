"""
Online-Mode Gate.

The desk only operates while both backing systems answer:

- **Cliente Único**: the customer registry (probed via
  :meth:`DatabaseManager.ping`).
- **IIB Broker**: the message broker (probed over HTTP at
  ``BROKER_HEALTH_URL``).

Every workflow operation calls :meth:`OnlineModeService.require_online`
before touching the registry.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import requests

from teller.exceptions import OfflineModeError
from teller.logger import StructuredLogger
from teller.models.enums import SystemStatus
from teller.models.health import SystemHealthStatus
from teller.services.base_service import BaseService

Probe = Callable[[], bool]

REGISTRY_UNAVAILABLE: str = "Cliente Único no disponible"
BROKER_UNAVAILABLE: str = "IIB Broker no disponible"


def unavailable_dependencies(status: SystemHealthStatus) -> list[str]:
    """Teller-facing names of the dependencies *status* reports as down."""
    reasons: list[str] = []
    if not status.registry_connected:
        reasons.append(REGISTRY_UNAVAILABLE)
    if not status.broker_connected:
        reasons.append(BROKER_UNAVAILABLE)
    return reasons


class BrokerHealthProbe:
    """HTTP health probe for the message broker.

    A ``2xx`` answer within *timeout* seconds means connected.  An empty
    URL means no broker endpoint is configured for this deployment; the
    probe then reports connected and the startup configuration warning
    is the only signal.
    """

    def __init__(self, url: str, timeout: float, logger: StructuredLogger) -> None:
        self._url = url
        self._timeout = timeout
        self._logger = logger

    def __call__(self) -> bool:
        if not self._url:
            return True
        try:
            response = requests.get(self._url, timeout=self._timeout)
            return response.ok
        except requests.exceptions.RequestException as exc:
            self._logger.warning("Broker health probe failed: %s", exc)
            return False


class OnlineModeService(BaseService):
    """Evaluates and enforces online mode.

    Parameters
    ----------
    registry_probe / broker_probe:
        Zero-argument callables returning ``True`` when the dependency is
        reachable.  A probe that raises counts as unreachable.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        registry_probe: Probe,
        broker_probe: Probe,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._registry_probe = registry_probe
        self._broker_probe = broker_probe

    def check(self) -> SystemHealthStatus:
        """Probe both dependencies.  Never raises."""
        registry_connected = self._run_probe("registry", self._registry_probe)
        broker_connected = self._run_probe("broker", self._broker_probe)
        online = registry_connected and broker_connected

        status = SystemHealthStatus(
            status=SystemStatus.ONLINE if online else SystemStatus.OFFLINE,
            registry_connected=registry_connected,
            broker_connected=broker_connected,
            timestamp=datetime.now(timezone.utc),
        )
        if not online:
            self._logger.warning(
                "System offline: registry=%s broker=%s",
                registry_connected,
                broker_connected,
            )
        return status

    def require_online(self) -> SystemHealthStatus:
        """Return the health snapshot, or raise when offline.

        Raises:
            OfflineModeError: Naming each unavailable dependency.
        """
        status = self.check()
        if status.is_online:
            return status

        reasons = unavailable_dependencies(status)
        raise OfflineModeError(
            f"Sistema en modo fuera de línea. {', '.join(reasons)}. "
            "Por favor, verifica la conectividad de red.",
            status,
        )

    def _run_probe(self, name: str, probe: Probe) -> bool:
        try:
            return bool(probe())
        except Exception as exc:
            self._logger.warning("Health probe %s raised: %s", name, exc)
            return False
