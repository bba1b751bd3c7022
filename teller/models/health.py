"""
Online-Mode Health Model.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from teller.models.enums import SystemStatus


class SystemHealthStatus(BaseModel):
    """Snapshot of the two backing dependencies.

    ``status`` is ``online`` only when both the customer registry
    ("Cliente Único") and the message broker ("IIB Broker") answer.
    """

    status: SystemStatus
    registry_connected: bool
    broker_connected: bool
    timestamp: datetime

    @property
    def is_online(self) -> bool:
        return self.status == SystemStatus.ONLINE
