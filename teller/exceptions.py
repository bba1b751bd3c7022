"""
Exception Hierarchy.

One exception type per failing operation.  Validation failures and
not-found outcomes are never raised; they are returned as values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from teller.models.health import SystemHealthStatus


class TellerError(Exception):
    """Base exception for all teller-desk errors."""


class RegistryQueryError(TellerError):
    """Raised when a customer-registry query fails for any reason.

    The message is deliberately opaque; the underlying driver error is
    chained as ``__cause__`` for the logs.
    """

    def __init__(self, operation: str) -> None:
        super().__init__(f"Registry query failed: {operation}")
        self.operation = operation


class CustomerSearchError(TellerError):
    """Raised when any pass of a customer search fails."""

    def __init__(self, message: str = "Failed to search customers") -> None:
        super().__init__(message)


class CustomerDetailError(TellerError):
    """Raised when a customer profile cannot be assembled."""

    def __init__(self, message: str = "Failed to fetch customer details") -> None:
        super().__init__(message)


class CardFetchError(TellerError):
    """Raised when cards cannot be read.  Distinct from "no cards"."""

    def __init__(self, message: str = "Failed to fetch customer cards") -> None:
        super().__init__(message)


class LocationLookupError(TellerError):
    """Raised when the state/municipality/neighborhood catalogue is unreadable."""


class AuditWriteError(TellerError):
    """Raised by the audit repository when an entry cannot be appended."""


class OfflineModeError(TellerError):
    """Raised when an operation is attempted while the desk is offline."""

    def __init__(self, message: str, status: "SystemHealthStatus") -> None:
        super().__init__(message)
        self.status = status
