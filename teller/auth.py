"""
Cashier Session State.

Provides an injectable ``SessionManager`` that holds the authenticated
cashier for the lifetime of a teller-window session.  Authentication is
performed by the surrounding branch system; this module only carries the
resulting identity so that audit entries can be attributed.

Usage::

    from teller.auth import SessionManager
    from teller.models.cashier import Cashier

    session = SessionManager()
    session.set_current_cashier(Cashier(
        id="c-001",
        employee_id="EMP001",
        name="Ana López",
        role="teller_window",
    ))
    cashier_id = session.current_cashier_id
"""

from __future__ import annotations

import threading
from typing import Optional

from teller.models.cashier import Cashier


class SessionManager:
    """Injectable holder for the current cashier.

    Each instance maintains its own session state; pass a single
    ``SessionManager`` through the composition root so every component
    shares the same session.
    """

    def __init__(self) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._current_cashier: Optional[Cashier] = None

    def set_current_cashier(self, cashier: Cashier) -> None:
        """Record *cashier* as the session cashier.

        Raises:
            PermissionError: If the cashier account is deactivated.
        """
        if not cashier.is_active:
            raise PermissionError(
                f"Cashier {cashier.employee_id} is deactivated and cannot open a session."
            )
        with self._lock:
            self._current_cashier = cashier

    def get_current_cashier(self) -> Cashier:
        """Return the session cashier.

        Raises:
            RuntimeError: If no cashier is currently authenticated.
        """
        with self._lock:
            if self._current_cashier is None:
                raise RuntimeError(
                    "No cashier is currently authenticated. Login required."
                )
            return self._current_cashier

    @property
    def current_cashier_id(self) -> str:
        """Shortcut for the audit trail; same failure mode as :meth:`get_current_cashier`."""
        return self.get_current_cashier().id

    def clear(self) -> None:
        """End the session."""
        with self._lock:
            self._current_cashier = None

    @property
    def is_authenticated(self) -> bool:
        """``True`` when a cashier is currently logged in."""
        with self._lock:
            return self._current_cashier is not None
