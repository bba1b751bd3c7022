"""
Structured Audit Logging Utility.

Every teller action that touches customer data (search, select,
view_cards) is logged as a structured JSON object in addition to the
persisted ``search_audit_logs`` row.  Provides a Pydantic-validated model
and a single function for consistent audit log lines.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, JsonValue

from teller.logger import StructuredLogger
from teller.models.enums import AuditActionType

__all__ = ["AuditEvent", "log_audit_event"]


class AuditEvent(BaseModel):
    """Schema-validated representation of a single audit log line.

    ``search_criteria`` must already be sanitised (see
    :func:`teller.utils.card_security.sanitize_for_logging`).
    """

    timestamp: str
    action: AuditActionType
    cashier_id: str
    results_count: int = 0
    selected_customer_id: Optional[str] = None
    search_criteria: dict[str, JsonValue] = Field(default_factory=dict)


def log_audit_event(
    logger: StructuredLogger,
    action: AuditActionType,
    cashier_id: str,
    search_criteria: Optional[dict[str, JsonValue]] = None,
    results_count: int = 0,
    selected_customer_id: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> AuditEvent:
    """Emit a structured ``AUDIT:`` JSON log line and return the event.

    Args:
        logger: The logger instance to write to.
        action: ``search``, ``select`` or ``view_cards``.
        cashier_id: The teller who performed the action.
        search_criteria: Sanitised, JSON-safe criteria.
        results_count: Number of results the action produced.
        selected_customer_id: The customer acted upon, if any.
        timestamp: Event time; defaults to now (UTC).
    """
    event = AuditEvent(
        timestamp=(timestamp or datetime.now(timezone.utc)).isoformat(),
        action=action,
        cashier_id=cashier_id,
        results_count=results_count,
        selected_customer_id=selected_customer_id,
        search_criteria=search_criteria or {},
    )
    logger.info("AUDIT: %s", json.dumps(event.model_dump(mode="json"), default=str))
    return event
