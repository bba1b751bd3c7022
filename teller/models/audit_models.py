"""
Search Audit Models.

One entry is appended per loggable teller action (search, select,
view_cards).  Entries are immutable once written.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, JsonValue, field_validator

from teller.models.enums import AuditActionType


class AuditLogRequest(BaseModel):
    """Input to :meth:`AuditService.record`."""

    cashier_id: str = Field(min_length=1)
    search_criteria: dict[str, JsonValue]
    results_count: int = Field(default=0, ge=0)
    selected_customer_id: Optional[str] = None
    action_type: AuditActionType

    @field_validator("selected_customer_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        return value or None


class SearchAuditLogEntry(BaseModel):
    """A persisted audit row."""

    model_config = {"frozen": True}

    id: str
    cashier_id: str = Field(min_length=1)
    search_timestamp: datetime
    search_criteria: dict[str, JsonValue] = Field(default_factory=dict)
    results_count: int = 0
    selected_customer_id: Optional[str] = None
    action_type: AuditActionType


class AuditLogResult(BaseModel):
    """Acknowledgement returned to the caller after an append."""

    id: str
    timestamp: datetime
    cashier_id: str
