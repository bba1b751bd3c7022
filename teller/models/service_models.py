"""
Service Layer Data Transfer Objects.

Pydantic models for validated output at service boundaries.
Replaces raw dict passing between layers.
"""

from __future__ import annotations

from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, Field

from teller.models.search_models import FieldError

T = TypeVar("T")

__all__ = [
    "ServiceResult",
    "UserFeedbackMessage",
]


class UserFeedbackMessage(BaseModel):
    """Teller-facing message derived from an error or an empty result."""

    type: Literal["error", "warning", "success", "info"]
    title: str
    message: str
    action_label: Optional[str] = None


class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    All workflow operations return this, providing a consistent contract
    for whatever front end drives the desk.

    Generic over ``T`` so callers can annotate return types precisely
    (e.g. ``ServiceResult[list[CardView]]``).  ``field_errors`` carries
    per-field validation messages; ``error`` carries everything else.
    ``feedback`` is the teller-facing message for failures and empty
    outcomes; technical detail stays in the logs.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200
    field_errors: list[FieldError] = Field(default_factory=list)
    feedback: Optional[UserFeedbackMessage] = None
