"""
Payment Card Models.

``Card`` mirrors the registry row and therefore holds the raw PAN.  It
never leaves the card layer: everything handed to a caller is a
``CardView``, which has no field capable of carrying the full number.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from teller.models.enums import CardBrand, CardDisplayStatus, CardStatus, CardType


class Card(BaseModel):
    """Registry card row.  ``number`` is the raw PAN."""

    id: str
    customer_id: str
    number: str = Field(repr=False)
    type: CardType
    status: CardStatus = CardStatus.ACTIVE
    issuance_date: Optional[date] = None
    expiration_date: Optional[date] = None


class CardValidationResult(BaseModel):
    """Outcome of the transaction-eligibility gate."""

    is_valid: bool
    error: Optional[str] = None


class CardView(BaseModel):
    """Display-safe card projection.

    Attributes
    ----------
    masked_number:
        ``**** **** **** 1234``; the only rendering of the PAN.
    status:
        Display status (registry ``expired`` becomes ``blocked``).
    is_selectable:
        ``True`` when the card passes the transaction gate.
    selection_error:
        The specific reason the card cannot be used, when it cannot.
    """

    model_config = {"frozen": True}

    id: str
    customer_id: str
    masked_number: str
    last_four_digits: str
    card_type: CardType
    brand: CardBrand
    expiration_date: str
    issuance_date: Optional[date] = None
    cardholder_name: str
    status: CardDisplayStatus
    issuer: str
    is_selectable: bool
    selection_error: Optional[str] = None
