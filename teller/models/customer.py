"""
Customer Registry Models.

Read-only projections of the registry's customer, address, phone and
government-id rows.  Field names follow the registry columns
(``middle_name`` is the customer's second last name).
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from teller.models.enums import CustomerStatus, GovernmentIdType, PhoneType


class Customer(BaseModel):
    """A registry customer."""

    id: str
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    status: CustomerStatus = CustomerStatus.ACTIVE
    registration_date: Optional[date] = None

    model_config = {"from_attributes": True}

    @property
    def is_payment_eligible(self) -> bool:
        """Only active customers may progress to the payment step."""
        return self.status == CustomerStatus.ACTIVE


class CustomerAddress(BaseModel):
    """Address with joined location names.  Missing names become ``""``."""

    id: str
    street: str
    postal_code: str = ""
    state_name: str = ""
    municipality_name: str = ""
    neighborhood_name: str = ""
    is_primary: bool = False


class Phone(BaseModel):
    id: str
    customer_id: str
    number: str
    type: PhoneType


class GovernmentId(BaseModel):
    id: str
    customer_id: str
    type: GovernmentIdType
    number: str


class CustomerDetail(BaseModel):
    """Complete customer profile for the detail view.

    Inactive customers are returned as well; ``is_payment_eligible`` is
    what downstream steps must consult.
    """

    id: str
    first_name: str
    last_name: str
    second_last_name: Optional[str] = None
    status: CustomerStatus
    registration_date: Optional[date] = None
    is_payment_eligible: bool
    addresses: list[CustomerAddress] = Field(default_factory=list)
    phones: list[Phone] = Field(default_factory=list)
    government_ids: list[GovernmentId] = Field(default_factory=list)
    active_card_count: int = 0
