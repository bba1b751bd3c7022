"""
Card Service.

Turns registry card rows into display-safe :class:`CardView` objects.
The raw PAN is read here and nowhere else: masking, last-four
extraction, brand detection and the transaction gate all run inside
:meth:`CardService._to_view`, after which the number is discarded.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from teller.exceptions import CardFetchError, RegistryQueryError
from teller.logger import StructuredLogger
from teller.models.card import Card, CardView
from teller.models.customer import Customer
from teller.models.enums import CardDisplayStatus, CardStatus
from teller.repositories.card_repository import CardRepository
from teller.repositories.customer_repository import CustomerRepository
from teller.services.base_service import BaseService
from teller.utils.card_security import (
    get_card_brand,
    get_last_four_digits,
    mask_card_number,
    validate_card_for_transaction,
)

DEFAULT_ISSUER_NAME: str = "Banco Nacional"
MISSING_EXPIRATION: str = "N/A"


def format_expiration(expiration: Optional[date]) -> str:
    """``MM/YY``, or ``N/A`` when the registry has no expiration."""
    if expiration is None:
        return MISSING_EXPIRATION
    return f"{expiration.month:02d}/{expiration.year % 100:02d}"


def build_cardholder_name(customer: Customer) -> str:
    """``first middle last`` with a missing middle name leaving no gap."""
    parts = [customer.first_name, customer.middle_name or "", customer.last_name]
    return " ".join(part.strip() for part in parts if part and part.strip())


def to_display_status(status: CardStatus) -> CardDisplayStatus:
    if status == CardStatus.EXPIRED:
        return CardDisplayStatus.BLOCKED
    if status == CardStatus.ACTIVE:
        return CardDisplayStatus.ACTIVE
    return CardDisplayStatus.INACTIVE


class CardService(BaseService):
    """Card listing and lookup for the card-selection step.

    Parameters
    ----------
    card_repo / customer_repo:
        Registry access.
    logger:
        Structured logger.
    issuer_name:
        Issuer shown on every card.
    today:
        Clock used by the expiration check; injectable for tests.
    """

    def __init__(
        self,
        card_repo: CardRepository,
        customer_repo: CustomerRepository,
        logger: StructuredLogger,
        issuer_name: str = DEFAULT_ISSUER_NAME,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(logger)
        self._card_repo = card_repo
        self._customer_repo = customer_repo
        self._issuer_name = issuer_name
        self._today = today

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_cards_for_customer(self, customer_id: str) -> list[CardView]:
        """All cards of a customer, or ``[]`` if the customer does not exist.

        Raises:
            CardFetchError: If the registry cannot be read.  A customer
                without cards is not an error.
        """
        try:
            customer = self._customer_repo.find_by_id(customer_id)
            if customer is None:
                self._logger.warning("Customer not found with ID: %s", customer_id)
                return []
            cards = self._card_repo.find_by_customer(customer_id)
        except RegistryQueryError as exc:
            self._logger.error("Error fetching cards for customer %s: %s", customer_id, exc)
            raise CardFetchError("Failed to fetch customer cards") from exc

        reference = self._today()
        return [self._to_view(card, customer, reference) for card in cards]

    def get_card_by_id(self, card_id: str) -> Optional[CardView]:
        """One card with its owner's name, or ``None`` if either is missing.

        Raises:
            CardFetchError: If the registry cannot be read.
        """
        try:
            card = self._card_repo.find_by_id(card_id)
            if card is None:
                self._logger.warning("Card not found with ID: %s", card_id)
                return None
            customer = self._customer_repo.find_by_id(card.customer_id)
            if customer is None:
                self._logger.warning(
                    "Owner %s of card %s not found.", card.customer_id, card_id,
                )
                return None
        except RegistryQueryError as exc:
            self._logger.error("Error fetching card %s: %s", card_id, exc)
            raise CardFetchError("Failed to fetch card") from exc

        return self._to_view(card, customer, self._today())

    def count_active_cards(self, customer_id: str) -> int:
        """Number of cards whose registry status is ``active``.

        Raises:
            CardFetchError: If the registry cannot be read.
        """
        try:
            return self._card_repo.count_active(customer_id)
        except RegistryQueryError as exc:
            self._logger.error("Error counting active cards for %s: %s", customer_id, exc)
            raise CardFetchError("Failed to count customer cards") from exc

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def _to_view(self, card: Card, customer: Customer, reference: date) -> CardView:
        expiration = format_expiration(card.expiration_date)
        gate = validate_card_for_transaction(
            card.number,
            expiration if card.expiration_date is not None else None,
            card.status,
            today=reference,
        )

        return CardView(
            id=card.id,
            customer_id=card.customer_id,
            masked_number=mask_card_number(card.number),
            last_four_digits=get_last_four_digits(card.number),
            card_type=card.type,
            brand=get_card_brand(card.number),
            expiration_date=expiration,
            issuance_date=card.issuance_date,
            cardholder_name=build_cardholder_name(customer),
            status=to_display_status(card.status),
            issuer=self._issuer_name,
            is_selectable=gate.is_valid,
            selection_error=gate.error,
        )
