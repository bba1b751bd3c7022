"""
Customer Detail Service.

Assembles the complete profile shown after a customer is selected:
addresses with location names, phones, government identifications and
the number of active cards on file.
"""

from __future__ import annotations

from typing import Optional

from teller.exceptions import CardFetchError, CustomerDetailError, RegistryQueryError
from teller.logger import StructuredLogger
from teller.models.customer import CustomerDetail
from teller.repositories.customer_repository import CustomerRepository
from teller.services.base_service import BaseService
from teller.services.card_service import CardService


class CustomerDetailService(BaseService):
    """Read-only profile assembly."""

    def __init__(
        self,
        customer_repo: CustomerRepository,
        card_service: CardService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._repo = customer_repo
        self._cards = card_service

    def get_customer_detail(self, customer_id: str) -> Optional[CustomerDetail]:
        """Return the profile, or ``None`` when the customer does not exist.

        Inactive customers are returned too, flagged
        ``is_payment_eligible=False``.

        Raises:
            CustomerDetailError: If any registry read fails.
        """
        try:
            customer = self._repo.find_by_id(customer_id)
            if customer is None:
                self._logger.warning("Customer not found with ID: %s", customer_id)
                return None

            addresses = self._repo.find_addresses(customer_id)
            phones = self._repo.find_phones(customer_id)
            government_ids = self._repo.find_government_ids(customer_id)
            active_card_count = self._cards.count_active_cards(customer_id)
        except (RegistryQueryError, CardFetchError) as exc:
            self._logger.error("Error fetching customer details for %s: %s", customer_id, exc)
            raise CustomerDetailError() from exc

        return CustomerDetail(
            id=customer.id,
            first_name=customer.first_name,
            last_name=customer.last_name,
            second_last_name=customer.middle_name,
            status=customer.status,
            registration_date=customer.registration_date,
            is_payment_eligible=customer.is_payment_eligible,
            addresses=addresses,
            phones=phones,
            government_ids=government_ids,
            active_card_count=active_card_count,
        )
