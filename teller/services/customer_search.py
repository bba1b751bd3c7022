"""
Customer Search Service.

Locates customers through sequential narrowing:

1. Base pass: case-sensitive substring match on the name fields.
2. Phone pass: any customer owning one of the supplied numbers.
3. Government-id pass: any customer holding one of the supplied
   ``(type, number)`` pairs.
4. Address pass: customers with one address matching every supplied
   address predicate.

Each pass after the first only intersects the running candidate list,
whose order (registry primary key) is preserved.  Survivors are then
enriched with a phone number, their RFC and their formatted primary
address.

Callers must validate the filters first
(:func:`teller.utils.search_validation.validate_search_filters`); this
service does not re-check the minimum-filter policy.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from teller.exceptions import CustomerSearchError, RegistryQueryError
from teller.logger import StructuredLogger
from teller.models.customer import Customer, CustomerAddress
from teller.models.enums import GovernmentIdType
from teller.models.search_models import (
    ADDRESS_FILTER_FIELDS,
    CustomerSearchFilters,
    CustomerSearchResponse,
    CustomerSearchResult,
)
from teller.repositories.customer_repository import CustomerRepository
from teller.services.base_service import BaseService

CUSTOMER_NUMBER_LENGTH: int = 10


def format_primary_address(address: Optional[CustomerAddress]) -> str:
    """Render an address as ``street, neighborhood, municipality, state postal``.

    Missing components render empty; no address renders ``""``.
    """
    if address is None:
        return ""
    return (
        f"{address.street}, {address.neighborhood_name}, "
        f"{address.municipality_name}, {address.state_name} {address.postal_code}"
    ).strip()


class CustomerSearchService(BaseService):
    """Search orchestrator over :class:`CustomerRepository`.

    Parameters
    ----------
    customer_repo:
        Registry access.
    logger:
        Structured logger.
    max_workers:
        Threads used to enrich survivors.  ``1`` enriches sequentially.
        Result order never depends on this value.
    """

    def __init__(
        self,
        customer_repo: CustomerRepository,
        logger: StructuredLogger,
        max_workers: int = 1,
    ) -> None:
        super().__init__(logger)
        self._repo = customer_repo
        self._max_workers = max(1, max_workers)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def search(self, filters: CustomerSearchFilters) -> CustomerSearchResponse:
        """Run every applicable pass and enrich the survivors.

        Raises:
            CustomerSearchError: If any registry query fails.  No partial
                results are returned.
        """
        try:
            candidates = self._narrow(filters)
            results = self._enrich_all(candidates)
        except RegistryQueryError as exc:
            self._logger.error("Customer search aborted: %s", exc)
            raise CustomerSearchError() from exc

        self._logger.info(
            "Customer search returned %d result(s).",
            len(results),
            extra={"filters": sorted(filters.filled_fields())},
        )
        return CustomerSearchResponse(results=results, total_count=len(results))

    # ------------------------------------------------------------------
    # Narrowing passes
    # ------------------------------------------------------------------

    def _narrow(self, filters: CustomerSearchFilters) -> list[Customer]:
        candidates = self._repo.search_by_name(
            first_name=filters.first_name,
            last_name=filters.last_name,
            middle_name=filters.second_last_name,
        )

        if candidates and filters.has_phone_filters:
            ids = self._repo.find_ids_by_phone(
                [filters.primary_phone, filters.secondary_phone]
            )
            candidates = [c for c in candidates if c.id in ids]

        if candidates and filters.has_government_id_filters:
            ids = self._repo.find_ids_by_government_id({
                GovernmentIdType.RFC: filters.rfc,
                GovernmentIdType.IFE: filters.ife,
                GovernmentIdType.PASSPORT: filters.passport,
            })
            candidates = [c for c in candidates if c.id in ids]

        if candidates and filters.has_address_filters:
            ids = self._repo.find_ids_by_address({
                name: getattr(filters, name) for name in ADDRESS_FILTER_FIELDS
            })
            candidates = [c for c in candidates if c.id in ids]

        return candidates

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------

    def _enrich_all(self, candidates: list[Customer]) -> list[CustomerSearchResult]:
        if self._max_workers == 1 or len(candidates) <= 1:
            return [self._enrich(customer) for customer in candidates]

        # Executor.map yields in input order.
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            return list(pool.map(self._enrich, candidates))

    def _enrich(self, customer: Customer) -> CustomerSearchResult:
        phone = self._repo.find_first_phone_number(customer.id)
        rfc = self._repo.find_rfc_number(customer.id)
        address = self._repo.find_primary_address(customer.id)

        return CustomerSearchResult(
            id=customer.id,
            customer_number=customer.id[:CUSTOMER_NUMBER_LENGTH],
            first_name=customer.first_name,
            last_name=customer.last_name,
            second_last_name=customer.middle_name,
            rfc=rfc,
            status=customer.status,
            primary_phone=phone or "",
            primary_address=format_primary_address(address),
        )
