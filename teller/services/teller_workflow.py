"""
Teller Workflow Service.

The single entry point a teller front end talks to.  Each operation
follows the same sequence:

1. Time the operation on the injected metrics sink.
2. Reject a blank cashier id on audited operations (400).
3. Require online mode (503 when offline).
4. Validate the input (400 on failure, with field errors when relevant).
5. Delegate to the domain service (404 / 403 / 422 outcomes are values).
6. Record the audit entry for search, select and view-cards actions.

Every method returns a :class:`ServiceResult` envelope and never raises.
Offline, not-found, failed and empty outcomes carry the teller-facing
message in ``feedback``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional, Union

from pydantic import ValidationError

from teller.exceptions import (
    CardFetchError,
    CustomerDetailError,
    CustomerSearchError,
    LocationLookupError,
    OfflineModeError,
    RegistryQueryError,
)
from teller.logger import StructuredLogger
from teller.models.audit_models import AuditLogRequest, SearchAuditLogEntry
from teller.models.card import CardView
from teller.models.customer import CustomerDetail
from teller.models.enums import AuditActionType
from teller.models.health import SystemHealthStatus
from teller.models.location import Municipality, Neighborhood, State
from teller.models.search_models import CustomerSearchFilters, CustomerSearchResponse
from teller.models.service_models import ServiceResult
from teller.services.address_hierarchy import AddressHierarchyService
from teller.services.audit_service import AuditService
from teller.services.base_service import BaseService
from teller.services.card_service import CardService
from teller.services.customer_detail import CustomerDetailService
from teller.services.customer_search import CustomerSearchService
from teller.services.online_mode import OnlineModeService, unavailable_dependencies
from teller.utils.performance import MetricsSink, track
from teller.utils.search_validation import count_filled_filters, validate_search_filters
from teller.utils.user_feedback import (
    CUSTOMER_NOT_FOUND,
    create_card_load_failure_message,
    create_customer_not_found_message,
    create_missing_filters_message,
    create_no_results_message,
    create_offline_mode_message,
)
from teller.utils.workflow_routing import WorkflowStep, validate_workflow_transition

CASHIER_ID_REQUIRED: str = "Cashier ID is required"
CUSTOMER_ID_REQUIRED: str = "Customer ID is required"
CARD_ID_REQUIRED: str = "Card ID is required"
CARD_NOT_FOUND: str = "Tarjeta no encontrada"
INVALID_FORMAT: str = "Formato inválido"


def _is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def _customer_not_found() -> ServiceResult:
    return ServiceResult(
        success=False,
        error=CUSTOMER_NOT_FOUND,
        status_code=404,
        feedback=create_customer_not_found_message(),
    )


class TellerWorkflowService(BaseService):
    """Facade over the search, detail, card, audit and online-mode services.

    Dependencies are injected via __init__ -- no global state.
    """

    def __init__(
        self,
        search_service: CustomerSearchService,
        detail_service: CustomerDetailService,
        card_service: CardService,
        audit_service: AuditService,
        online_mode_service: OnlineModeService,
        address_service: AddressHierarchyService,
        metrics: MetricsSink,
        logger: StructuredLogger,
        min_search_filters: int = 2,
    ) -> None:
        super().__init__(logger)
        self._search = search_service
        self._detail = detail_service
        self._cards = card_service
        self._audit = audit_service
        self._online = online_mode_service
        self._addresses = address_service
        self._metrics = metrics
        self._min_search_filters = min_search_filters

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def health(self) -> ServiceResult[SystemHealthStatus]:
        """Online-mode snapshot; ``503`` when offline, data included either way."""
        status = self._online.check()
        return ServiceResult(
            success=status.is_online,
            data=status,
            status_code=200 if status.is_online else 503,
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_customers(
        self,
        filters: Union[CustomerSearchFilters, Mapping[str, Optional[str]]],
        cashier_id: str,
    ) -> ServiceResult[CustomerSearchResponse]:
        """Validate, search and audit.

        Args:
            filters: A filter model, or a mapping with snake_case or
                camelCase keys.  Unknown keys are rejected.
            cashier_id: The teller performing the search.

        Returns:
            200 with the response; 400 on validation failure; 503 when
            offline; 500 when the registry fails.
        """
        with track(self._metrics, "customer_search", self._logger):
            if _is_blank(cashier_id):
                return ServiceResult(success=False, error=CASHIER_ID_REQUIRED, status_code=400)

            offline = self._gate()
            if offline is not None:
                return offline

            if not isinstance(filters, CustomerSearchFilters):
                try:
                    filters = CustomerSearchFilters.model_validate(dict(filters))
                except ValidationError as exc:
                    self._logger.warning("Rejected search filters: %s", exc.errors())
                    return ServiceResult(
                        success=False, error=INVALID_FORMAT, status_code=400,
                    )

            validation = validate_search_filters(filters, minimum=self._min_search_filters)
            if not validation.is_valid:
                feedback = None
                if validation.general_error:
                    feedback = create_missing_filters_message(
                        count_filled_filters(filters), self._min_search_filters,
                    )
                return ServiceResult(
                    success=False,
                    error=validation.general_error or INVALID_FORMAT,
                    field_errors=validation.errors,
                    status_code=400,
                    feedback=feedback,
                )

            try:
                response = self._search.search(filters)
            except CustomerSearchError as exc:
                return self._failure(exc)

            criteria = filters.filled_fields()
            self._record(
                cashier_id=cashier_id,
                search_criteria=criteria,
                results_count=response.total_count,
                action_type=AuditActionType.SEARCH,
            )
            if not response.results:
                return ServiceResult(
                    success=True, data=response, feedback=create_no_results_message(criteria),
                )
            return ServiceResult(success=True, data=response)

    # ------------------------------------------------------------------
    # Customer detail (selection)
    # ------------------------------------------------------------------

    def get_customer_detail(
        self, customer_id: str, cashier_id: str,
    ) -> ServiceResult[CustomerDetail]:
        """Full profile of the selected customer; audited as ``select``."""
        with track(self._metrics, "customer_detail", self._logger):
            if _is_blank(cashier_id):
                return ServiceResult(success=False, error=CASHIER_ID_REQUIRED, status_code=400)
            if _is_blank(customer_id):
                return ServiceResult(success=False, error=CUSTOMER_ID_REQUIRED, status_code=400)

            offline = self._gate()
            if offline is not None:
                return offline

            try:
                detail = self._detail.get_customer_detail(customer_id)
            except CustomerDetailError as exc:
                return self._failure(exc)

            if detail is None:
                return _customer_not_found()

            self._record(
                cashier_id=cashier_id,
                search_criteria={"customerId": customer_id},
                results_count=1,
                selected_customer_id=customer_id,
                action_type=AuditActionType.SELECT,
            )
            return ServiceResult(success=True, data=detail)

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def list_customer_cards(
        self, customer_id: str, cashier_id: str,
    ) -> ServiceResult[list[CardView]]:
        """The customer's cards (possibly none); audited as ``view_cards``."""
        with track(self._metrics, "card_retrieval", self._logger):
            if _is_blank(cashier_id):
                return ServiceResult(success=False, error=CASHIER_ID_REQUIRED, status_code=400)
            if _is_blank(customer_id):
                return ServiceResult(success=False, error=CUSTOMER_ID_REQUIRED, status_code=400)

            offline = self._gate()
            if offline is not None:
                return offline

            try:
                cards = self._cards.list_cards_for_customer(customer_id)
            except CardFetchError as exc:
                return self._failure(exc, feedback=create_card_load_failure_message())

            self._record(
                cashier_id=cashier_id,
                search_criteria={"customerId": customer_id},
                results_count=len(cards),
                selected_customer_id=customer_id,
                action_type=AuditActionType.VIEW_CARDS,
            )
            return ServiceResult(success=True, data=cards)

    def get_card(self, card_id: str) -> ServiceResult[CardView]:
        with track(self._metrics, "card_retrieval", self._logger):
            if _is_blank(card_id):
                return ServiceResult(success=False, error=CARD_ID_REQUIRED, status_code=400)

            offline = self._gate()
            if offline is not None:
                return offline

            try:
                card = self._cards.get_card_by_id(card_id)
            except CardFetchError as exc:
                return self._failure(exc)

            if card is None:
                return ServiceResult(success=False, error=CARD_NOT_FOUND, status_code=404)
            return ServiceResult(success=True, data=card)

    def select_card_for_payment(
        self, customer_id: str, card_id: str, cashier_id: str,
    ) -> ServiceResult[CardView]:
        """Final gate before the payment step.

        Returns:
            200 with the card; 403 when the customer is inactive; 404 when
            the customer or card is missing or the card belongs to someone
            else; 422 when the card fails the transaction gate, with the
            specific reason.
        """
        with track(self._metrics, "navigation", self._logger):
            if _is_blank(cashier_id):
                return ServiceResult(success=False, error=CASHIER_ID_REQUIRED, status_code=400)
            if _is_blank(customer_id):
                return ServiceResult(success=False, error=CUSTOMER_ID_REQUIRED, status_code=400)
            if _is_blank(card_id):
                return ServiceResult(success=False, error=CARD_ID_REQUIRED, status_code=400)

            offline = self._gate()
            if offline is not None:
                return offline

            try:
                detail = self._detail.get_customer_detail(customer_id)
                card = self._cards.get_card_by_id(card_id) if detail is not None else None
            except (CustomerDetailError, CardFetchError) as exc:
                return self._failure(exc)

            if detail is None:
                return _customer_not_found()

            transition = validate_workflow_transition(
                WorkflowStep.PAYMENT,
                has_customer=True,
                has_card=True,
                customer_is_active=detail.is_payment_eligible,
            )
            if not transition.valid:
                return ServiceResult(success=False, error=transition.error, status_code=403)

            if card is None or card.customer_id != customer_id:
                return ServiceResult(success=False, error=CARD_NOT_FOUND, status_code=404)

            if not card.is_selectable:
                return ServiceResult(success=False, error=card.selection_error, status_code=422)

            self._record(
                cashier_id=cashier_id,
                search_criteria={"customerId": customer_id, "cardId": card_id},
                results_count=1,
                selected_customer_id=customer_id,
                action_type=AuditActionType.SELECT,
            )
            return ServiceResult(success=True, data=card)

    # ------------------------------------------------------------------
    # Address hierarchy
    # ------------------------------------------------------------------

    def list_states(self) -> ServiceResult[list[State]]:
        try:
            return ServiceResult(success=True, data=self._addresses.states())
        except LocationLookupError as exc:
            return self._failure(exc)

    def list_municipalities(self, state_id: str) -> ServiceResult[list[Municipality]]:
        try:
            return ServiceResult(success=True, data=self._addresses.municipalities(state_id))
        except LocationLookupError as exc:
            return self._failure(exc)

    def list_neighborhoods(self, municipality_id: str) -> ServiceResult[list[Neighborhood]]:
        try:
            return ServiceResult(
                success=True, data=self._addresses.neighborhoods(municipality_id),
            )
        except LocationLookupError as exc:
            return self._failure(exc)

    # ------------------------------------------------------------------
    # Audit history
    # ------------------------------------------------------------------

    def audit_history(self, cashier_id: str) -> ServiceResult[list[SearchAuditLogEntry]]:
        try:
            return ServiceResult(success=True, data=self._audit.history(cashier_id))
        except RegistryQueryError as exc:
            return self._failure(exc)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _gate(self) -> Optional[ServiceResult]:
        """``None`` when online, otherwise the 503 result to return."""
        try:
            self._online.require_online()
        except OfflineModeError as exc:
            return ServiceResult(
                success=False,
                error=str(exc),
                status_code=503,
                feedback=create_offline_mode_message(unavailable_dependencies(exc.status)),
            )
        return None

    def _record(self, **fields: object) -> None:
        """Audit one action; a malformed entry is logged and dropped."""
        try:
            request = AuditLogRequest(**fields)
        except ValidationError as exc:
            self._logger.warning("Audit entry rejected: %s", exc.errors())
            return
        self._audit.record(request)
