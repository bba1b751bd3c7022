"""Tests for the customer profile and the address hierarchy lookups."""

import pytest
from conftest import CUST_ESQUIVEL, CUST_INACTIVE, CUST_JOSE, CUST_NO_CARDS

from teller.database import DatabaseManager
from teller.exceptions import CustomerDetailError, LocationLookupError, RegistryQueryError
from teller.logger import StructuredLogger
from teller.models.enums import CustomerStatus, GovernmentIdType, PhoneType
from teller.repositories.card_repository import CardRepository
from teller.repositories.customer_repository import CustomerRepository
from teller.repositories.location_repository import LocationRepository
from teller.services.address_hierarchy import AddressHierarchyService
from teller.services.card_service import CardService
from teller.services.customer_detail import CustomerDetailService


@pytest.fixture
def detail_service(
    customer_repo: CustomerRepository, card_service: CardService, logger: StructuredLogger,
) -> CustomerDetailService:
    return CustomerDetailService(
        customer_repo=customer_repo, card_service=card_service, logger=logger,
    )


@pytest.fixture
def address_service(location_repo: LocationRepository, logger: StructuredLogger) -> AddressHierarchyService:
    return AddressHierarchyService(location_repo=location_repo, logger=logger)


class TestCustomerDetailService:
    """Tests for CustomerDetailService."""

    def test_full_profile(self, detail_service: CustomerDetailService) -> None:
        detail = detail_service.get_customer_detail(CUST_ESQUIVEL)

        assert detail is not None
        assert detail.first_name == "ESQUIVEL"
        assert detail.second_last_name == "ROMERO"
        assert detail.status == CustomerStatus.ACTIVE
        assert detail.is_payment_eligible
        assert str(detail.registration_date) == "2020-01-15"

        assert [address.id for address in detail.addresses] == ["ad-01", "ad-02"]
        assert detail.addresses[1].neighborhood_name == "Roma Norte"
        assert not detail.addresses[1].is_primary

        assert [phone.type for phone in detail.phones] == [PhoneType.MOBILE, PhoneType.WORK]
        assert [(gid.type, gid.number) for gid in detail.government_ids] == [
            (GovernmentIdType.RFC, "EUVE800101AB1"),
        ]

    def test_active_card_count(self, detail_service: CustomerDetailService) -> None:
        """Only cards with registry status active are counted."""
        assert detail_service.get_customer_detail(CUST_ESQUIVEL).active_card_count == 1
        assert detail_service.get_customer_detail(CUST_JOSE).active_card_count == 2

    def test_inactive_customer_is_viewable(self, detail_service: CustomerDetailService) -> None:
        """Inactive customers are returned but flagged ineligible for payment."""
        detail = detail_service.get_customer_detail(CUST_INACTIVE)

        assert detail is not None
        assert detail.status == CustomerStatus.INACTIVE
        assert not detail.is_payment_eligible
        assert detail.addresses[0].postal_code == ""
        assert detail.addresses[0].neighborhood_name == ""

    def test_customer_without_related_records(self, detail_service: CustomerDetailService) -> None:
        detail = detail_service.get_customer_detail(CUST_NO_CARDS)

        assert detail is not None
        assert detail.addresses == []
        assert detail.phones == []
        assert detail.government_ids == []
        assert detail.active_card_count == 0
        assert detail.registration_date is None

    def test_unknown_customer(self, detail_service: CustomerDetailService) -> None:
        assert detail_service.get_customer_detail("does-not-exist") is None

    def test_registry_failure(
        self, seeded_db: DatabaseManager, detail_service: CustomerDetailService,
    ) -> None:
        seeded_db.close()
        with pytest.raises(CustomerDetailError, match="Failed to fetch customer details"):
            detail_service.get_customer_detail(CUST_ESQUIVEL)

    def test_card_count_failure(
        self,
        detail_service: CustomerDetailService,
        card_repo: CardRepository,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def _fail(customer_id: str) -> int:
            raise RegistryQueryError("count_active (cards)")

        monkeypatch.setattr(card_repo, "count_active", _fail)
        with pytest.raises(CustomerDetailError):
            detail_service.get_customer_detail(CUST_ESQUIVEL)


class TestAddressHierarchyService:
    """Cascading state, municipality and neighborhood lists."""

    def test_states_ordered_by_name(self, address_service: AddressHierarchyService) -> None:
        states = address_service.states()
        assert [state.name for state in states] == ["Ciudad de México", "Jalisco"]
        assert states[0].code == "CDMX"

    def test_municipalities_of_state(self, address_service: AddressHierarchyService) -> None:
        municipalities = address_service.municipalities("st-01")
        assert [m.name for m in municipalities] == ["Benito Juárez", "Cuauhtémoc"]
        assert all(m.state_id == "st-01" for m in municipalities)

    def test_neighborhoods_of_municipality(self, address_service: AddressHierarchyService) -> None:
        neighborhoods = address_service.neighborhoods("mu-01")
        assert [n.name for n in neighborhoods] == ["Juárez", "Roma Norte"]

    @pytest.mark.parametrize("parent_id", ["", "   "])
    def test_blank_parent_returns_empty(
        self, address_service: AddressHierarchyService, parent_id: str,
    ) -> None:
        assert address_service.municipalities(parent_id) == []
        assert address_service.neighborhoods(parent_id) == []

    def test_registry_failure(
        self, seeded_db: DatabaseManager, address_service: AddressHierarchyService,
    ) -> None:
        seeded_db.close()
        with pytest.raises(LocationLookupError):
            address_service.states()
