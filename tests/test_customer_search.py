"""Tests for the customer registry queries and the search orchestrator."""

import pytest
from conftest import (
    CUST_ESQUIVEL,
    CUST_GARCIA,
    CUST_INACTIVE,
    CUST_JOSE,
    CUST_LOWERCASE,
)

from teller.database import DatabaseManager
from teller.exceptions import CustomerSearchError, RegistryQueryError
from teller.logger import StructuredLogger
from teller.models.customer import CustomerAddress
from teller.models.enums import CustomerStatus, GovernmentIdType
from teller.models.search_models import CustomerSearchFilters
from teller.repositories.customer_repository import CustomerRepository
from teller.services.customer_search import CustomerSearchService, format_primary_address
from teller.utils.string_helpers import escape_like_pattern


def _ids(response) -> list[str]:
    return [result.id for result in response.results]


class TestCustomerRepository:
    """SQLite forms of the registry queries."""

    def test_name_match_is_case_sensitive_substring(self, customer_repo: CustomerRepository) -> None:
        """Lowercase names do not match uppercase filters."""
        customers = customer_repo.search_by_name(first_name="ESQUIVEL")
        assert [c.id for c in customers] == [CUST_ESQUIVEL, CUST_JOSE, CUST_GARCIA]

    def test_no_name_filter_returns_everyone(self, customer_repo: CustomerRepository) -> None:
        assert len(customer_repo.search_by_name()) == 6

    def test_like_wildcards_are_literal(self, customer_repo: CustomerRepository) -> None:
        """A teller typing % or _ does not widen the match."""
        assert customer_repo.search_by_name(first_name="%") == []
        assert customer_repo.search_by_name(first_name="_") == []

    def test_phone_ids_or_semantics(self, customer_repo: CustomerRepository) -> None:
        ids = customer_repo.find_ids_by_phone(["5512345678", "3311112222", ""])
        assert ids == {CUST_ESQUIVEL, CUST_GARCIA}

    def test_government_ids_union_across_types(self, customer_repo: CustomerRepository) -> None:
        ids = customer_repo.find_ids_by_government_id({
            GovernmentIdType.RFC: "EUVE800101AB1",
            GovernmentIdType.IFE: "",
            GovernmentIdType.PASSPORT: "G12345678",
        })
        assert ids == {CUST_ESQUIVEL, CUST_GARCIA}

    def test_government_id_type_must_match(self, customer_repo: CustomerRepository) -> None:
        """An RFC number looked up as a passport matches nobody."""
        ids = customer_repo.find_ids_by_government_id({GovernmentIdType.PASSPORT: "EUVE800101AB1"})
        assert ids == set()

    def test_address_predicates_apply_to_one_row(self, customer_repo: CustomerRepository) -> None:
        """All predicates must hold on the same address."""
        assert customer_repo.find_ids_by_address(
            {"municipality_id": "mu-01", "postal_code": "06700"}
        ) == {CUST_ESQUIVEL}
        assert customer_repo.find_ids_by_address(
            {"municipality_id": "mu-01", "postal_code": "03100"}
        ) == set()

    def test_address_rejects_unknown_columns(self, customer_repo: CustomerRepository) -> None:
        with pytest.raises(ValueError):
            customer_repo.find_ids_by_address({"street": "Av. Reforma 100"})

    def test_primary_address_with_location_names(self, customer_repo: CustomerRepository) -> None:
        address = customer_repo.find_primary_address(CUST_ESQUIVEL)
        assert address == CustomerAddress(
            id="ad-01",
            street="Av. Reforma 100",
            postal_code="06600",
            state_name="Ciudad de México",
            municipality_name="Cuauhtémoc",
            neighborhood_name="Juárez",
            is_primary=True,
        )

    def test_find_by_id_missing(self, customer_repo: CustomerRepository) -> None:
        assert customer_repo.find_by_id("does-not-exist") is None

    def test_closed_connection_raises_registry_error(
        self, seeded_db: DatabaseManager, logger: StructuredLogger,
    ) -> None:
        """Driver errors surface as one opaque RegistryQueryError."""
        repo = CustomerRepository(db=seeded_db, logger=logger)
        seeded_db.close()

        with pytest.raises(RegistryQueryError) as excinfo:
            repo.find_by_id(CUST_ESQUIVEL)
        assert excinfo.value.operation == "find_by_id (customers)"
        assert excinfo.value.__cause__ is not None


class TestEscapeLikePattern:
    """Tests for escape_like_pattern."""

    @pytest.mark.parametrize(
        ("raw", "escaped"),
        [
            ("ESQUIVEL", "ESQUIVEL"),
            ("50%", "50\\%"),
            ("DE_LA", "DE\\_LA"),
            ("a\\b", "a\\\\b"),
        ],
    )
    def test_wildcards_are_literal(self, raw: str, escaped: str) -> None:
        assert escape_like_pattern(raw) == escaped


class TestFormatPrimaryAddress:
    """Tests for format_primary_address."""

    def test_full_address(self) -> None:
        address = CustomerAddress(
            id="a",
            street="Av. Reforma 100",
            postal_code="06600",
            state_name="Ciudad de México",
            municipality_name="Cuauhtémoc",
            neighborhood_name="Juárez",
        )
        assert format_primary_address(address) == (
            "Av. Reforma 100, Juárez, Cuauhtémoc, Ciudad de México 06600"
        )

    def test_missing_parts_render_empty(self) -> None:
        address = CustomerAddress(
            id="a", street="Calle Sin Colonia 1", state_name="Jalisco", municipality_name="Guadalajara",
        )
        assert format_primary_address(address) == "Calle Sin Colonia 1, , Guadalajara, Jalisco"

    def test_no_address(self) -> None:
        assert format_primary_address(None) == ""


class TestCustomerSearchService:
    """Sequential narrowing and enrichment."""

    def test_two_name_search(self, search_service: CustomerSearchService) -> None:
        """Both substrings must match; order follows the registry key."""
        response = search_service.search(
            CustomerSearchFilters(first_name="ESQUIVEL", last_name="VELAZQUEZ")
        )

        assert _ids(response) == [CUST_ESQUIVEL, CUST_JOSE]
        assert CUST_LOWERCASE not in _ids(response)
        assert response.total_count == len(response.results) == 2

    def test_results_are_enriched(self, search_service: CustomerSearchService) -> None:
        response = search_service.search(
            CustomerSearchFilters(first_name="ESQUIVEL", last_name="VELAZQUEZ")
        )
        first, second = response.results

        assert first.customer_number == CUST_ESQUIVEL[:10]
        assert first.second_last_name == "ROMERO"
        assert first.rfc == "EUVE800101AB1"
        assert first.primary_phone in {"5512345678", "5500001111"}
        assert first.primary_address == (
            "Av. Reforma 100, Juárez, Cuauhtémoc, Ciudad de México 06600"
        )
        assert first.status == CustomerStatus.ACTIVE

        assert second.rfc is None
        assert second.second_last_name is None
        assert second.primary_phone == "5587654321"

    def test_phone_pass_narrows(self, search_service: CustomerSearchService) -> None:
        response = search_service.search(
            CustomerSearchFilters(first_name="ESQUIVEL", primary_phone="5587654321")
        )
        assert _ids(response) == [CUST_JOSE]

    def test_phone_pass_or_across_numbers(self, search_service: CustomerSearchService) -> None:
        response = search_service.search(CustomerSearchFilters(
            first_name="ESQUIVEL",
            primary_phone="5512345678",
            secondary_phone="3311112222",
        ))
        assert _ids(response) == [CUST_ESQUIVEL, CUST_GARCIA]

    def test_government_id_pass(self, search_service: CustomerSearchService) -> None:
        response = search_service.search(
            CustomerSearchFilters(first_name="ESQUIVEL", rfc="EUGA850505CD2")
        )
        assert _ids(response) == [CUST_GARCIA]

    def test_government_id_pass_or_across_types(self, search_service: CustomerSearchService) -> None:
        response = search_service.search(
            CustomerSearchFilters(rfc="EUVE800101AB1", passport="G12345678")
        )
        assert _ids(response) == [CUST_ESQUIVEL, CUST_GARCIA]

    def test_address_pass(self, search_service: CustomerSearchService) -> None:
        response = search_service.search(
            CustomerSearchFilters(last_name="VELAZQUEZ", state_id="st-01", postal_code="03100")
        )
        assert _ids(response) == [CUST_JOSE]

    def test_inactive_customers_are_searchable(self, search_service: CustomerSearchService) -> None:
        response = search_service.search(CustomerSearchFilters(first_name="ANA", last_name="MARTINEZ"))
        assert _ids(response) == [CUST_INACTIVE]
        assert response.results[0].status == CustomerStatus.INACTIVE
        assert response.results[0].primary_address == "Calle Sin Colonia 1, , Guadalajara, Jalisco"

    def test_phone_and_rfc_without_names(self, search_service: CustomerSearchService) -> None:
        response = search_service.search(
            CustomerSearchFilters(primary_phone="5512345678", rfc="EUVE800101AB1")
        )
        assert _ids(response) == [CUST_ESQUIVEL]

    def test_empty_base_pass_skips_later_passes(
        self,
        search_service: CustomerSearchService,
        customer_repo: CustomerRepository,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """No candidates means no further registry queries."""
        def _unexpected(*args: object, **kwargs: object) -> set[str]:
            raise AssertionError("narrowing pass should not run")

        monkeypatch.setattr(customer_repo, "find_ids_by_phone", _unexpected)
        response = search_service.search(
            CustomerSearchFilters(first_name="NOBODY", primary_phone="5512345678")
        )
        assert response.results == []
        assert response.total_count == 0

    def test_parallel_enrichment_preserves_order(
        self, customer_repo: CustomerRepository, logger: StructuredLogger,
    ) -> None:
        service = CustomerSearchService(customer_repo=customer_repo, logger=logger, max_workers=4)
        response = service.search(CustomerSearchFilters(first_name="ESQUIVEL", last_name="A"))
        assert _ids(response) == [CUST_ESQUIVEL, CUST_JOSE, CUST_GARCIA]

    def test_registry_failure_aborts_search(
        self, seeded_db: DatabaseManager, search_service: CustomerSearchService,
    ) -> None:
        """No partial results when a query fails."""
        seeded_db.close()
        with pytest.raises(CustomerSearchError):
            search_service.search(
                CustomerSearchFilters(first_name="ESQUIVEL", last_name="VELAZQUEZ")
            )

    def test_failing_narrowing_pass_aborts_search(
        self,
        search_service: CustomerSearchService,
        customer_repo: CustomerRepository,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def _fail(*args: object, **kwargs: object) -> set[str]:
            raise RegistryQueryError("find_ids_by_address (addresses)")

        monkeypatch.setattr(customer_repo, "find_ids_by_address", _fail)
        with pytest.raises(CustomerSearchError) as excinfo:
            search_service.search(CustomerSearchFilters(first_name="ESQUIVEL", state_id="st-01"))
        assert isinstance(excinfo.value.__cause__, RegistryQueryError)
