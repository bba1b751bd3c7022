"""Tests for the customer search filter validator."""

import pytest
from pydantic import ValidationError

from teller.models.search_models import CustomerSearchFilters
from teller.utils.search_validation import (
    MISSING_FILTERS_MESSAGE,
    count_filled_filters,
    validate_phone_number,
    validate_postal_code,
    validate_rfc,
    validate_search_filters,
)


class TestFieldFormats:
    """Per-field format checks."""

    @pytest.mark.parametrize("phone", ["", "5512345678"])
    def test_valid_phones(self, phone: str) -> None:
        assert validate_phone_number(phone)

    @pytest.mark.parametrize("phone", ["555", "55123456789", "55-1234-567", "５５１２３４５６７８"])
    def test_invalid_phones(self, phone: str) -> None:
        assert not validate_phone_number(phone)

    @pytest.mark.parametrize("rfc", ["", "EUVE800101AB1", "euve800101ab1"])
    def test_valid_rfc(self, rfc: str) -> None:
        assert validate_rfc(rfc)

    @pytest.mark.parametrize("rfc", ["EUVE800101AB", "EUVE800101AB12", "EUVE-800101AB"])
    def test_invalid_rfc(self, rfc: str) -> None:
        assert not validate_rfc(rfc)

    def test_postal_code(self) -> None:
        assert validate_postal_code("06600")
        assert validate_postal_code("")
        assert not validate_postal_code("6600")
        assert not validate_postal_code("0660A")


class TestFilterCounting:
    """Tests for count_filled_filters."""

    def test_individual_fields_count_once_each(self) -> None:
        filters = CustomerSearchFilters(
            first_name="ESQUIVEL", last_name="VELAZQUEZ", rfc="EUVE800101AB1",
        )
        assert count_filled_filters(filters) == 3

    @pytest.mark.parametrize(
        "address",
        [
            {"state_id": "st-01"},
            {"state_id": "st-01", "municipality_id": "mu-01"},
            {"state_id": "st-01", "municipality_id": "mu-01", "neighborhood_id": "nb-01"},
            {
                "state_id": "st-01",
                "municipality_id": "mu-01",
                "neighborhood_id": "nb-01",
                "postal_code": "06600",
            },
            {"postal_code": "06600"},
        ],
    )
    def test_address_group_counts_once(self, address: dict[str, str]) -> None:
        """Any non-empty subset of the address fields contributes exactly 1."""
        assert count_filled_filters(CustomerSearchFilters(**address)) == 1

    def test_empty_filters(self) -> None:
        assert count_filled_filters(CustomerSearchFilters()) == 0


class TestValidateSearchFilters:
    """Tests for validate_search_filters."""

    def test_single_phone_fails_minimum(self) -> None:
        """One filled group fails with the general error only."""
        result = validate_search_filters(CustomerSearchFilters(primary_phone="555"))

        assert not result.is_valid
        assert result.general_error == MISSING_FILTERS_MESSAGE
        assert result.errors == []

    @pytest.mark.parametrize(
        "filters",
        [
            CustomerSearchFilters(),
            CustomerSearchFilters(primary_phone="5512345678"),
            CustomerSearchFilters(rfc="bad"),
            CustomerSearchFilters(state_id="st-01", municipality_id="mu-01", postal_code="x"),
        ],
    )
    def test_minimum_checked_before_formats(self, filters: CustomerSearchFilters) -> None:
        """Below the minimum no format error is ever reported."""
        result = validate_search_filters(filters)
        assert not result.is_valid
        assert result.general_error == MISSING_FILTERS_MESSAGE
        assert result.errors == []

    def test_two_names_pass(self) -> None:
        result = validate_search_filters(
            CustomerSearchFilters(first_name="ESQUIVEL", last_name="VELAZQUEZ")
        )
        assert result.is_valid
        assert result.errors == []
        assert result.general_error is None

    def test_format_errors_accumulate(self) -> None:
        """Every malformed field is reported; no general error."""
        filters = CustomerSearchFilters(
            primary_phone="555",
            secondary_phone="12",
            rfc="SHORT",
            postal_code="1",
        )
        result = validate_search_filters(filters)

        assert not result.is_valid
        assert result.general_error is None
        assert [error.field for error in result.errors] == [
            "primaryPhone", "secondaryPhone", "rfc", "postalCode",
        ]
        assert result.errors[2].message == "El RFC debe tener 13 caracteres alfanuméricos"

    def test_custom_minimum(self) -> None:
        filters = CustomerSearchFilters(first_name="ESQUIVEL", last_name="VELAZQUEZ")
        assert not validate_search_filters(filters, minimum=3).is_valid
        assert validate_search_filters(
            CustomerSearchFilters(first_name="ESQUIVEL"), minimum=1,
        ).is_valid


class TestSearchFiltersModel:
    """Tests for the fixed-shape filter record."""

    def test_camel_case_keys_accepted(self) -> None:
        filters = CustomerSearchFilters.model_validate(
            {"firstName": "ESQUIVEL", "secondLastName": "ROMERO", "primaryPhone": None}
        )
        assert filters.first_name == "ESQUIVEL"
        assert filters.second_last_name == "ROMERO"
        assert filters.primary_phone == ""

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CustomerSearchFilters.model_validate({"firstName": "A", "nickname": "B"})

    def test_filled_fields_uses_wire_names(self) -> None:
        filters = CustomerSearchFilters(first_name="ESQUIVEL", postal_code="06600")
        assert filters.filled_fields() == {"firstName": "ESQUIVEL", "postalCode": "06600"}
