"""
Customer Search Filter Validation.

Enforces the minimum-filter policy and the per-field formats before any
registry query runs.  Validation failures are returned, never raised.
"""

from __future__ import annotations

import re
from typing import Optional

from teller.models.search_models import (
    CustomerSearchFilters,
    FieldError,
    ValidationResult,
)

__all__ = [
    "MISSING_FILTERS_MESSAGE",
    "count_filled_filters",
    "validate_phone_number",
    "validate_postal_code",
    "validate_rfc",
    "validate_search_filters",
]

DEFAULT_MINIMUM_FILTERS: int = 2

MISSING_FILTERS_MESSAGE: str = (
    "Campos necesarios faltantes. Por favor, llena al menos dos campos "
    "para realizar la búsqueda."
)

_RE_PHONE = re.compile(r"[0-9]{10}")
_RE_RFC = re.compile(r"[A-Za-z0-9]{13}")
_RE_POSTAL_CODE = re.compile(r"[0-9]{5}")

# Fields that each count as one filter when supplied.  The four address
# fields are counted separately, as a single filter.
_INDIVIDUAL_FILTER_FIELDS: tuple[str, ...] = (
    "primary_phone",
    "secondary_phone",
    "client_number",
    "first_name",
    "last_name",
    "second_last_name",
    "date_of_birth",
    "rfc",
    "ife",
    "passport",
)


# ---------------------------------------------------------------------------
# Field formats (empty is valid: every filter is optional)
# ---------------------------------------------------------------------------

def validate_phone_number(phone: str) -> bool:
    """Ten ASCII digits, nothing else."""
    return not phone or _RE_PHONE.fullmatch(phone) is not None


def validate_rfc(rfc: str) -> bool:
    """Thirteen alphanumeric characters, case-insensitive."""
    return not rfc or _RE_RFC.fullmatch(rfc) is not None


def validate_postal_code(postal_code: str) -> bool:
    """Five ASCII digits."""
    return not postal_code or _RE_POSTAL_CODE.fullmatch(postal_code) is not None


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

def count_filled_filters(filters: CustomerSearchFilters) -> int:
    """Count supplied filters; any address component counts once in total."""
    count = sum(1 for name in _INDIVIDUAL_FILTER_FIELDS if getattr(filters, name))
    if filters.has_address_filters:
        count += 1
    return count


def validate_search_filters(
    filters: CustomerSearchFilters,
    minimum: Optional[int] = None,
) -> ValidationResult:
    """Validate a search request.

    Parameters
    ----------
    filters:
        The submitted filter record.
    minimum:
        Minimum number of filled filters.  Defaults to two.

    Returns
    -------
    ValidationResult
        When too few filters are filled, only ``general_error`` is set and
        no format check runs.  Otherwise every format violation is
        collected into ``errors``.
    """
    required = DEFAULT_MINIMUM_FILTERS if minimum is None else minimum

    if count_filled_filters(filters) < required:
        return ValidationResult(
            is_valid=False,
            errors=[],
            general_error=MISSING_FILTERS_MESSAGE,
        )

    errors: list[FieldError] = []

    if not validate_phone_number(filters.primary_phone):
        errors.append(FieldError(
            field="primaryPhone",
            message="El teléfono de casa debe tener 10 dígitos numéricos",
        ))

    if not validate_phone_number(filters.secondary_phone):
        errors.append(FieldError(
            field="secondaryPhone",
            message="El número celular debe tener 10 dígitos numéricos",
        ))

    if not validate_rfc(filters.rfc):
        errors.append(FieldError(
            field="rfc",
            message="El RFC debe tener 13 caracteres alfanuméricos",
        ))

    if not validate_postal_code(filters.postal_code):
        errors.append(FieldError(
            field="postalCode",
            message="El código postal debe tener 5 dígitos numéricos",
        ))

    return ValidationResult(is_valid=not errors, errors=errors)
