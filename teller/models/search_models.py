"""
Customer Search Data Transfer Objects.

Pydantic models for the search boundary: the fixed-shape filter record,
the validator's result and the enriched search results.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from teller.models.enums import CustomerStatus

__all__ = [
    "ADDRESS_FILTER_FIELDS",
    "CustomerSearchFilters",
    "CustomerSearchResponse",
    "CustomerSearchResult",
    "FieldError",
    "ValidationResult",
]


ADDRESS_FILTER_FIELDS: tuple[str, ...] = (
    "state_id",
    "municipality_id",
    "neighborhood_id",
    "postal_code",
)


class CustomerSearchFilters(BaseModel):
    """The 14 optional search fields.

    Every field is a string; empty means "not supplied".  ``None`` is
    accepted and normalised to ``""``.  Both snake_case names and the
    camelCase wire names (``primaryPhone``, ``secondLastName``...) are
    accepted; any other key is rejected.
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    primary_phone: str = ""
    secondary_phone: str = ""
    client_number: str = ""
    first_name: str = ""
    last_name: str = ""
    second_last_name: str = ""
    date_of_birth: str = ""
    rfc: str = ""
    state_id: str = ""
    municipality_id: str = ""
    neighborhood_id: str = ""
    postal_code: str = ""
    ife: str = ""
    passport: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def has_phone_filters(self) -> bool:
        return bool(self.primary_phone or self.secondary_phone)

    @property
    def has_government_id_filters(self) -> bool:
        return bool(self.rfc or self.ife or self.passport)

    @property
    def has_address_filters(self) -> bool:
        return any(getattr(self, name) for name in ADDRESS_FILTER_FIELDS)

    def filled_fields(self) -> dict[str, str]:
        """Return only the supplied fields, keyed by camelCase wire name."""
        return {
            key: value
            for key, value in self.model_dump(by_alias=True).items()
            if value
        }


class FieldError(BaseModel):
    """A format violation attached to one filter field."""

    field: str
    message: str


class ValidationResult(BaseModel):
    """Outcome of :func:`validate_search_filters`.

    On failure exactly one of ``general_error`` (too few filters) or a
    non-empty ``errors`` list (format violations) is populated.
    """

    is_valid: bool
    errors: list[FieldError] = Field(default_factory=list)
    general_error: Optional[str] = None


class CustomerSearchResult(BaseModel):
    """One enriched search hit."""

    id: str
    customer_number: str
    first_name: str
    last_name: str
    second_last_name: Optional[str] = None
    rfc: Optional[str] = None
    status: CustomerStatus
    primary_phone: str = ""
    primary_address: str = ""


class CustomerSearchResponse(BaseModel):
    """Search output.  ``total_count`` always equals ``len(results)``."""

    results: list[CustomerSearchResult] = Field(default_factory=list)
    total_count: int = 0
