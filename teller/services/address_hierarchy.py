"""
Address Hierarchy Service.

Cascading state → municipality → neighborhood lists for the address
search filters.
"""

from __future__ import annotations

from teller.exceptions import LocationLookupError, RegistryQueryError
from teller.logger import StructuredLogger
from teller.models.location import Municipality, Neighborhood, State
from teller.repositories.location_repository import LocationRepository
from teller.services.base_service import BaseService


class AddressHierarchyService(BaseService):
    """Location catalogue lookups, ordered by name.

    A blank parent id yields an empty list without querying.
    """

    def __init__(self, location_repo: LocationRepository, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._repo = location_repo

    def states(self) -> list[State]:
        try:
            return self._repo.list_states()
        except RegistryQueryError as exc:
            raise LocationLookupError("Failed to fetch states") from exc

    def municipalities(self, state_id: str) -> list[Municipality]:
        if not state_id or not state_id.strip():
            return []
        try:
            return self._repo.list_municipalities(state_id)
        except RegistryQueryError as exc:
            raise LocationLookupError("Failed to fetch municipalities") from exc

    def neighborhoods(self, municipality_id: str) -> list[Neighborhood]:
        if not municipality_id or not municipality_id.strip():
            return []
        try:
            return self._repo.list_neighborhoods(municipality_id)
        except RegistryQueryError as exc:
            raise LocationLookupError("Failed to fetch neighborhoods") from exc
