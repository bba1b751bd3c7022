"""
Location Repository.

State → municipality → neighborhood catalogue backing the address
filters.  All lists are ordered by name.
"""

from __future__ import annotations

from teller.database import DatabaseManager
from teller.logger import StructuredLogger
from teller.models.location import Municipality, Neighborhood, State
from teller.repositories.base_repository import BaseRepository


class LocationRepository(BaseRepository):
    """Read-only access to the location catalogue."""

    TABLE = "states"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def list_states(self) -> list[State]:
        def _supabase() -> list[State]:
            response = (
                self.supabase.table("states")
                .select("id, name, code")
                .order("name")
                .execute()
            )
            return [State(**row) for row in response.data]

        def _sqlite() -> list[State]:
            rows = self.sqlite.execute(
                "SELECT id, name, code FROM states ORDER BY name"
            ).fetchall()
            return [State(**dict(row)) for row in rows]

        return self._execute_query(
            _supabase, _sqlite, operation_name="list_states (states)",
        )

    def list_municipalities(self, state_id: str) -> list[Municipality]:
        def _supabase() -> list[Municipality]:
            response = (
                self.supabase.table("municipalities")
                .select("id, name, state_id")
                .eq("state_id", state_id)
                .order("name")
                .execute()
            )
            return [Municipality(**row) for row in response.data]

        def _sqlite() -> list[Municipality]:
            rows = self.sqlite.execute(
                "SELECT id, name, state_id FROM municipalities "
                "WHERE state_id = ? ORDER BY name",
                (state_id,),
            ).fetchall()
            return [Municipality(**dict(row)) for row in rows]

        return self._execute_query(
            _supabase, _sqlite,
            operation_name="list_municipalities (municipalities)",
        )

    def list_neighborhoods(self, municipality_id: str) -> list[Neighborhood]:
        def _supabase() -> list[Neighborhood]:
            response = (
                self.supabase.table("neighborhoods")
                .select("id, name, municipality_id")
                .eq("municipality_id", municipality_id)
                .order("name")
                .execute()
            )
            return [Neighborhood(**row) for row in response.data]

        def _sqlite() -> list[Neighborhood]:
            rows = self.sqlite.execute(
                "SELECT id, name, municipality_id FROM neighborhoods "
                "WHERE municipality_id = ? ORDER BY name",
                (municipality_id,),
            ).fetchall()
            return [Neighborhood(**dict(row)) for row in rows]

        return self._execute_query(
            _supabase, _sqlite,
            operation_name="list_neighborhoods (neighborhoods)",
        )
