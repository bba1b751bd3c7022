"""
Customer Repository.

Read-only access to the customer registry: customers and their
addresses, phones and government identifications.  Every public method
has a PostgREST form and an equivalent SQLite form; the active source is
chosen by :meth:`BaseRepository._execute_query`.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Mapping
from typing import Optional

from teller.database import DatabaseManager
from teller.logger import StructuredLogger
from teller.models.customer import Customer, CustomerAddress, GovernmentId, Phone
from teller.models.enums import GovernmentIdType
from teller.models.search_models import ADDRESS_FILTER_FIELDS
from teller.repositories.base_repository import BaseRepository
from teller.utils.string_helpers import escape_like_pattern

# Embedded-resource select used for every address read against PostgREST.
_ADDRESS_EMBED_SELECT: str = (
    "id, street, postal_code, is_primary, "
    "states(name), municipalities(name), neighborhoods(name)"
)

_SQLITE_ADDRESS_SELECT: str = """
    SELECT a.id, a.street, a.postal_code, a.is_primary,
           s.name AS state_name,
           m.name AS municipality_name,
           n.name AS neighborhood_name
    FROM addresses a
    LEFT JOIN states s ON s.id = a.state_id
    LEFT JOIN municipalities m ON m.id = a.municipality_id
    LEFT JOIN neighborhoods n ON n.id = a.neighborhood_id
"""


def _embedded_name(row: Mapping[str, object], relation: str) -> str:
    embedded = row.get(relation)
    if isinstance(embedded, Mapping):
        return str(embedded.get("name") or "")
    return ""


def _address_from_postgrest(row: Mapping[str, object]) -> CustomerAddress:
    return CustomerAddress(
        id=str(row["id"]),
        street=str(row["street"]),
        postal_code=str(row.get("postal_code") or ""),
        state_name=_embedded_name(row, "states"),
        municipality_name=_embedded_name(row, "municipalities"),
        neighborhood_name=_embedded_name(row, "neighborhoods"),
        is_primary=bool(row.get("is_primary")),
    )


def _address_from_sqlite(row: sqlite3.Row) -> CustomerAddress:
    return CustomerAddress(
        id=row["id"],
        street=row["street"],
        postal_code=row["postal_code"] or "",
        state_name=row["state_name"] or "",
        municipality_name=row["municipality_name"] or "",
        neighborhood_name=row["neighborhood_name"] or "",
        is_primary=bool(row["is_primary"]),
    )


class CustomerRepository(BaseRepository):
    """Data access layer for customers and their contact data.

    No write methods: the registry write path belongs to another system.
    """

    TABLE = "customers"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def find_by_id(self, customer_id: str) -> Optional[Customer]:
        """Fetch a customer by primary key, or ``None``."""
        def _supabase() -> Optional[Customer]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("id", customer_id)
                .limit(1)
                .execute()
            )
            return Customer(**response.data[0]) if response.data else None

        def _sqlite() -> Optional[Customer]:
            row = self.sqlite.execute(
                f"SELECT * FROM {self.TABLE} WHERE id = ?", (customer_id,)
            ).fetchone()
            return Customer(**dict(row)) if row else None

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_by_id (customers)",
        )

    def search_by_name(
        self,
        first_name: str = "",
        last_name: str = "",
        middle_name: str = "",
    ) -> list[Customer]:
        """Base search pass: case-sensitive substring match on each supplied name.

        Empty arguments impose no constraint; with no argument at all every
        customer is returned.  Results are ordered by primary key.
        """
        predicates: dict[str, str] = {
            column: value
            for column, value in (
                ("first_name", first_name),
                ("last_name", last_name),
                ("middle_name", middle_name),
            )
            if value
        }

        def _supabase() -> list[Customer]:
            query = self.supabase.table(self.TABLE).select("*")
            for column, value in predicates.items():
                query = query.like(column, f"%{escape_like_pattern(value)}%")
            response = query.order("id").execute()
            return [Customer(**row) for row in response.data]

        def _sqlite() -> list[Customer]:
            # instr() is case-sensitive, unlike SQLite's default LIKE.
            where = " AND ".join(f"instr({column}, ?) > 0" for column in predicates)
            sql = f"SELECT * FROM {self.TABLE}"
            if where:
                sql += f" WHERE {where}"
            sql += " ORDER BY id"
            rows = self.sqlite.execute(sql, tuple(predicates.values())).fetchall()
            return [Customer(**dict(row)) for row in rows]

        return self._execute_query(
            _supabase, _sqlite, operation_name="search_by_name (customers)",
        )

    # ------------------------------------------------------------------
    # Narrowing passes (id sets)
    # ------------------------------------------------------------------

    def find_ids_by_phone(self, numbers: Iterable[str]) -> set[str]:
        """Customer ids owning a phone equal to any of *numbers*."""
        values = sorted({number for number in numbers if number})
        if not values:
            return set()

        def _supabase() -> set[str]:
            response = (
                self.supabase.table("phones")
                .select("customer_id")
                .in_("number", values)
                .execute()
            )
            return {row["customer_id"] for row in response.data}

        def _sqlite() -> set[str]:
            placeholders = ", ".join("?" for _ in values)
            rows = self.sqlite.execute(
                f"SELECT DISTINCT customer_id FROM phones WHERE number IN ({placeholders})",
                tuple(values),
            ).fetchall()
            return {row["customer_id"] for row in rows}

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_ids_by_phone (phones)",
        )

    def find_ids_by_government_id(
        self, predicates: Mapping[GovernmentIdType, str],
    ) -> set[str]:
        """Customer ids holding any of the given ``(type, number)`` pairs."""
        pairs = [(str(id_type), number) for id_type, number in predicates.items() if number]
        if not pairs:
            return set()

        def _supabase() -> set[str]:
            found: set[str] = set()
            for id_type, number in pairs:
                response = (
                    self.supabase.table("government_ids")
                    .select("customer_id")
                    .eq("type", id_type)
                    .eq("number", number)
                    .execute()
                )
                found.update(row["customer_id"] for row in response.data)
            return found

        def _sqlite() -> set[str]:
            where = " OR ".join("(type = ? AND number = ?)" for _ in pairs)
            params = tuple(value for pair in pairs for value in pair)
            rows = self.sqlite.execute(
                f"SELECT DISTINCT customer_id FROM government_ids WHERE {where}",
                params,
            ).fetchall()
            return {row["customer_id"] for row in rows}

        return self._execute_query(
            _supabase, _sqlite,
            operation_name="find_ids_by_government_id (government_ids)",
        )

    def find_ids_by_address(self, predicates: Mapping[str, str]) -> set[str]:
        """Customer ids with at least one address matching **all** predicates.

        Keys must be address columns (``state_id``, ``municipality_id``,
        ``neighborhood_id``, ``postal_code``).

        Raises:
            ValueError: If a key is not an address filter column.
        """
        unknown = set(predicates) - set(ADDRESS_FILTER_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported address predicates: {sorted(unknown)}")

        columns = {column: value for column, value in predicates.items() if value}
        if not columns:
            return set()

        def _supabase() -> set[str]:
            query = self.supabase.table("addresses").select("customer_id")
            for column, value in columns.items():
                query = query.eq(column, value)
            response = query.execute()
            return {row["customer_id"] for row in response.data}

        def _sqlite() -> set[str]:
            where = " AND ".join(f"{column} = ?" for column in columns)
            rows = self.sqlite.execute(
                f"SELECT DISTINCT customer_id FROM addresses WHERE {where}",
                tuple(columns.values()),
            ).fetchall()
            return {row["customer_id"] for row in rows}

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_ids_by_address (addresses)",
        )

    # ------------------------------------------------------------------
    # Related records (detail view)
    # ------------------------------------------------------------------

    def find_addresses(self, customer_id: str) -> list[CustomerAddress]:
        """All addresses of a customer with joined location names."""
        def _supabase() -> list[CustomerAddress]:
            response = (
                self.supabase.table("addresses")
                .select(_ADDRESS_EMBED_SELECT)
                .eq("customer_id", customer_id)
                .order("id")
                .execute()
            )
            return [_address_from_postgrest(row) for row in response.data]

        def _sqlite() -> list[CustomerAddress]:
            rows = self.sqlite.execute(
                _SQLITE_ADDRESS_SELECT + " WHERE a.customer_id = ? ORDER BY a.id",
                (customer_id,),
            ).fetchall()
            return [_address_from_sqlite(row) for row in rows]

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_addresses (addresses)",
        )

    def find_phones(self, customer_id: str) -> list[Phone]:
        def _supabase() -> list[Phone]:
            response = (
                self.supabase.table("phones")
                .select("*")
                .eq("customer_id", customer_id)
                .order("id")
                .execute()
            )
            return [Phone(**row) for row in response.data]

        def _sqlite() -> list[Phone]:
            rows = self.sqlite.execute(
                "SELECT * FROM phones WHERE customer_id = ? ORDER BY id",
                (customer_id,),
            ).fetchall()
            return [Phone(**dict(row)) for row in rows]

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_phones (phones)",
        )

    def find_government_ids(self, customer_id: str) -> list[GovernmentId]:
        def _supabase() -> list[GovernmentId]:
            response = (
                self.supabase.table("government_ids")
                .select("*")
                .eq("customer_id", customer_id)
                .order("id")
                .execute()
            )
            return [GovernmentId(**row) for row in response.data]

        def _sqlite() -> list[GovernmentId]:
            rows = self.sqlite.execute(
                "SELECT * FROM government_ids WHERE customer_id = ? ORDER BY id",
                (customer_id,),
            ).fetchall()
            return [GovernmentId(**dict(row)) for row in rows]

        return self._execute_query(
            _supabase, _sqlite,
            operation_name="find_government_ids (government_ids)",
        )

    # ------------------------------------------------------------------
    # Enrichment primitives (search results)
    # ------------------------------------------------------------------

    def find_first_phone_number(self, customer_id: str) -> Optional[str]:
        """Any one phone number of the customer; which one is unspecified."""
        def _supabase() -> Optional[str]:
            response = (
                self.supabase.table("phones")
                .select("number")
                .eq("customer_id", customer_id)
                .limit(1)
                .execute()
            )
            return response.data[0]["number"] if response.data else None

        def _sqlite() -> Optional[str]:
            row = self.sqlite.execute(
                "SELECT number FROM phones WHERE customer_id = ? LIMIT 1",
                (customer_id,),
            ).fetchone()
            return row["number"] if row else None

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_first_phone_number (phones)",
        )

    def find_rfc_number(self, customer_id: str) -> Optional[str]:
        def _supabase() -> Optional[str]:
            response = (
                self.supabase.table("government_ids")
                .select("number")
                .eq("customer_id", customer_id)
                .eq("type", str(GovernmentIdType.RFC))
                .limit(1)
                .execute()
            )
            return response.data[0]["number"] if response.data else None

        def _sqlite() -> Optional[str]:
            row = self.sqlite.execute(
                "SELECT number FROM government_ids WHERE customer_id = ? AND type = ? LIMIT 1",
                (customer_id, str(GovernmentIdType.RFC)),
            ).fetchone()
            return row["number"] if row else None

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_rfc_number (government_ids)",
        )

    def find_primary_address(self, customer_id: str) -> Optional[CustomerAddress]:
        """The first primary address by id, or ``None``."""
        def _supabase() -> Optional[CustomerAddress]:
            response = (
                self.supabase.table("addresses")
                .select(_ADDRESS_EMBED_SELECT)
                .eq("customer_id", customer_id)
                .eq("is_primary", True)
                .order("id")
                .limit(1)
                .execute()
            )
            return _address_from_postgrest(response.data[0]) if response.data else None

        def _sqlite() -> Optional[CustomerAddress]:
            row = self.sqlite.execute(
                _SQLITE_ADDRESS_SELECT
                + " WHERE a.customer_id = ? AND a.is_primary = 1 ORDER BY a.id LIMIT 1",
                (customer_id,),
            ).fetchone()
            return _address_from_sqlite(row) if row else None

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_primary_address (addresses)",
        )
