"""
Card Repository.

Reads payment-card rows, including the raw PAN.  The rows it returns
must only ever be consumed by :class:`~teller.services.card_service.CardService`,
which converts them into display-safe ``CardView`` objects.
"""

from __future__ import annotations

from typing import Optional

from teller.database import DatabaseManager
from teller.logger import StructuredLogger
from teller.models.card import Card
from teller.models.enums import CardStatus
from teller.repositories.base_repository import BaseRepository


class CardRepository(BaseRepository):
    """Read-only access to the ``cards`` table."""

    TABLE = "cards"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def find_by_customer(self, customer_id: str) -> list[Card]:
        def _supabase() -> list[Card]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("customer_id", customer_id)
                .order("id")
                .execute()
            )
            return [Card(**row) for row in response.data]

        def _sqlite() -> list[Card]:
            rows = self.sqlite.execute(
                f"SELECT * FROM {self.TABLE} WHERE customer_id = ? ORDER BY id",
                (customer_id,),
            ).fetchall()
            return [Card(**dict(row)) for row in rows]

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_by_customer (cards)",
        )

    def find_by_id(self, card_id: str) -> Optional[Card]:
        def _supabase() -> Optional[Card]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("id", card_id)
                .limit(1)
                .execute()
            )
            return Card(**response.data[0]) if response.data else None

        def _sqlite() -> Optional[Card]:
            row = self.sqlite.execute(
                f"SELECT * FROM {self.TABLE} WHERE id = ?", (card_id,)
            ).fetchone()
            return Card(**dict(row)) if row else None

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_by_id (cards)",
        )

    def count_active(self, customer_id: str) -> int:
        """Number of the customer's cards whose registry status is ``active``."""
        def _supabase() -> int:
            response = (
                self.supabase.table(self.TABLE)
                .select("id", count="exact")
                .eq("customer_id", customer_id)
                .eq("status", str(CardStatus.ACTIVE))
                .execute()
            )
            return response.count or 0

        def _sqlite() -> int:
            row = self.sqlite.execute(
                f"SELECT COUNT(*) AS cnt FROM {self.TABLE} "
                "WHERE customer_id = ? AND status = ?",
                (customer_id, str(CardStatus.ACTIVE)),
            ).fetchone()
            return int(row["cnt"]) if row else 0

        return self._execute_query(
            _supabase, _sqlite, operation_name="count_active (cards)",
        )
