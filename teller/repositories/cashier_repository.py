"""
Cashier Repository.

Looks up teller identities so a session can be opened for them.
"""

from __future__ import annotations

from typing import Optional

from teller.database import DatabaseManager
from teller.logger import StructuredLogger
from teller.models.cashier import Cashier
from teller.repositories.base_repository import BaseRepository


class CashierRepository(BaseRepository):

    TABLE = "cashiers"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def find_by_employee_id(self, employee_id: str) -> Optional[Cashier]:
        def _supabase() -> Optional[Cashier]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("employee_id", employee_id)
                .limit(1)
                .execute()
            )
            return Cashier(**response.data[0]) if response.data else None

        def _sqlite() -> Optional[Cashier]:
            row = self.sqlite.execute(
                f"SELECT * FROM {self.TABLE} WHERE employee_id = ?", (employee_id,)
            ).fetchone()
            return Cashier(**dict(row)) if row else None

        return self._execute_query(
            _supabase, _sqlite, operation_name="find_by_employee_id (cashiers)",
        )
