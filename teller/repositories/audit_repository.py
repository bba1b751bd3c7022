"""
Search Audit Repository.

Append-only storage for ``search_audit_logs``.

**No ``update()`` or ``delete()`` method.**  Audit entries are immutable
once written; corrections are made by appending a new entry.
"""

from __future__ import annotations

import json

from teller.database import DatabaseManager
from teller.exceptions import AuditWriteError
from teller.logger import StructuredLogger
from teller.models.audit_models import SearchAuditLogEntry
from teller.repositories.base_repository import BaseRepository


class AuditRepository(BaseRepository):
    """Data access layer for the search audit trail."""

    TABLE = "search_audit_logs"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def append(self, entry: SearchAuditLogEntry) -> SearchAuditLogEntry:
        """Persist *entry* to the active source.

        Raises:
            AuditWriteError: If the entry could not be written.
        """
        payload = entry.model_dump(mode="json")
        try:
            if self._db.is_online:
                self.supabase.table(self.TABLE).insert(payload).execute()
            else:
                with self._db.write_lock:
                    self.sqlite.execute(
                        f"""
                        INSERT INTO {self.TABLE} (
                            id, cashier_id, search_timestamp, search_criteria,
                            results_count, selected_customer_id, action_type
                        ) VALUES (?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            payload["id"],
                            payload["cashier_id"],
                            entry.search_timestamp.isoformat(timespec="microseconds"),
                            json.dumps(payload["search_criteria"], ensure_ascii=False),
                            payload["results_count"],
                            payload["selected_customer_id"],
                            payload["action_type"],
                        ),
                    )
                    self.sqlite.commit()
        except Exception as exc:
            self._logger.error("Failed to append audit entry %s: %s", entry.id, exc)
            raise AuditWriteError(f"Failed to append audit entry {entry.id}") from exc

        return entry

    def list_by_cashier(self, cashier_id: str, limit: int = 100) -> list[SearchAuditLogEntry]:
        """Entries of one cashier, newest first, at most *limit*."""
        def _supabase() -> list[SearchAuditLogEntry]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("cashier_id", cashier_id)
                .order("search_timestamp", desc=True)
                .limit(limit)
                .execute()
            )
            return [SearchAuditLogEntry(**row) for row in response.data]

        def _sqlite() -> list[SearchAuditLogEntry]:
            rows = self.sqlite.execute(
                f"SELECT * FROM {self.TABLE} WHERE cashier_id = ? "
                "ORDER BY search_timestamp DESC LIMIT ?",
                (cashier_id, limit),
            ).fetchall()
            entries: list[SearchAuditLogEntry] = []
            for row in rows:
                data = dict(row)
                data["search_criteria"] = json.loads(data["search_criteria"] or "{}")
                entries.append(SearchAuditLogEntry(**data))
            return entries

        return self._execute_query(
            _supabase, _sqlite, operation_name="list_by_cashier (search_audit_logs)",
        )
