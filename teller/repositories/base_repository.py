"""
Base Repository.

Provides shared infrastructure for all repositories:
- DatabaseManager reference (Supabase + SQLite)
- Logger reference
- Convenience properties for accessing clients
- Single-source query execution with uniform error translation
"""

from __future__ import annotations

import sqlite3
from typing import Callable, TypeVar

from supabase import Client as SupabaseClient

from teller.database import DatabaseManager
from teller.exceptions import RegistryQueryError
from teller.logger import StructuredLogger

T = TypeVar("T")


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the Supabase client for registry queries."""
        return self._db.supabase

    @property
    def sqlite(self) -> sqlite3.Connection:
        """Returns the SQLite connection for the local mirror."""
        return self._db.sqlite

    def _execute_query(
        self,
        supabase_op: Callable[[], T],
        sqlite_op: Callable[[], T],
        *,
        operation_name: str,
    ) -> T:
        """Run a read against the active source and translate failures.

        Exactly one of the two callables runs: ``supabase_op`` when the
        registry client is configured, ``sqlite_op`` otherwise.  There is
        no fallback from one source to the other, so a request never mixes
        rows from both.

        Not-found is expressed by the callables themselves (``None`` or
        an empty collection).  Any exception raised while querying is
        logged and re-raised as :class:`RegistryQueryError` with the
        original chained.

        Parameters
        ----------
        supabase_op:
            Zero-argument callable that performs the PostgREST query.
        sqlite_op:
            Zero-argument callable that performs the SQLite query.
        operation_name:
            Label for log messages and the raised error, e.g.
            ``"find_by_id (customers)"``.
        """
        source = self._db.source
        try:
            if self._db.is_online:
                return supabase_op()
            return sqlite_op()
        except Exception as exc:
            self._logger.error(
                "Registry query %s failed on %s: %s", operation_name, source, exc,
            )
            raise RegistryQueryError(operation_name) from exc
