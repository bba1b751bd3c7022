"""
Registry connections.

The teller desk reads the customer registry from exactly one source,
chosen when the :class:`DatabaseManager` is built:

- ``supabase``: the central registry (PostgreSQL behind PostgREST), used
  whenever a URL and key are configured.
- ``sqlite``: a local mirror with the same table shapes, used otherwise
  (development, tests, branch deployments without registry access).

The SQLite connection is opened in both modes.  Query logic lives in the
repositories; this module only owns connections.

Usage::

    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        sqlite_path=config.SQLITE_PATH,
        logger=get_logger("database"),
    )
"""

from __future__ import annotations

import sqlite3
import threading
from enum import StrEnum
from pathlib import Path
from typing import Optional, Union

from supabase import Client as SupabaseClient
from supabase import create_client

from teller.logger import StructuredLogger

_MIRROR_PRAGMAS: tuple[str, ...] = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA foreign_keys=ON",
    "PRAGMA busy_timeout=5000",
)


class RegistrySource(StrEnum):
    SUPABASE = "supabase"
    SQLITE = "sqlite"


def open_mirror(path: Union[Path, str]) -> sqlite3.Connection:
    """Open (creating if needed) the SQLite mirror with row access by name.

    Raises:
        PermissionError: The file or its directory is not writable.
    """
    try:
        conn = sqlite3.connect(str(path), check_same_thread=False)
    except sqlite3.OperationalError as exc:
        raise PermissionError(
            f"Cannot open the registry mirror at '{path}'. "
            "Check that the directory exists and is writable."
        ) from exc
    conn.row_factory = sqlite3.Row
    for pragma in _MIRROR_PRAGMAS:
        conn.execute(pragma)
    return conn


class DatabaseManager:
    """Owns the optional Supabase client and the SQLite mirror connection.

    Args:
        supabase_url: Registry project URL; empty selects the mirror.
        supabase_key: Registry anon key; empty selects the mirror.
        sqlite_path: Mirror file path, or ``":memory:"``.
        logger: Structured logger for connection events.
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        sqlite_path: Union[Path, str],
        logger: StructuredLogger,
    ) -> None:
        self._logger = logger
        self._write_lock = threading.RLock()
        self._closed = False
        self._supabase: Optional[SupabaseClient] = self._connect_registry(
            supabase_url, supabase_key,
        )
        self._sqlite_conn = open_mirror(sqlite_path)
        self._logger.info(
            "Registry source: %s (mirror at %s)", self.source, sqlite_path,
        )

    def _connect_registry(self, url: str, key: str) -> Optional[SupabaseClient]:
        if not (url and key):
            self._logger.warning("Registry credentials not configured; reading the local mirror.")
            return None
        try:
            return create_client(url, key)
        except Exception as exc:
            # Bad URL or key format: the desk keeps working on the mirror.
            self._logger.error(
                "Could not create the registry client (%s); reading the local mirror.",
                exc,
                exc_info=True,
            )
            return None

    @property
    def source(self) -> RegistrySource:
        return RegistrySource.SUPABASE if self._supabase is not None else RegistrySource.SQLITE

    @property
    def is_online(self) -> bool:
        """``True`` when the central registry is the active source."""
        return self._supabase is not None

    @property
    def supabase(self) -> SupabaseClient:
        if self._supabase is None:
            raise RuntimeError("No registry client; queries are served by the local mirror.")
        return self._supabase

    @property
    def sqlite(self) -> sqlite3.Connection:
        return self._sqlite_conn

    @property
    def write_lock(self) -> threading.RLock:
        """Held around every SQLite write (audit inserts, schema changes)."""
        return self._write_lock

    def ping(self) -> bool:
        """Registry probe for the online-mode gate; never raises."""
        try:
            if self._supabase is not None:
                self._supabase.table("customers").select("id").limit(1).execute()
            else:
                with self._write_lock:
                    self._sqlite_conn.execute("SELECT 1").fetchone()
        except Exception as exc:
            self._logger.warning("Registry ping failed on %s: %s", self.source, exc)
            return False
        return True

    def close(self) -> None:
        """Close the mirror connection.  Idempotent."""
        with self._write_lock:
            if self._closed:
                return
            self._closed = True
            self._sqlite_conn.close()
            self._logger.info("Registry mirror connection closed.")
