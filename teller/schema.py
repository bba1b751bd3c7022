"""
Centralized SQLite Schema Initialization.

Defines the canonical schema of the local registry mirror and provides a
single entry-point -- :func:`initialize_schema` -- that creates all
required tables idempotently.  A lightweight ``schema_version`` table
tracks applied migrations so that later schema changes can be rolled
forward without data loss.

The mirror has the same shape as the central registry tables queried via
PostgREST, so every repository query has an equivalent SQLite form.

Migration Strategy
~~~~~~~~~~~~~~~~~~
- **Fresh databases** (version 0): all tables are created in one shot from
  :data:`_TABLE_DEFINITIONS`.
- **Existing databases** (version N > 0): only incremental migrations
  registered in :data:`_MIGRATIONS` are executed.
- The entire upgrade (migrations + version bump) is wrapped in a single
  SQLite transaction.  On failure the database rolls back to version N
  and the next startup retries.

Usage::

    from teller.logger import get_logger
    from teller.schema import initialize_schema

    initialize_schema(db.sqlite, get_logger("schema"))
"""

from __future__ import annotations

import re
import sqlite3
from collections.abc import Callable

from teller.logger import StructuredLogger

__all__ = ["CURRENT_SCHEMA_VERSION", "initialize_schema"]

# ---------------------------------------------------------------------------
# Schema version -- bump this whenever a migration is added.
# ---------------------------------------------------------------------------
CURRENT_SCHEMA_VERSION: int = 2

_INDEX_DEFINITIONS: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_addresses_customer_id ON addresses(customer_id)",
    "CREATE INDEX IF NOT EXISTS idx_phones_customer_id ON phones(customer_id)",
    "CREATE INDEX IF NOT EXISTS idx_phones_number ON phones(number)",
    "CREATE INDEX IF NOT EXISTS idx_government_ids_customer_id ON government_ids(customer_id)",
    "CREATE INDEX IF NOT EXISTS idx_government_ids_type_number ON government_ids(type, number)",
    "CREATE INDEX IF NOT EXISTS idx_cards_customer_id ON cards(customer_id)",
    "CREATE INDEX IF NOT EXISTS idx_search_audit_logs_cashier ON search_audit_logs(cashier_id, search_timestamp)",
]

# ---------------------------------------------------------------------------
# DDL statements for every table in the local database.
# ---------------------------------------------------------------------------
_TABLE_DEFINITIONS: list[str] = [
    # -- single-row version tracker -------------------------------------------
    """
    CREATE TABLE IF NOT EXISTS schema_version (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # -- customers ------------------------------------------------------------
    """
    CREATE TABLE IF NOT EXISTS customers (
        id TEXT PRIMARY KEY,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        middle_name TEXT,
        status TEXT NOT NULL DEFAULT 'active'
               CHECK (status IN ('active', 'inactive')),
        registration_date TEXT
    )
    """,
    # -- location catalogue ---------------------------------------------------
    """
    CREATE TABLE IF NOT EXISTS states (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        code TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS municipalities (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        state_id TEXT NOT NULL REFERENCES states(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS neighborhoods (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        municipality_id TEXT NOT NULL REFERENCES municipalities(id)
    )
    """,
    # -- customer contact data ------------------------------------------------
    """
    CREATE TABLE IF NOT EXISTS addresses (
        id TEXT PRIMARY KEY,
        customer_id TEXT NOT NULL REFERENCES customers(id),
        street TEXT NOT NULL,
        postal_code TEXT,
        state_id TEXT NOT NULL REFERENCES states(id),
        municipality_id TEXT NOT NULL REFERENCES municipalities(id),
        neighborhood_id TEXT REFERENCES neighborhoods(id),
        is_primary INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS phones (
        id TEXT PRIMARY KEY,
        customer_id TEXT NOT NULL REFERENCES customers(id),
        number TEXT NOT NULL,
        type TEXT NOT NULL CHECK (type IN ('mobile', 'home', 'work'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS government_ids (
        id TEXT PRIMARY KEY,
        customer_id TEXT NOT NULL REFERENCES customers(id),
        type TEXT NOT NULL CHECK (type IN ('RFC', 'IFE', 'Passport')),
        number TEXT NOT NULL
    )
    """,
    # -- payment cards --------------------------------------------------------
    """
    CREATE TABLE IF NOT EXISTS cards (
        id TEXT PRIMARY KEY,
        customer_id TEXT NOT NULL REFERENCES customers(id),
        number TEXT NOT NULL,
        type TEXT NOT NULL CHECK (type IN ('debit', 'credit', 'prepaid')),
        status TEXT NOT NULL DEFAULT 'active'
               CHECK (status IN ('active', 'inactive', 'expired')),
        issuance_date TEXT,
        expiration_date TEXT
    )
    """,
    # -- tellers --------------------------------------------------------------
    """
    CREATE TABLE IF NOT EXISTS cashiers (
        id TEXT PRIMARY KEY,
        employee_id TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        role TEXT NOT NULL
             CHECK (role IN ('teller_window', 'junior_cashier', 'principal_teller')),
        is_active INTEGER NOT NULL DEFAULT 1
    )
    """,
    # -- append-only search audit trail ---------------------------------------
    """
    CREATE TABLE IF NOT EXISTS search_audit_logs (
        id TEXT PRIMARY KEY,
        cashier_id TEXT NOT NULL,
        search_timestamp TEXT NOT NULL,
        search_criteria TEXT NOT NULL DEFAULT '{}',
        results_count INTEGER NOT NULL DEFAULT 0,
        selected_customer_id TEXT,
        action_type TEXT NOT NULL
                    CHECK (action_type IN ('search', 'select', 'view_cards'))
    )
    """,
    *_INDEX_DEFINITIONS,
]


# ---------------------------------------------------------------------------
# Version tracking
# ---------------------------------------------------------------------------

_TABLE_NAME = re.compile(r"CREATE TABLE IF NOT EXISTS (\w+)")

# Tables that may be interpolated into PRAGMA queries.
_ALLOWED_TABLES: frozenset[str] = frozenset(
    match.group(1) for ddl in _TABLE_DEFINITIONS if (match := _TABLE_NAME.search(ddl))
)


def _read_version(conn: sqlite3.Connection) -> int:
    """Stored schema version, creating the tracker first; ``0`` when fresh."""
    conn.execute(_TABLE_DEFINITIONS[0])
    conn.commit()
    row = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()
    return row[0] if row is not None else 0


def _write_version(conn: sqlite3.Connection, version: int) -> None:
    """Upsert the tracker row.  Left uncommitted so it lands with the DDL."""
    conn.execute(
        """
        INSERT INTO schema_version (id, version) VALUES (1, ?)
        ON CONFLICT(id) DO UPDATE SET version = excluded.version,
                                      applied_at = CURRENT_TIMESTAMP
        """,
        (version,),
    )


def _column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    """Whether *table* has *column*.

    Raises:
        ValueError: *table* is not one of the mirror's tables.
    """
    if table not in _ALLOWED_TABLES:
        raise ValueError(f"Unknown mirror table: {table!r}")
    return any(row[1] == column for row in conn.execute(f"PRAGMA table_info({table})"))


# ---------------------------------------------------------------------------
# Migrations, keyed by the version they produce
# ---------------------------------------------------------------------------

def _migrate_to_v2(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """``states.code`` plus the lookup indexes behind the narrowing passes."""
    if not _column_exists(conn, "states", "code"):
        conn.execute("ALTER TABLE states ADD COLUMN code TEXT")
    for stmt in _INDEX_DEFINITIONS:
        conn.execute(stmt)
    logger.info("Added states.code and %d lookup indexes.", len(_INDEX_DEFINITIONS))


MigrationFunc = Callable[[sqlite3.Connection, StructuredLogger], None]

_MIGRATIONS: dict[int, MigrationFunc] = {
    2: _migrate_to_v2,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def initialize_schema(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Bring the mirror at *conn* up to :data:`CURRENT_SCHEMA_VERSION`.

    A fresh database gets every table and index in one pass; an older one
    runs each pending migration in ascending order.  Either way the DDL
    and the version bump commit together, or roll back together and
    re-raise.  Safe to call on every start-up.
    """
    current = _read_version(conn)
    if current >= CURRENT_SCHEMA_VERSION:
        logger.info("Registry mirror schema is current (version %d).", current)
        return

    try:
        if current == 0:
            for ddl in _TABLE_DEFINITIONS:
                conn.execute(ddl)
        else:
            for version in sorted(v for v in _MIGRATIONS if v > current):
                logger.info("Migrating registry mirror to version %d", version)
                _MIGRATIONS[version](conn, logger)
        _write_version(conn, CURRENT_SCHEMA_VERSION)
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        logger.error("Schema upgrade from version %d failed; rolled back.", current)
        raise

    logger.info(
        "Registry mirror schema upgraded from version %d to %d.",
        current, CURRENT_SCHEMA_VERSION,
    )
