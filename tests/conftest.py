"""Pytest configuration and fixtures."""

import os

# Keep test runs from writing a rotating log file into the working directory.
os.environ.setdefault("LOG_FILE", "")

import sqlite3
from collections.abc import Iterator
from datetime import date

import pytest

from teller.config import AppConfig
from teller.database import DatabaseManager
from teller.logger import StructuredLogger
from teller.repositories.audit_repository import AuditRepository
from teller.repositories.card_repository import CardRepository
from teller.repositories.customer_repository import CustomerRepository
from teller.repositories.location_repository import LocationRepository
from teller.schema import initialize_schema
from teller.services import ServiceContainer, create_services
from teller.services.card_service import CardService
from teller.services.customer_search import CustomerSearchService
from teller.utils.performance import InMemoryMetricsSink

# ---------------------------------------------------------------------------
# Seed identifiers
# ---------------------------------------------------------------------------

CUST_ESQUIVEL = "c1000000-0000-4000-8000-000000000001"
CUST_JOSE = "c2000000-0000-4000-8000-000000000002"
CUST_GARCIA = "c3000000-0000-4000-8000-000000000003"
CUST_LOWERCASE = "c4000000-0000-4000-8000-000000000004"
CUST_INACTIVE = "c5000000-0000-4000-8000-000000000005"
CUST_NO_CARDS = "c6000000-0000-4000-8000-000000000006"

CARD_VISA_ACTIVE = "card-01"
CARD_EXPIRED = "card-02"
CARD_AMEX_INACTIVE = "card-03"
CARD_INACTIVE_OWNER = "card-04"
CARD_NO_EXPIRATION = "card-05"
CARD_SHORT_NUMBER = "card-06"
CARD_CURRENT_MONTH = "card-07"

FIXED_TODAY = date(2025, 6, 15)

_SEED: dict[str, list[tuple]] = {
    "states": [
        ("st-01", "Ciudad de México", "CDMX"),
        ("st-02", "Jalisco", "JAL"),
    ],
    "municipalities": [
        ("mu-01", "Cuauhtémoc", "st-01"),
        ("mu-02", "Benito Juárez", "st-01"),
        ("mu-03", "Guadalajara", "st-02"),
    ],
    "neighborhoods": [
        ("nb-01", "Juárez", "mu-01"),
        ("nb-02", "Roma Norte", "mu-01"),
        ("nb-03", "Del Valle", "mu-02"),
        ("nb-04", "Americana", "mu-03"),
    ],
    "customers": [
        (CUST_ESQUIVEL, "ESQUIVEL", "VELAZQUEZ", "ROMERO", "active", "2020-01-15"),
        (CUST_JOSE, "JOSE ESQUIVEL", "VELAZQUEZ MORA", None, "active", "2021-03-02"),
        (CUST_GARCIA, "ESQUIVEL", "GARCIA", "LOPEZ", "active", "2019-07-20"),
        (CUST_LOWERCASE, "esquivel", "velazquez", None, "active", "2022-11-30"),
        (CUST_INACTIVE, "ANA", "MARTINEZ", "SOTO", "inactive", "2018-05-05"),
        (CUST_NO_CARDS, "LUIS", "PEREZ", None, "active", None),
    ],
    "addresses": [
        ("ad-01", CUST_ESQUIVEL, "Av. Reforma 100", "06600", "st-01", "mu-01", "nb-01", 1),
        ("ad-02", CUST_ESQUIVEL, "Calle Durango 5", "06700", "st-01", "mu-01", "nb-02", 0),
        ("ad-03", CUST_JOSE, "Insurgentes Sur 200", "03100", "st-01", "mu-02", "nb-03", 1),
        ("ad-04", CUST_GARCIA, "Av. Chapultepec 50", "44160", "st-02", "mu-03", "nb-04", 1),
        ("ad-05", CUST_INACTIVE, "Calle Sin Colonia 1", None, "st-02", "mu-03", None, 1),
    ],
    "phones": [
        ("ph-01", CUST_ESQUIVEL, "5512345678", "mobile"),
        ("ph-02", CUST_JOSE, "5587654321", "home"),
        ("ph-03", CUST_GARCIA, "3311112222", "mobile"),
        ("ph-04", CUST_ESQUIVEL, "5500001111", "work"),
    ],
    "government_ids": [
        ("gi-01", CUST_ESQUIVEL, "RFC", "EUVE800101AB1"),
        ("gi-02", CUST_JOSE, "IFE", "IFE0000002"),
        ("gi-03", CUST_GARCIA, "Passport", "G12345678"),
        ("gi-04", CUST_GARCIA, "RFC", "EUGA850505CD2"),
    ],
    "cards": [
        (CARD_VISA_ACTIVE, CUST_ESQUIVEL, "4532123456789012", "debit", "active", "2022-01-10", "2030-12-31"),
        (CARD_EXPIRED, CUST_ESQUIVEL, "5412345678901234", "credit", "expired", "2016-01-10", "2020-01-31"),
        (CARD_AMEX_INACTIVE, CUST_ESQUIVEL, "371234567890123", "credit", "inactive", "2023-05-01", "2029-05-31"),
        (CARD_INACTIVE_OWNER, CUST_INACTIVE, "6011123456789012", "debit", "active", "2023-03-01", "2028-03-31"),
        (CARD_NO_EXPIRATION, CUST_JOSE, "4111111111111111", "prepaid", "active", "2024-02-01", None),
        (CARD_SHORT_NUMBER, CUST_JOSE, "123", "debit", "active", "2024-02-01", "2030-01-31"),
        (CARD_CURRENT_MONTH, CUST_GARCIA, "4000000000000002", "debit", "active", "2021-06-01", "2025-06-30"),
    ],
    "cashiers": [
        ("cash-01", "EMP001", "Ana López", "teller_window", 1),
        ("cash-02", "EMP002", "Pedro Ruiz", "junior_cashier", 0),
    ],
}


def seed_registry(conn: sqlite3.Connection) -> None:
    """Insert the reference registry used across the test suite."""
    for table, rows in _SEED.items():
        placeholders = ", ".join("?" for _ in rows[0])
        conn.executemany(f"INSERT INTO {table} VALUES ({placeholders})", rows)
    conn.commit()


class StubProbe:
    """Health probe with a switchable answer that counts its calls."""

    def __init__(self, healthy: bool = True) -> None:
        self.healthy = healthy
        self.calls = 0

    def __call__(self) -> bool:
        self.calls += 1
        return self.healthy


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def today() -> date:
    """Fixed reference date for expiration checks."""
    return FIXED_TODAY


@pytest.fixture
def logger() -> StructuredLogger:
    """Console-only structured logger."""
    return StructuredLogger(name="tests", log_file="")


@pytest.fixture
def db(logger: StructuredLogger) -> Iterator[DatabaseManager]:
    """In-memory registry mirror with the current schema, no Supabase client."""
    manager = DatabaseManager(
        supabase_url="",
        supabase_key="",
        sqlite_path=":memory:",
        logger=logger,
    )
    initialize_schema(manager.sqlite, logger)
    yield manager
    manager.close()


@pytest.fixture
def seeded_db(db: DatabaseManager) -> DatabaseManager:
    """Registry mirror populated with the reference customers and cards."""
    seed_registry(db.sqlite)
    return db


@pytest.fixture
def customer_repo(seeded_db: DatabaseManager, logger: StructuredLogger) -> CustomerRepository:
    return CustomerRepository(db=seeded_db, logger=logger)


@pytest.fixture
def location_repo(seeded_db: DatabaseManager, logger: StructuredLogger) -> LocationRepository:
    return LocationRepository(db=seeded_db, logger=logger)


@pytest.fixture
def card_repo(seeded_db: DatabaseManager, logger: StructuredLogger) -> CardRepository:
    return CardRepository(db=seeded_db, logger=logger)


@pytest.fixture
def audit_repo(seeded_db: DatabaseManager, logger: StructuredLogger) -> AuditRepository:
    return AuditRepository(db=seeded_db, logger=logger)


@pytest.fixture
def search_service(
    customer_repo: CustomerRepository, logger: StructuredLogger,
) -> CustomerSearchService:
    return CustomerSearchService(customer_repo=customer_repo, logger=logger)


@pytest.fixture
def card_service(
    card_repo: CardRepository,
    customer_repo: CustomerRepository,
    logger: StructuredLogger,
    today: date,
) -> CardService:
    return CardService(
        card_repo=card_repo,
        customer_repo=customer_repo,
        logger=logger,
        today=lambda: today,
    )


@pytest.fixture
def config() -> AppConfig:
    """Configuration that ignores any local .env file."""
    return AppConfig(_env_file=None, SUPABASE_URL="", BROKER_HEALTH_URL="", LOG_FILE="")


@pytest.fixture
def registry_probe() -> StubProbe:
    return StubProbe()


@pytest.fixture
def broker_probe() -> StubProbe:
    return StubProbe()


@pytest.fixture
def metrics(config: AppConfig) -> InMemoryMetricsSink:
    return InMemoryMetricsSink(config.PERFORMANCE_THRESHOLDS_MS)


@pytest.fixture
def services(
    seeded_db: DatabaseManager,
    config: AppConfig,
    metrics: InMemoryMetricsSink,
    registry_probe: StubProbe,
    broker_probe: StubProbe,
) -> ServiceContainer:
    """Fully wired service container over the seeded registry."""
    return create_services(
        db=seeded_db,
        config=config,
        metrics=metrics,
        registry_probe=registry_probe,
        broker_probe=broker_probe,
    )
