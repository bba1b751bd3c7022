"""
Business Logic Services Package.

Services depend on the Repository layer for data access.  The
``create_services()`` factory wires every repository and service
together, returning a typed dict that the application layer can consume
without knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from teller.config import AppConfig
from teller.database import DatabaseManager
from teller.logger import get_logger
from teller.repositories.audit_repository import AuditRepository
from teller.repositories.card_repository import CardRepository
from teller.repositories.cashier_repository import CashierRepository
from teller.repositories.customer_repository import CustomerRepository
from teller.repositories.location_repository import LocationRepository
from teller.services.address_hierarchy import AddressHierarchyService
from teller.services.audit_service import AuditService
from teller.services.card_service import CardService
from teller.services.customer_detail import CustomerDetailService
from teller.services.customer_search import CustomerSearchService
from teller.services.online_mode import BrokerHealthProbe, OnlineModeService, Probe
from teller.services.teller_workflow import TellerWorkflowService
from teller.utils.performance import InMemoryMetricsSink, MetricsSink


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    # --- Domain ---
    customer_search_service: CustomerSearchService
    customer_detail_service: CustomerDetailService
    card_service: CardService
    address_hierarchy_service: AddressHierarchyService

    # --- Cross-cutting ---
    audit_service: AuditService
    online_mode_service: OnlineModeService
    metrics: MetricsSink

    # --- Facade ---
    teller_workflow_service: TellerWorkflowService

    # --- Session support ---
    cashier_repository: CashierRepository


def create_services(
    db: DatabaseManager,
    config: AppConfig,
    metrics: Optional[MetricsSink] = None,
    registry_probe: Optional[Probe] = None,
    broker_probe: Optional[Probe] = None,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    entry point calls this once at startup.

    Args:
        db: Initialised DatabaseManager.
        config: Application configuration.
        metrics: Metrics sink; defaults to an in-memory sink using the
            configured thresholds.
        registry_probe: Overrides ``db.ping`` as the registry health probe.
        broker_probe: Overrides the HTTP broker health probe.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("services")

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    customer_repo = CustomerRepository(db=db, logger=logger)
    location_repo = LocationRepository(db=db, logger=logger)
    card_repo = CardRepository(db=db, logger=logger)
    audit_repo = AuditRepository(db=db, logger=logger)
    cashier_repo = CashierRepository(db=db, logger=logger)

    # ------------------------------------------------------------------
    # 2. Leaf services
    # ------------------------------------------------------------------
    search_service = CustomerSearchService(
        customer_repo=customer_repo,
        logger=logger,
        max_workers=config.SEARCH_ENRICHMENT_WORKERS,
    )
    card_service = CardService(
        card_repo=card_repo,
        customer_repo=customer_repo,
        logger=logger,
        issuer_name=config.CARD_ISSUER_NAME,
    )
    detail_service = CustomerDetailService(
        customer_repo=customer_repo, card_service=card_service, logger=logger,
    )
    address_service = AddressHierarchyService(location_repo=location_repo, logger=logger)
    audit_service = AuditService(
        audit_repo=audit_repo,
        logger=logger,
        history_limit=config.AUDIT_HISTORY_LIMIT,
    )
    online_mode_service = OnlineModeService(
        registry_probe=registry_probe or db.ping,
        broker_probe=broker_probe or BrokerHealthProbe(
            url=config.BROKER_HEALTH_URL,
            timeout=config.BROKER_HEALTH_TIMEOUT_S,
            logger=logger,
        ),
        logger=logger,
    )
    metrics_sink: MetricsSink = (
        metrics if metrics is not None
        else InMemoryMetricsSink(config.PERFORMANCE_THRESHOLDS_MS)
    )

    # ------------------------------------------------------------------
    # 3. Facade
    # ------------------------------------------------------------------
    workflow_service = TellerWorkflowService(
        search_service=search_service,
        detail_service=detail_service,
        card_service=card_service,
        audit_service=audit_service,
        online_mode_service=online_mode_service,
        address_service=address_service,
        metrics=metrics_sink,
        logger=logger,
        min_search_filters=config.MIN_SEARCH_FILTERS,
    )

    return ServiceContainer(
        customer_search_service=search_service,
        customer_detail_service=detail_service,
        card_service=card_service,
        address_hierarchy_service=address_service,
        audit_service=audit_service,
        online_mode_service=online_mode_service,
        metrics=metrics_sink,
        teller_workflow_service=workflow_service,
        cashier_repository=cashier_repo,
    )
