from __future__ import annotations

"""
Data Models Package.

Re-exports the Pydantic models for short imports:
    from teller.models import Customer, CardView, CustomerSearchFilters
    from teller.models import CardStatus, CustomerStatus
"""

from teller.models.enums import (
    AuditActionType,
    CardBrand,
    CardDisplayStatus,
    CardStatus,
    CardType,
    CashierRole,
    CustomerStatus,
    GovernmentIdType,
    PhoneType,
    SystemStatus,
)
from teller.models.audit_models import AuditLogRequest, AuditLogResult, SearchAuditLogEntry
from teller.models.card import Card, CardValidationResult, CardView
from teller.models.cashier import Cashier
from teller.models.customer import (
    Customer,
    CustomerAddress,
    CustomerDetail,
    GovernmentId,
    Phone,
)
from teller.models.health import SystemHealthStatus
from teller.models.location import Municipality, Neighborhood, State
from teller.models.search_models import (
    CustomerSearchFilters,
    CustomerSearchResponse,
    CustomerSearchResult,
    FieldError,
    ValidationResult,
)
from teller.models.service_models import ServiceResult, UserFeedbackMessage

__all__ = [
    "AuditActionType",
    "AuditLogRequest",
    "AuditLogResult",
    "Card",
    "CardBrand",
    "CardDisplayStatus",
    "CardStatus",
    "CardType",
    "CardValidationResult",
    "CardView",
    "Cashier",
    "CashierRole",
    "Customer",
    "CustomerAddress",
    "CustomerDetail",
    "CustomerSearchFilters",
    "CustomerSearchResponse",
    "CustomerSearchResult",
    "CustomerStatus",
    "FieldError",
    "GovernmentId",
    "GovernmentIdType",
    "Municipality",
    "Neighborhood",
    "Phone",
    "PhoneType",
    "SearchAuditLogEntry",
    "ServiceResult",
    "State",
    "SystemHealthStatus",
    "SystemStatus",
    "UserFeedbackMessage",
    "ValidationResult",
]
