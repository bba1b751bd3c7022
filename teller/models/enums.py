"""
Shared Enumerations for Teller Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so code like ``if status == 'active'`` continues to work.
"""

from __future__ import annotations
from enum import StrEnum


class CustomerStatus(StrEnum):
    """Registry status of a customer.

    Inactive customers remain viewable but may not progress to payment.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"


class PhoneType(StrEnum):
    MOBILE = "mobile"
    HOME = "home"
    WORK = "work"


class GovernmentIdType(StrEnum):
    """Identification documents usable as alternate lookup keys."""

    RFC = "RFC"
    IFE = "IFE"
    PASSPORT = "Passport"


class CardType(StrEnum):
    DEBIT = "debit"
    CREDIT = "credit"
    PREPAID = "prepaid"


class CardStatus(StrEnum):
    """Card status as stored by the registry."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


class CardDisplayStatus(StrEnum):
    """Card status as presented to the teller.

    Registry ``expired`` is shown as ``blocked``.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"
    BLOCKED = "blocked"


class CardBrand(StrEnum):
    """Card network inferred from the IIN.  Display only."""

    VISA = "Visa"
    MASTERCARD = "MasterCard"
    AMEX = "American Express"
    DISCOVER = "Discover"
    DINERS = "Diners Club"
    UNKNOWN = "Unknown"


class AuditActionType(StrEnum):
    SEARCH = "search"
    SELECT = "select"
    VIEW_CARDS = "view_cards"


class CashierRole(StrEnum):
    TELLER_WINDOW = "teller_window"
    JUNIOR_CASHIER = "junior_cashier"
    PRINCIPAL_TELLER = "principal_teller"


class SystemStatus(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"
