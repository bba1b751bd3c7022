"""
Repository Layer Package.

Provides read access to the customer registry over Supabase (PostgREST)
or the local SQLite mirror, plus the append-only search audit trail.
All database operations flow through repositories; services never
access db.supabase or db.sqlite directly.

Usage:
    from teller.repositories.customer_repository import CustomerRepository
    from teller.repositories.card_repository import CardRepository
"""

from teller.repositories.base_repository import BaseRepository
from teller.repositories.audit_repository import AuditRepository
from teller.repositories.card_repository import CardRepository
from teller.repositories.cashier_repository import CashierRepository
from teller.repositories.customer_repository import CustomerRepository
from teller.repositories.location_repository import LocationRepository

__all__ = [
    "AuditRepository",
    "BaseRepository",
    "CardRepository",
    "CashierRepository",
    "CustomerRepository",
    "LocationRepository",
]
