"""
Cashier Model.

The authenticated teller operating the desk.  Authentication itself is
provided by the surrounding system; this model only carries identity.
"""

from __future__ import annotations

from pydantic import BaseModel

from teller.models.enums import CashierRole


class Cashier(BaseModel):
    id: str
    employee_id: str
    name: str
    role: CashierRole
    is_active: bool = True

    model_config = {"from_attributes": True}
