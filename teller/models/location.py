"""
Address Hierarchy Models.

Static reference catalogue: state -> municipality -> neighborhood.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class State(BaseModel):
    id: str
    name: str
    code: Optional[str] = None


class Municipality(BaseModel):
    id: str
    name: str
    state_id: str


class Neighborhood(BaseModel):
    id: str
    name: str
    municipality_id: str
