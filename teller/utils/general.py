"""Conversion of service payloads into JSON-safe structures."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel

__all__ = ["JsonValue", "convert_to_json_safe"]

JsonValue = Union[None, str, int, float, bool, list["JsonValue"], dict[str, "JsonValue"]]


def convert_to_json_safe(data: Any) -> JsonValue:
    """Recursively turn *data* into values ``json.dumps`` accepts unaided.

    Applied to audit search criteria before they are stored and to every
    CLI response before it is printed.

    - pydantic models are dumped first (field names, not aliases)
    - enum members become their value
    - ``date``/``datetime`` become ISO-8601 strings
    - non-finite floats become ``None``
    - sets are emitted as sorted lists so stored criteria are stable
    - anything else unrecognised (``UUID``, ``Path``) is stringified
    """
    if data is None or isinstance(data, bool):
        return data
    if isinstance(data, Enum):
        return convert_to_json_safe(data.value)
    if isinstance(data, (str, int)):
        return data
    if isinstance(data, float):
        return data if math.isfinite(data) else None
    if isinstance(data, date):
        return data.isoformat()
    if isinstance(data, BaseModel):
        return convert_to_json_safe(data.model_dump())
    if isinstance(data, Mapping):
        return {str(key): convert_to_json_safe(value) for key, value in data.items()}
    if isinstance(data, (set, frozenset)):
        return sorted((convert_to_json_safe(item) for item in data), key=str)
    if isinstance(data, (list, tuple)):
        return [convert_to_json_safe(item) for item in data]
    return str(data)
