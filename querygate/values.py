"""
Normalisation of driver values into JSON-like variants.

Column values coming back from the store are genuinely polymorphic: JSONB
cells hold scalars, arrays or small objects, and plain columns hold
timestamps, numerics and text. Everything crossing the row-result boundary
is reduced to ``JSONValue`` so callers can branch on shape alone.

``numeric`` values stay exact: integral ones become ``int``, everything else
(fractions, ``NaN``, ``Infinity``) becomes the decimal string, as the
PostgreSQL text protocol renders it.
"""

from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Union

JSONScalar = Union[str, int, float, bool, None]
JSONValue = Union[JSONScalar, List["JSONValue"], Dict[str, "JSONValue"]]


def to_json_value(value: Any) -> JSONValue:
    """Convert a single driver value into a ``JSONValue``."""
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return str(value)
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, dt.timedelta):
        return value.total_seconds()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, dict):
        return {str(k): to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json_value(v) for v in value]
    return str(value)


def normalize_row(row: Dict[str, Any]) -> Dict[str, JSONValue]:
    return {str(k): to_json_value(v) for k, v in row.items()}
