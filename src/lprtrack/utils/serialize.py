"""
Serialization utilities for lprtrack.

Engine results are dataclasses holding dates and enums. This module turns
them into plain JSON-ready values so results can cross an API boundary:
- date -> "YYYY-MM-DD"
- Enum -> its value
- dataclass -> dict (recursively)
- numpy scalars from analytics frames -> int/float
"""

from dataclasses import fields, is_dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List

import numpy as np

from lprtrack.utils.dates import format_date


def to_plain(value: Any) -> Any:
    """
    Recursively convert a result value into JSON-serializable primitives.

    Args:
        value: Dataclass, enum, date, mapping, sequence or scalar.

    Returns:
        A structure made only of dict, list, str, int, float, bool and None.

    Example:
        >>> to_plain(Priority.HIGH)
        'high'
        >>> to_plain({"due": date(2025, 4, 15)})
        {'due': '2025-04-15'}
    """
    if value is None or isinstance(value, (bool, str)):
        return value

    if isinstance(value, Enum):
        return value.value

    if isinstance(value, date):
        return format_date(value)

    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}

    if isinstance(value, dict):
        return {str(to_plain(k)): to_plain(v) for k, v in value.items()}

    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value) if isinstance(value, (set, frozenset)) else value
        return [to_plain(v) for v in items]

    if isinstance(value, np.integer):
        return int(value)

    if isinstance(value, np.floating):
        return float(value)

    if isinstance(value, np.ndarray):
        return [to_plain(v) for v in value.tolist()]

    return value


def records_to_dicts(records: List[Any]) -> List[Dict[str, Any]]:
    """Convert a list of result dataclasses for DataFrame construction."""
    return [to_plain(record) for record in records]
