"""
Shared utility functions for the reporting layer.
"""

import json
import numbers
from datetime import datetime, date
from decimal import Decimal
from typing import Any

import numpy as np
import pandas as pd


def make_json_serializable(obj: Any) -> Any:
    """
    Recursively convert an object to be JSON serializable.
    Handles numpy types, pandas types, Decimal and datetime objects.

    Args:
        obj: Any Python object

    Returns:
        JSON-serializable version of the object
    """
    if obj is None:
        return None

    # numpy scalars come back from pandas reductions
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return [make_json_serializable(item) for item in obj.tolist()]
    if isinstance(obj, np.bool_):
        return bool(obj)

    if isinstance(obj, pd.Timestamp):
        return obj.isoformat()
    if isinstance(obj, pd.Timedelta):
        return str(obj)

    if isinstance(obj, Decimal):
        return float(obj)

    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, date):
        return obj.strftime('%Y-%m-%d')

    if isinstance(obj, dict):
        return {str(k): make_json_serializable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set)):
        return [make_json_serializable(item) for item in obj]

    if isinstance(obj, float) and obj != obj:
        # NaN is not valid JSON
        return None

    if isinstance(obj, (str, int, float, bool)):
        return obj

    try:
        return str(obj)
    except Exception:
        return "<non-serializable>"


def safe_json_dumps(obj: Any, indent: int = 2) -> str:
    """
    Safely convert an object to a JSON string.

    Args:
        obj: Any Python object
        indent: JSON indentation level

    Returns:
        JSON string representation
    """
    try:
        return json.dumps(make_json_serializable(obj), indent=indent)
    except (TypeError, ValueError) as e:
        return json.dumps({"error": f"Could not serialize data: {str(e)}"})


def normalize_date_value(value: Any) -> Any:
    """
    Unwrap warehouse date values into plain ISO strings.

    BigQuery may hand back DATE columns as wrapper objects exposing
    ``.value`` (or ``{"value": ...}`` once serialized), or as native
    ``date``/``datetime`` instances. Anything else is returned as-is.
    """
    if value is None or isinstance(value, str):
        return value

    if isinstance(value, dict) and 'value' in value:
        return normalize_date_value(value['value'])

    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.strftime('%Y-%m-%d')

    wrapped = getattr(value, 'value', None)
    if wrapped is not None:
        return normalize_date_value(wrapped)

    return value


def is_number(value: Any) -> bool:
    """True for real numeric values; bools do not count."""
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def to_number(value: Any) -> float:
    """Numeric value of ``value``, with missing and non-numeric values as zero."""
    if not is_number(value):
        return 0
    if isinstance(value, Decimal):
        return float(value)
    if value != value:
        return 0
    return value


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0 when the denominator is zero."""
    return numerator / denominator if denominator else 0
