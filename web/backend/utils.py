#!/usr/bin/env python3
"""
Conversion helpers for API responses.
"""

from decimal import Decimal
from typing import Optional, Any
from datetime import datetime


def credits_to_float(value: Optional[Any], default: float = 0.0) -> float:
    """
    Convert a credit amount (Decimal from Numeric columns) to a JSON float.

    Args:
        value: Decimal, int, float, or None.
        default: Returned for None or unconvertible values.

    Returns:
        Float rounded to cents.
    """
    if value is None:
        return default

    try:
        return round(float(Decimal(str(value))), 2)
    except (ArithmeticError, ValueError, TypeError):
        return default


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Safely convert datetime to ISO format string.

    Args:
        dt: Datetime object.

    Returns:
        ISO format string or None.
    """
    if dt is None:
        return None
    return dt.isoformat()
