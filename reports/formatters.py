"""
Display and export formatters.
Deterministic string formatting for numbers, currency, percentages and dates.
"""

import math
import numpy as np
from datetime import datetime
from typing import Optional, Union


class FormatterError(Exception):
    """Raised when formatter input validation fails."""
    pass


Number = Union[int, float]


def _require_number(value: Number, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise FormatterError(f"{label} must be numeric, got {type(value)}")

    if not math.isfinite(value):
        raise FormatterError(f"{label} must be finite, got {value}")


def format_plain_number(value: Optional[Number]) -> str:
    """
    Format a number as plain decimal text for machine-readable exports.

    No grouping, no currency symbol, no exponent. Integral values drop
    the fractional part; other values use the shortest round-trip digits.

    Args:
        value: Number to format (None gives an empty string)

    Returns:
        Formatted string (e.g., "1234.5", "100", "-0.0001")
    """
    if value is None:
        return ""

    _require_number(value, "Export value")

    if isinstance(value, (int, np.integer)):
        return str(int(value))

    if float(value).is_integer():
        return str(int(value))

    return np.format_float_positional(float(value), trim='-')


def format_export_datetime(value: datetime) -> str:
    """
    Format a timestamp as sortable "YYYY-MM-DD HH:MM:SS".

    Uses the literal wall-clock value; no timezone conversion.
    """
    if not isinstance(value, datetime):
        raise FormatterError(f"Expected datetime, got {type(value)}")

    return value.strftime('%Y-%m-%d %H:%M:%S')


def format_grouped(value: Number, max_fraction_digits: int = 3) -> str:
    """
    Format with thousands separators and up to max_fraction_digits decimals.

    Trailing fractional zeros are dropped: 1234.5 -> "1,234.5", 1000 -> "1,000".
    """
    _require_number(value, "Display value")

    text = f"{value:,.{max_fraction_digits}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')

    if text in ('-0', ''):
        text = '0'

    return text


def format_currency(value: Number) -> str:
    """
    Format a dollar amount for display.

    Args:
        value: Dollar amount

    Returns:
        Formatted currency string (e.g., "$1,234.567", "-$12")
    """
    _require_number(value, "Currency value")

    sign = "-" if value < 0 else ""
    return f"{sign}${format_grouped(abs(value))}"


def format_signed_currency(value: Number) -> str:
    """
    Format a profit/loss amount with explicit sign and 2 decimals.

    Returns:
        "+$1,234.50" for gains (and zero), "-$12.00" for losses
    """
    _require_number(value, "Currency value")

    sign = "+" if value >= 0 else "-"
    return f"{sign}${abs(value):,.2f}"


def format_percent_points(value: Number, decimal_places: int = 2) -> str:
    """
    Format a value already expressed in percent points.

    Args:
        value: Percentage (8.45 = 8.45%)
        decimal_places: Number of decimal places

    Returns:
        Formatted percentage string (e.g., "8.45%")
    """
    _require_number(value, "Percentage value")
    return f"{value:.{decimal_places}f}%"


def format_signed_percent(value: Number, decimal_places: int = 2) -> str:
    """Format percent points with a leading "+" for non-negative values."""
    _require_number(value, "Percentage value")

    prefix = "+" if value >= 0 else ""
    return f"{prefix}{value:.{decimal_places}f}%"


def format_amount(value: Number, decimal_places: int = 8) -> str:
    """Format an asset quantity with fixed precision (e.g., "0.50000000")."""
    _require_number(value, "Amount")
    return f"{value:.{decimal_places}f}"


def format_ratio(value: Number) -> str:
    """Format a ratio with 2 decimals (e.g., "1.25")."""
    _require_number(value, "Ratio")
    return f"{value:.2f}"


def format_date_display(value: datetime) -> str:
    """
    Format a date as "Mon DD, YYYY" for tables.

    Returns:
        Formatted date string (e.g., "Jul 05, 2025")
    """
    if not isinstance(value, datetime):
        raise FormatterError(f"Expected datetime, got {type(value)}")

    return value.strftime('%b %d, %Y')


def format_long_date(value: datetime) -> str:
    """Format as "Month DD, YYYY" (e.g., "July 05, 2025")."""
    if not isinstance(value, datetime):
        raise FormatterError(f"Expected datetime, got {type(value)}")

    return value.strftime('%B %d, %Y')


def format_time(value: datetime) -> str:
    """Format as "HH:MM:SS"."""
    if not isinstance(value, datetime):
        raise FormatterError(f"Expected datetime, got {type(value)}")

    return value.strftime('%H:%M:%S')


def format_generated_timestamp(value: datetime) -> str:
    """Format a generation timestamp (e.g., "July 05, 2025 14:03:22")."""
    return f"{format_long_date(value)} {format_time(value)}"
