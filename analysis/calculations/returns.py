"""
Returns calculation utilities.
Pure functions for per-period simple returns over a valuation series.
"""

import numpy as np
from typing import Sequence


class ReturnsError(Exception):
    """Raised when returns calculation fails."""
    pass


def period_returns(values: Sequence[float]) -> np.ndarray:
    """
    Calculate simple returns between consecutive valuations.

    Formula: r_i = (V_i - V_{i-1}) / V_{i-1}, with r_i = 0 when V_{i-1} <= 0

    Args:
        values: Portfolio values in chronological order

    Returns:
        Numpy array of returns (length = len(values) - 1, empty for < 2 values)

    Raises:
        ReturnsError: If values contain NaN or infinite entries

    Example:
        values = [100, 110, 0, 50]
        Returns: [0.10, -1.0, 0.0]  (last is 0: previous value was 0)
    """
    if len(values) < 2:
        return np.array([], dtype=float)

    values_array = np.asarray(values, dtype=float)

    if not np.all(np.isfinite(values_array)):
        raise ReturnsError("NaN or infinite values not allowed")

    previous = values_array[:-1]
    current = values_array[1:]

    returns = np.zeros_like(previous)
    valid = previous > 0
    returns[valid] = (current[valid] - previous[valid]) / previous[valid]

    return returns


def periodic_risk_free_rate(annual_rate: float, periods_per_year: int) -> float:
    """
    Convert an annual risk-free rate to a per-period rate.

    Args:
        annual_rate: Annual rate as decimal (0.05 = 5%)
        periods_per_year: Observation periods per year (365 for daily)

    Returns:
        Per-period rate as decimal
    """
    if periods_per_year <= 0:
        raise ReturnsError("periods_per_year must be positive")

    return annual_rate / periods_per_year
