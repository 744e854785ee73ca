"""
Drawdown calculation utilities.
Pure functions for maximum drawdown analysis of a valuation series.
"""

import numpy as np
from typing import Sequence


class DrawdownError(Exception):
    """Raised when drawdown calculation fails."""
    pass


def drawdown_series(values: Sequence[float]) -> np.ndarray:
    """
    Calculate the drawdown at every point against the running peak.

    Formula: dd_i = (peak_i - V_i) / peak_i, or 0 where peak_i <= 0

    Args:
        values: Portfolio values in chronological order

    Returns:
        Numpy array of drawdowns as non-negative decimals (0.25 = 25% below peak)

    Raises:
        DrawdownError: If values contain NaN or infinite entries
    """
    values_array = np.asarray(values, dtype=float)

    if values_array.size == 0:
        return np.array([], dtype=float)

    if not np.all(np.isfinite(values_array)):
        raise DrawdownError("NaN or infinite values not allowed")

    # Track running maximum (peak)
    running_max = np.maximum.accumulate(values_array)

    drawdowns = np.zeros_like(values_array)
    has_peak = running_max > 0
    drawdowns[has_peak] = (running_max[has_peak] - values_array[has_peak]) / running_max[has_peak]

    return drawdowns


def max_drawdown(values: Sequence[float]) -> float:
    """
    Largest peak-to-trough decline of a series.

    Args:
        values: Portfolio values in chronological order

    Returns:
        Maximum drawdown as decimal in [0, 1]; 0.0 for fewer than 2 values
    """
    if len(values) < 2:
        return 0.0

    drawdowns = drawdown_series(values)
    return float(np.clip(np.max(drawdowns), 0.0, 1.0))
