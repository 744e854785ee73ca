"""
Historical Value-at-Risk.
Pure function over the observed return distribution, no distributional fit.
"""

import math
import numpy as np
from typing import Sequence


class ValueAtRiskError(Exception):
    """Raised when VaR inputs are invalid."""
    pass


def historical_var(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Historical VaR as a loss magnitude.

    Sorts returns ascending and takes the one at index floor(n * (1 - confidence)).
    The absolute value is reported, capped at 1.0 (100%).

    Args:
        returns: Per-period simple returns
        confidence: Confidence level (0.95 = 95%)

    Returns:
        VaR as decimal in [0, 1]; 0.0 for empty input

    Raises:
        ValueAtRiskError: If confidence is outside (0, 1) or returns are not finite
    """
    if not 0 < confidence < 1:
        raise ValueAtRiskError(f"Confidence must be between 0 and 1, got {confidence}")

    returns_array = np.asarray(returns, dtype=float)

    if returns_array.size == 0:
        return 0.0

    if not np.all(np.isfinite(returns_array)):
        raise ValueAtRiskError("NaN or infinite returns not allowed")

    sorted_returns = np.sort(returns_array)
    # round() absorbs float error in n * (1 - confidence), e.g. 20 * 0.05
    index = math.floor(round(sorted_returns.size * (1 - confidence), 9))
    index = min(index, sorted_returns.size - 1)

    return float(min(abs(sorted_returns[index]), 1.0))
