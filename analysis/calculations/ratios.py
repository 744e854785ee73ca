"""
Risk-adjusted return ratios.
Pure functions for Sharpe and Sortino ratios over per-period returns.

Both ratios scale numerator and denominator by sqrt(periods_per_year). The
factor cancels, so the result is the per-period (non-annualized) ratio. This
matches the figures already published by the portfolio dashboard and must not
change without finance sign-off.
"""

import math
import numpy as np
from typing import Sequence

from analysis.calculations.returns import periodic_risk_free_rate


class RatioError(Exception):
    """Raised when ratio inputs are invalid."""
    pass


def _as_returns_array(returns: Sequence[float]) -> np.ndarray:
    returns_array = np.asarray(returns, dtype=float)

    if np.any(~np.isfinite(returns_array)):
        raise RatioError("NaN or infinite returns not allowed")

    return returns_array


def sharpe_ratio(
    returns: Sequence[float],
    risk_free_rate: float = 0.05,
    periods_per_year: int = 365
) -> float:
    """
    Calculate the Sharpe ratio of a return series.

    Formula: ((mean(r) - rf_p) * √N) / (std(r) * √N)
    where rf_p = risk_free_rate / N and std is the population deviation.

    Args:
        returns: Per-period simple returns
        risk_free_rate: Annual risk-free rate as decimal
        periods_per_year: Periods per year (N)

    Returns:
        Sharpe ratio, 0.0 for empty input or zero deviation
    """
    returns_array = _as_returns_array(returns)

    if returns_array.size == 0:
        return 0.0

    periodic_rf = periodic_risk_free_rate(risk_free_rate, periods_per_year)
    scale = math.sqrt(periods_per_year)

    mean_return = float(np.mean(returns_array))
    std_dev = float(np.std(returns_array))  # ddof=0

    if std_dev <= 0:
        return 0.0

    return ((mean_return - periodic_rf) * scale) / (std_dev * scale)


def downside_deviation(returns: Sequence[float], target: float) -> float:
    """
    Root-mean-square shortfall of returns below target.

    Only returns strictly below target are included, and the mean is taken
    over those returns alone.

    Args:
        returns: Per-period simple returns
        target: Minimum acceptable per-period return

    Returns:
        Downside deviation, 0.0 when no return falls below target
    """
    returns_array = _as_returns_array(returns)
    downside = returns_array[returns_array < target]

    if downside.size == 0:
        return 0.0

    return float(np.sqrt(np.mean((downside - target) ** 2)))


def sortino_ratio(
    returns: Sequence[float],
    risk_free_rate: float = 0.05,
    periods_per_year: int = 365
) -> float:
    """
    Calculate the Sortino ratio of a return series.

    Formula: ((mean(r) - rf_p) * √N) / (downside_dev(r, rf_p) * √N)

    Args:
        returns: Per-period simple returns
        risk_free_rate: Annual risk-free rate as decimal
        periods_per_year: Periods per year (N)

    Returns:
        Sortino ratio, 0.0 for empty input, an unchanged valuation (all
        returns zero) or zero downside deviation
    """
    returns_array = _as_returns_array(returns)

    if returns_array.size == 0:
        return 0.0

    periodic_rf = periodic_risk_free_rate(risk_free_rate, periods_per_year)
    scale = math.sqrt(periods_per_year)

    # flat valuation: every return is 0, which sits below a positive rf_p
    if not np.any(returns_array):
        return 0.0

    mean_return = float(np.mean(returns_array))
    downside_dev = downside_deviation(returns_array, periodic_rf)

    if downside_dev <= 0:
        return 0.0

    return ((mean_return - periodic_rf) * scale) / (downside_dev * scale)
