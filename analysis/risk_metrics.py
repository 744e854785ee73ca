"""
Risk metrics aggregator - composes return, ratio, drawdown and VaR calculations.
Pure function from performance history to a RiskMetrics record.
"""

import math
import pandas as pd
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional, Sequence

# Import all calculation modules
from analysis.calculations.returns import period_returns
from analysis.calculations.ratios import sharpe_ratio, sortino_ratio
from analysis.calculations.drawdown import max_drawdown
from analysis.calculations.value_at_risk import historical_var
from portfolio.models import PerformanceHistoryPoint


DEFAULT_RISK_FREE_RATE = 0.05
DEFAULT_PERIODS_PER_YEAR = 365
VAR_CONFIDENCE = 0.95


class RiskMetricsError(Exception):
    """Raised when risk metrics composition fails."""
    pass


@dataclass(frozen=True)
class RiskMetrics:
    """
    Derived risk statistics, rounded to 2 decimal places.

    max_drawdown and value_at_risk are percentages (9.09 = 9.09%).
    """
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    max_drawdown: float = 0.0
    value_at_risk: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain dictionary."""
        return asdict(self)


def round_half_up(value: float, places: int = 2) -> float:
    """
    Round halves toward positive infinity, as dashboard figures are rounded.

    round_half_up(0.125) == 0.13, round_half_up(-0.125) == -0.12
    """
    factor = 10 ** places
    rounded = math.floor(value * factor + 0.5) / factor
    # avoid -0.0 in output
    return rounded + 0.0


def calculate_risk_metrics(
    history: Sequence[PerformanceHistoryPoint],
    risk_free_rate: Optional[float] = None,
    periods_per_year: Optional[int] = None
) -> RiskMetrics:
    """
    Calculate Sharpe, Sortino, max drawdown and 95% VaR from a valuation series.

    Args:
        history: Performance history points (sorted here by date)
        risk_free_rate: Annual risk-free rate as decimal (default 5%)
        periods_per_year: Observation periods per year (default 365)

    Returns:
        RiskMetrics; all zeros for fewer than 2 points

    Raises:
        RiskMetricsError: If dates repeat or values are not finite
    """
    if risk_free_rate is None:
        risk_free_rate = DEFAULT_RISK_FREE_RATE

    if periods_per_year is None:
        periods_per_year = DEFAULT_PERIODS_PER_YEAR

    if periods_per_year <= 0:
        raise RiskMetricsError("periods_per_year must be positive")

    if history is None or len(history) < 2:
        return RiskMetrics()

    history_df = _history_frame(history)
    values = history_df['total_value'].tolist()

    returns = period_returns(values)

    sharpe = sharpe_ratio(returns, risk_free_rate, periods_per_year)
    sortino = sortino_ratio(returns, risk_free_rate, periods_per_year)
    drawdown = max_drawdown(values)
    var_95 = historical_var(returns, VAR_CONFIDENCE)

    return RiskMetrics(
        sharpe_ratio=round_half_up(sharpe),
        sortino_ratio=round_half_up(sortino),
        max_drawdown=round_half_up(drawdown * 100),
        value_at_risk=round_half_up(var_95 * 100)
    )


def _history_frame(history: Sequence[PerformanceHistoryPoint]) -> pd.DataFrame:
    """
    Build a chronologically sorted frame of the valuation series.

    Args:
        history: Performance history points

    Returns:
        DataFrame with 'date' and 'total_value' columns

    Raises:
        RiskMetricsError: If dates repeat or values are not finite
    """
    history_df = pd.DataFrame(
        {
            'date': [point.date for point in history],
            'total_value': [point.total_value for point in history],
        }
    )

    if history_df['date'].duplicated().any():
        duplicates = history_df.loc[history_df['date'].duplicated(), 'date'].tolist()
        raise RiskMetricsError(f"Duplicate dates in performance history: {duplicates[:3]}")

    history_df['total_value'] = pd.to_numeric(history_df['total_value'], errors='raise').astype(float)

    if not history_df['total_value'].map(math.isfinite).all():
        raise RiskMetricsError("Performance history contains non-finite values")

    return history_df.sort_values('date', kind='stable').reset_index(drop=True)
