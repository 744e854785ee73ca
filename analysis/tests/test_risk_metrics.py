"""
Tests for the risk metrics aggregator.
Covers degenerate inputs, the worked drawdown scenario and isolation between calls.
"""

import pytest
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from analysis.risk_metrics import (
    calculate_risk_metrics,
    round_half_up,
    RiskMetrics,
    RiskMetricsError
)
from portfolio.models import PerformanceHistoryPoint
from tests.factories import make_history


class TestCalculateRiskMetrics:
    """Tests for calculate_risk_metrics function."""

    def test_empty_history_all_zero(self):
        """Test that an empty history gives all-zero metrics."""
        assert calculate_risk_metrics(()) == RiskMetrics(0.0, 0.0, 0.0, 0.0)

    def test_single_point_all_zero(self):
        """Test that a single point gives all-zero metrics."""
        assert calculate_risk_metrics(make_history([100])) == RiskMetrics()

    def test_constant_history_all_zero(self):
        """Test zero-variance guard for a flat series."""
        result = calculate_risk_metrics(make_history([250, 250, 250, 250, 250]))

        assert result.max_drawdown == 0.0
        assert result.sharpe_ratio == 0.0
        assert result.sortino_ratio == 0.0
        assert result.value_at_risk == 0.0

    def test_steady_loss_history(self):
        """Test 100 -> 50 -> 25: zero std gives Sharpe 0 but Sortino stays -1."""
        result = calculate_risk_metrics(make_history([100, 50, 25]))

        assert result.sharpe_ratio == 0.0
        assert result.sortino_ratio == -1.0
        assert result.max_drawdown == 75.0
        assert result.value_at_risk == 50.0

    def test_drawdown_scenario(self):
        """Test 100 -> 110 -> 100 -> 120: peaks 100,110,110,120; max drawdown 9.09%."""
        result = calculate_risk_metrics(make_history([100, 110, 100, 120]))

        assert result.max_drawdown == 9.09
        assert result.value_at_risk == 9.09
        assert result.sharpe_ratio == 0.58
        assert result.sortino_ratio == 0.76

    def test_history_sorted_before_calculation(self):
        """Test that out-of-order points are sorted by date."""
        ordered = make_history([100, 110, 100, 120])
        shuffled = (ordered[2], ordered[0], ordered[3], ordered[1])

        assert calculate_risk_metrics(shuffled) == calculate_risk_metrics(ordered)

    def test_duplicate_dates_rejected(self):
        """Test that repeated dates raise."""
        point = PerformanceHistoryPoint(datetime(2025, 8, 1), 100.0, 0.0, 0.0, 0.0)

        with pytest.raises(RiskMetricsError, match="Duplicate dates"):
            calculate_risk_metrics((point, point))

    def test_custom_risk_free_rate(self):
        """Test that a zero risk-free rate raises the Sharpe ratio."""
        history = make_history([100, 110, 100, 120])

        default = calculate_risk_metrics(history)
        no_rf = calculate_risk_metrics(history, risk_free_rate=0.0)

        assert no_rf.sharpe_ratio >= default.sharpe_ratio

    def test_bounds_hold_for_volatile_series(self):
        """Test drawdown and VaR ranges on a volatile series."""
        result = calculate_risk_metrics(make_history([100, 300, 10, 400, 0, 50, 500]))

        assert 0.0 <= result.max_drawdown <= 100.0
        assert 0.0 <= result.value_at_risk <= 100.0
        assert result.max_drawdown == 100.0

    def test_rounded_to_two_places(self):
        """Test that all metrics carry at most 2 decimals."""
        result = calculate_risk_metrics(make_history([100, 103, 101, 107, 99, 112]))

        for value in result.to_dict().values():
            assert round(value, 2) == value

    def test_concurrent_calls_are_independent(self):
        """Test that parallel calls on different snapshots do not interfere."""
        flat = make_history([100, 100, 100])
        scenario = make_history([100, 110, 100, 120])

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(
                calculate_risk_metrics,
                [flat, scenario] * 50
            ))

        assert all(r == RiskMetrics() for r in results[0::2])
        assert all(r.max_drawdown == 9.09 for r in results[1::2])


class TestRoundHalfUp:
    """Tests for round_half_up function."""

    def test_round_half_up(self):
        """Test midpoint handling."""
        assert round_half_up(0.125) == 0.13
        assert round_half_up(2.5, 0) == 3.0
        assert round_half_up(-2.5, 0) == -2.0

    def test_no_negative_zero(self):
        """Test that tiny negatives round to plain 0.0."""
        result = round_half_up(-0.001)

        assert result == 0.0
        assert str(result) == '0.0'
