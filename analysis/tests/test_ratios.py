"""
Tests for Sharpe and Sortino ratio calculations.
Expected values are computed by hand from the formula definitions.
"""

import math
import pytest
import numpy as np

from analysis.calculations.ratios import (
    sharpe_ratio,
    sortino_ratio,
    downside_deviation,
    RatioError
)


# Returns of the series 100 -> 110 -> 100 -> 120
RETURNS = [0.10, 100.0 / 110.0 - 1, 0.20]
DAILY_RF = 0.05 / 365


class TestSharpeRatio:
    """Tests for sharpe_ratio function."""

    def test_sharpe_ratio_known_series(self):
        """Test against a direct population-std computation."""
        mean = sum(RETURNS) / 3
        std = math.sqrt(sum((r - mean) ** 2 for r in RETURNS) / 3)
        expected = (mean - DAILY_RF) / std

        result = sharpe_ratio(RETURNS)

        assert abs(result - expected) < 1e-12
        assert abs(result - 0.5764) < 1e-3

    def test_sharpe_ratio_scale_factor_cancels(self):
        """Test that periods_per_year only affects the risk-free rate."""
        mean = float(np.mean(RETURNS))
        std = float(np.std(RETURNS))

        result = sharpe_ratio(RETURNS, risk_free_rate=0.0, periods_per_year=252)

        assert abs(result - mean / std) < 1e-12

    def test_sharpe_ratio_zero_variance(self):
        """Test that constant returns give 0 instead of inf."""
        assert sharpe_ratio([0.0, 0.0, 0.0]) == 0.0
        assert sharpe_ratio([0.01, 0.01]) == 0.0

    def test_sharpe_ratio_empty(self):
        """Test that no returns give 0."""
        assert sharpe_ratio([]) == 0.0

    def test_sharpe_ratio_rejects_infinite(self):
        """Test that infinite returns are rejected."""
        with pytest.raises(RatioError, match="NaN or infinite"):
            sharpe_ratio([0.1, float('inf')])


class TestSortinoRatio:
    """Tests for sortino_ratio and downside_deviation functions."""

    def test_sortino_ratio_known_series(self):
        """Test with a single return below the daily risk-free rate."""
        mean = sum(RETURNS) / 3
        downside = abs(RETURNS[1] - DAILY_RF)  # only one downside return
        expected = (mean - DAILY_RF) / downside

        result = sortino_ratio(RETURNS)

        assert abs(result - expected) < 1e-12
        assert abs(result - 0.764) < 1e-3

    def test_sortino_ratio_no_downside(self):
        """Test that all-positive returns give 0 (no downside deviation)."""
        assert sortino_ratio([0.01, 0.02, 0.03]) == 0.0

    def test_sortino_ratio_constant_returns(self):
        """Test that all-zero returns give 0 even though all sit below rf."""
        assert sortino_ratio([0.0, 0.0, 0.0, 0.0]) == 0.0

    def test_sortino_ratio_steady_loss(self):
        """Test that a constant non-zero loss keeps the raw formula (-1)."""
        result = sortino_ratio([-0.5, -0.5])

        assert abs(result - (-1.0)) < 1e-12

    def test_sortino_ratio_steady_gain(self):
        """Test that a constant gain above rf has no downside and gives 0."""
        assert sortino_ratio([0.01, 0.01, 0.01]) == 0.0

    def test_sortino_ratio_empty(self):
        """Test that no returns give 0."""
        assert sortino_ratio([]) == 0.0

    def test_downside_deviation_only_counts_below_target(self):
        """Test that the mean is taken over downside returns only."""
        result = downside_deviation([-0.02, 0.05, -0.04], target=0.0)

        expected = math.sqrt((0.02 ** 2 + 0.04 ** 2) / 2)
        assert abs(result - expected) < 1e-12

    def test_downside_deviation_empty(self):
        """Test that no downside returns give 0."""
        assert downside_deviation([0.1, 0.2], target=0.0) == 0.0
