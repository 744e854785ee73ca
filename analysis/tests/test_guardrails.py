"""
Tests for export input guardrails.
"""

import pytest

from analysis.guardrails import enforce_input_limits, InputLimitError
from tests.factories import make_portfolio, make_transaction, make_history


class TestEnforceInputLimits:
    """Tests for enforce_input_limits function."""

    def test_within_limits_returns_sizes(self):
        """Test that sizes are reported for an acceptable snapshot."""
        sizes = enforce_input_limits(make_portfolio(), max_transactions=10, max_history_points=10)

        assert sizes == {'transactions': 3, 'performance_history': 4, 'holdings': 1}

    def test_limit_is_inclusive(self):
        """Test that a list exactly at the limit passes."""
        sizes = enforce_input_limits(make_portfolio(), max_transactions=3, max_history_points=4)

        assert sizes['transactions'] == 3

    def test_too_many_transactions(self):
        """Test rejection of oversized transaction lists."""
        transactions = tuple(make_transaction(txid=f'tx-{i}') for i in range(6))
        portfolio = make_portfolio(transactions=transactions)

        with pytest.raises(InputLimitError, match="Too many transactions: 6"):
            enforce_input_limits(portfolio, max_transactions=5, max_history_points=100)

    def test_too_many_history_points(self):
        """Test rejection of oversized performance history."""
        portfolio = make_portfolio(performance_history=make_history(range(100, 112)))

        with pytest.raises(InputLimitError, match="Too many performance history points: 12"):
            enforce_input_limits(portfolio, max_transactions=100, max_history_points=10)

    def test_empty_lists_pass(self):
        """Test that empty snapshots are within any limit."""
        portfolio = make_portfolio(transactions=(), performance_history=(), holdings=())

        sizes = enforce_input_limits(portfolio, max_transactions=0, max_history_points=0)

        assert sizes == {'transactions': 0, 'performance_history': 0, 'holdings': 0}
