"""
Tests for snapshot input contract validators.
"""

import pytest
from datetime import datetime

from dateutil.tz import tzutc

from portfolio.validators import (
    require_keys,
    validate_consistent_timezones,
    validate_holding,
    validate_transaction,
    validate_performance_history,
    validate_portfolio,
    ValidationError
)
from portfolio.models import PerformanceHistoryPoint
from tests.factories import (
    make_portfolio,
    make_metrics,
    make_holding,
    make_transaction,
    make_history,
    make_insight
)


class TestRequireKeys:
    """Tests for require_keys function."""

    def test_all_keys_present(self):
        """Test that a complete mapping passes."""
        require_keys({'a': 1, 'b': 0}, ['a', 'b'], 'row')

    def test_missing_keys_listed(self):
        """Test that missing keys appear in the message."""
        with pytest.raises(ValidationError, match=r"row: missing required keys: \['b', 'c'\]"):
            require_keys({'a': 1}, ['a', 'b', 'c'], 'row')

    def test_none_counts_as_missing(self):
        """Test that null values are treated as absent."""
        with pytest.raises(ValidationError, match="missing required keys"):
            require_keys({'a': None}, ['a'], 'row')

    def test_non_mapping_rejected(self):
        """Test that non-dict rows are rejected."""
        with pytest.raises(ValidationError, match="must be an object, got list"):
            require_keys([1, 2], ['a'], 'holdings[0]')


class TestValidatePortfolio:
    """Tests for validate_portfolio and per-record validators."""

    def test_valid_portfolio(self):
        """Test that the default snapshot passes."""
        validate_portfolio(make_portfolio())

    def test_empty_collections_valid(self):
        """Test that a snapshot with no holdings, transactions or history passes."""
        validate_portfolio(make_portfolio(
            holdings=(), transactions=(), performance_history=(), ai_insights=()
        ))

    def test_not_a_portfolio(self):
        """Test type check on the snapshot itself."""
        with pytest.raises(ValidationError, match="Expected Portfolio, got dict"):
            validate_portfolio({'address': 'x'})

    def test_blank_address(self):
        """Test that an empty address is rejected."""
        with pytest.raises(ValidationError, match="address must be a non-empty string"):
            validate_portfolio(make_portfolio(address=''))

    def test_metrics_non_numeric(self):
        """Test that string metrics are rejected."""
        with pytest.raises(ValidationError, match="metrics.total_value must be numeric"):
            validate_portfolio(make_portfolio(metrics=make_metrics(total_value='1000')))

    def test_metrics_nan(self):
        """Test that NaN metrics are rejected."""
        with pytest.raises(ValidationError, match="metrics.volatility must be finite"):
            validate_portfolio(make_portfolio(metrics=make_metrics(volatility=float('nan'))))

    def test_metrics_bool_transactions(self):
        """Test that a bool is not accepted as a count."""
        with pytest.raises(ValidationError, match="total_transactions must be integer"):
            validate_portfolio(make_portfolio(metrics=make_metrics(total_transactions=True)))

    def test_holding_negative_price(self):
        """Test that a negative current price is rejected with its index."""
        with pytest.raises(ValidationError, match=r"holdings\[3\].current_price must be non-negative"):
            validate_holding(make_holding(current_price=-1.0), index=3)

    def test_holding_negative_pnl_allowed(self):
        """Test that losses are valid values."""
        validate_holding(make_holding(unrealized_pnl=-250.0, total_pnl=-250.0))

    def test_holding_bad_count(self):
        """Test that a negative buy count is rejected."""
        with pytest.raises(ValidationError, match="buy_count must be a non-negative integer"):
            validate_holding(make_holding(buy_count=-1))

    def test_holding_string_date(self):
        """Test that unparsed dates are rejected."""
        with pytest.raises(ValidationError, match="first_purchase_date must be datetime"):
            validate_holding(make_holding(first_purchase_date='2025-01-10'))

    def test_transaction_negative_fee(self):
        """Test that a negative fee is rejected."""
        with pytest.raises(ValidationError, match=r"transactions\[0\].fee_usd must be non-negative"):
            validate_transaction(make_transaction(fee_usd=-0.5))

    def test_transaction_realized_pnl_optional(self):
        """Test that realized P&L may be absent or negative."""
        validate_transaction(make_transaction(realized_pnl=None))
        validate_transaction(make_transaction(realized_pnl=-12.0))

    def test_transaction_missing_txid(self):
        """Test that a non-string txid is rejected."""
        with pytest.raises(ValidationError, match="txid must be string"):
            validate_transaction(make_transaction(txid=None))

    def test_history_duplicate_dates(self):
        """Test that repeated dates are rejected."""
        point = PerformanceHistoryPoint(datetime(2025, 8, 1), 100.0, 0.0, 0.0, 0.0)

        with pytest.raises(ValidationError, match=r"performance_history\[1\].date must be after"):
            validate_performance_history([point, point])

    def test_history_descending_dates(self):
        """Test that out-of-order dates are rejected."""
        history = make_history([100, 110])

        with pytest.raises(ValidationError, match="must be after"):
            validate_performance_history(tuple(reversed(history)))

    def test_history_negative_value(self):
        """Test that negative valuations are rejected."""
        with pytest.raises(ValidationError, match="total_value must be non-negative"):
            validate_performance_history(make_history([100, -5]))

    def test_insight_confidence_numeric(self):
        """Test that insight confidence must be numeric."""
        portfolio = make_portfolio(ai_insights=(make_insight(confidence='high'),))

        with pytest.raises(ValidationError, match=r"ai_insights\[0\].confidence must be numeric"):
            validate_portfolio(portfolio)


class TestValidateConsistentTimezones:
    """Tests for mixed aware and naive timestamps."""

    def test_all_naive_or_all_aware_pass(self):
        """Test that uniform groups pass."""
        validate_consistent_timezones([datetime(2025, 1, 1), datetime(2025, 1, 2)], 'transactions')
        validate_consistent_timezones(
            [datetime(2025, 1, 1, tzinfo=tzutc()), datetime(2025, 1, 2, tzinfo=tzutc())],
            'transactions'
        )

    def test_history_aware_then_naive(self):
        """Test that a mixed history raises ValidationError instead of TypeError."""
        history = make_history([100, 110])
        first = history[0]
        mixed = (
            PerformanceHistoryPoint(
                datetime(2025, 7, 31, tzinfo=tzutc()), first.total_value, first.pnl,
                first.pnl_percentage, first.day_return_percentage
            ),
            history[1],
        )

        with pytest.raises(ValidationError, match=r"performance_history\[1\].date must be timezone-aware"):
            validate_portfolio(make_portfolio(performance_history=mixed))

    def test_transactions_naive_then_aware(self):
        """Test that mixed transaction dates are an input error."""
        transactions = (
            make_transaction(date=datetime(2025, 1, 2, 10, 0, 0)),
            make_transaction(date=datetime(2025, 1, 1, tzinfo=tzutc()), txid='tx-0002'),
        )

        with pytest.raises(ValidationError, match=r"transactions\[1\].date must be naive"):
            validate_portfolio(make_portfolio(transactions=transactions))

    def test_other_timestamps_may_differ(self):
        """Test that groups are checked independently of each other."""
        portfolio = make_portfolio(last_updated=datetime(2025, 8, 7, 12, 0, tzinfo=tzutc()))

        validate_portfolio(portfolio)
