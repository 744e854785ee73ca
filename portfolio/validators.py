"""
Input contract validators for portfolio snapshots.
Pure functions - no IO. Fail fast on missing or malformed fields.
"""

import math
from datetime import datetime
from typing import Dict, Any, Iterable

from portfolio.models import (
    Portfolio,
    PortfolioMetrics,
    AssetHolding,
    Transaction,
    PerformanceHistoryPoint,
    AIInsight,
)


class ValidationError(ValueError):
    """Raised when snapshot validation fails."""
    pass


def require_keys(row: Dict[str, Any], required_keys: Iterable[str], context: str) -> None:
    """
    Check that a raw mapping carries every required key.

    Args:
        row: Raw mapping from a snapshot file
        required_keys: Keys that must be present (None values count as missing)
        context: Label used in the error message (e.g. "holdings[2]")

    Raises:
        ValidationError: If any key is absent
    """
    if not isinstance(row, dict):
        raise ValidationError(f"{context} must be an object, got {type(row).__name__}")

    missing = sorted(k for k in required_keys if row.get(k) is None)
    if missing:
        raise ValidationError(f"{context}: missing required keys: {missing}")


def _check_number(value: Any, name: str, context: str, non_negative: bool = False) -> None:
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{context}.{name} must be numeric, got {type(value).__name__}")

    if not math.isfinite(value):
        raise ValidationError(f"{context}.{name} must be finite, got {value}")

    if non_negative and value < 0:
        raise ValidationError(f"{context}.{name} must be non-negative, got {value}")


def _check_text(value: Any, name: str, context: str) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"{context}.{name} must be string, got {type(value).__name__}")


def _check_datetime(value: Any, name: str, context: str) -> None:
    if not isinstance(value, datetime):
        raise ValidationError(f"{context}.{name} must be datetime, got {type(value).__name__}")


def validate_consistent_timezones(values: Iterable[datetime], context: str) -> None:
    """
    Require a group of compared timestamps to be all aware or all naive.

    Args:
        values: Timestamps that will be ordered against each other
        context: Label used in the error message (e.g. "transactions")

    Raises:
        ValidationError: If aware and naive timestamps are mixed
    """
    first_aware = None

    for index, value in enumerate(values):
        aware = value.utcoffset() is not None
        if first_aware is None:
            first_aware = aware
        elif aware != first_aware:
            expected = 'timezone-aware' if first_aware else 'naive'
            raise ValidationError(
                f"{context}[{index}].date must be {expected} like {context}[0].date, "
                f"got {value.isoformat()}"
            )


def validate_metrics(metrics: PortfolioMetrics) -> None:
    """Validate aggregate metrics."""
    context = 'metrics'
    if not isinstance(metrics, PortfolioMetrics):
        raise ValidationError(f"metrics must be PortfolioMetrics, got {type(metrics).__name__}")

    for name in (
        'total_value', 'total_cost', 'total_pnl', 'total_pnl_percentage',
        'unrealized_pnl', 'realized_pnl', 'day_return_percentage',
        'week_return_percentage', 'month_return_percentage', 'year_return_percentage',
        'volatility', 'sharpe_ratio', 'max_drawdown', 'win_rate', 'total_fees'
    ):
        _check_number(getattr(metrics, name), name, context)

    if isinstance(metrics.total_transactions, bool) or not isinstance(metrics.total_transactions, int):
        raise ValidationError("metrics.total_transactions must be integer")

    if metrics.total_value < 0:
        raise ValidationError(f"metrics.total_value must be non-negative, got {metrics.total_value}")


def validate_holding(holding: AssetHolding, index: int = 0) -> None:
    """Validate a single holding."""
    context = f'holdings[{index}]'

    _check_text(holding.asset, 'asset', context)
    _check_text(holding.asset_type, 'asset_type', context)

    for name in ('total_amount', 'average_buy_price', 'current_price', 'total_cost', 'current_value'):
        _check_number(getattr(holding, name), name, context, non_negative=True)

    for name in (
        'unrealized_pnl', 'unrealized_pnl_percentage', 'realized_pnl', 'total_pnl',
        'total_pnl_percentage', 'day_change_percentage', 'week_change_percentage',
        'month_change_percentage', 'volatility_30d', 'sharpe_ratio'
    ):
        _check_number(getattr(holding, name), name, context)

    for name in ('buy_count', 'sell_count'):
        value = getattr(holding, name)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(f"{context}.{name} must be a non-negative integer, got {value!r}")

    _check_datetime(holding.first_purchase_date, 'first_purchase_date', context)
    _check_datetime(holding.last_purchase_date, 'last_purchase_date', context)


def validate_transaction(transaction: Transaction, index: int = 0) -> None:
    """Validate a single transaction. Amount, price and fee must be non-negative."""
    context = f'transactions[{index}]'

    _check_datetime(transaction.date, 'date', context)

    for name in ('type', 'asset', 'status', 'txid'):
        _check_text(getattr(transaction, name), name, context)

    _check_number(transaction.amount, 'amount', context, non_negative=True)
    _check_number(transaction.price, 'price', context, non_negative=True)
    _check_number(transaction.fee_usd, 'fee_usd', context, non_negative=True)
    _check_number(transaction.total_value, 'total_value', context)

    if transaction.realized_pnl is not None:
        _check_number(transaction.realized_pnl, 'realized_pnl', context)


def validate_performance_history(history: Iterable[PerformanceHistoryPoint]) -> None:
    """
    Validate the valuation series.

    Requires strictly ascending dates (no duplicates), all aware or all
    naive, and total_value >= 0.
    """
    history = tuple(history)

    for index, point in enumerate(history):
        context = f'performance_history[{index}]'

        _check_datetime(point.date, 'date', context)
        _check_number(point.total_value, 'total_value', context, non_negative=True)

        for name in ('pnl', 'pnl_percentage', 'day_return_percentage'):
            _check_number(getattr(point, name), name, context)

    validate_consistent_timezones((point.date for point in history), 'performance_history')

    previous_date = None
    for index, point in enumerate(history):
        context = f'performance_history[{index}]'
        if previous_date is not None and point.date <= previous_date:
            raise ValidationError(
                f"{context}.date must be after {previous_date.isoformat()}, got {point.date.isoformat()}"
            )

        previous_date = point.date


def validate_insight(insight: AIInsight, index: int = 0) -> None:
    """Insights are opaque; only their shape is checked."""
    context = f'ai_insights[{index}]'

    for name in ('type', 'title', 'description'):
        _check_text(getattr(insight, name), name, context)

    _check_number(insight.confidence, 'confidence', context)


def validate_portfolio(portfolio: Portfolio) -> None:
    """
    Validate a complete snapshot before any export work.

    Args:
        portfolio: Snapshot to check

    Raises:
        ValidationError: On the first contract violation found
    """
    if not isinstance(portfolio, Portfolio):
        raise ValidationError(f"Expected Portfolio, got {type(portfolio).__name__}")

    if not portfolio.address or not isinstance(portfolio.address, str):
        raise ValidationError("address must be a non-empty string")

    _check_datetime(portfolio.last_updated, 'last_updated', 'portfolio')

    validate_metrics(portfolio.metrics)

    for index, holding in enumerate(portfolio.holdings):
        validate_holding(holding, index)

    for index, transaction in enumerate(portfolio.transactions):
        validate_transaction(transaction, index)

    validate_consistent_timezones((tx.date for tx in portfolio.transactions), 'transactions')

    validate_performance_history(portfolio.performance_history)

    for index, insight in enumerate(portfolio.ai_insights):
        validate_insight(insight, index)
