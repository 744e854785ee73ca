"""
Snapshot loaders - JSON file or mapping to an immutable Portfolio.
Keys follow the camelCase contract used by the upstream portfolio service.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List

from dateutil import parser as date_parser

from portfolio.models import (
    Portfolio,
    PortfolioMetrics,
    AssetHolding,
    Transaction,
    PerformanceHistoryPoint,
    AIInsight,
)
from portfolio.validators import ValidationError, require_keys, validate_portfolio


logger = logging.getLogger(__name__)


class SnapshotLoadError(Exception):
    """Raised when a snapshot file cannot be read or parsed."""
    pass


# snake_case field -> camelCase source key
METRICS_KEYS = {
    'total_value': 'totalValue',
    'total_cost': 'totalCost',
    'total_pnl': 'totalPNL',
    'total_pnl_percentage': 'totalPNLPercentage',
    'unrealized_pnl': 'unrealizedPNL',
    'realized_pnl': 'realizedPNL',
    'day_return_percentage': 'dayReturnPercentage',
    'week_return_percentage': 'weekReturnPercentage',
    'month_return_percentage': 'monthReturnPercentage',
    'year_return_percentage': 'yearReturnPercentage',
    'volatility': 'volatility',
    'sharpe_ratio': 'sharpeRatio',
    'max_drawdown': 'maxDrawdown',
    'win_rate': 'winRate',
    'total_transactions': 'totalTransactions',
    'total_fees': 'totalFees',
}

HOLDING_KEYS = {
    'asset': 'asset',
    'asset_type': 'assetType',
    'total_amount': 'totalAmount',
    'average_buy_price': 'averageBuyPrice',
    'current_price': 'currentPrice',
    'total_cost': 'totalCost',
    'current_value': 'currentValue',
    'unrealized_pnl': 'unrealizedPNL',
    'unrealized_pnl_percentage': 'unrealizedPNLPercentage',
    'realized_pnl': 'realizedPNL',
    'total_pnl': 'totalPNL',
    'total_pnl_percentage': 'totalPNLPercentage',
    'day_change_percentage': 'dayChangePercentage',
    'week_change_percentage': 'weekChangePercentage',
    'month_change_percentage': 'monthChangePercentage',
    'first_purchase_date': 'firstPurchaseDate',
    'last_purchase_date': 'lastPurchaseDate',
    'buy_count': 'buyCount',
    'sell_count': 'sellCount',
    'volatility_30d': 'volatility30d',
    'sharpe_ratio': 'sharpeRatio',
}

TRANSACTION_KEYS = {
    'date': 'date',
    'type': 'type',
    'asset': 'asset',
    'amount': 'amount',
    'price': 'price',
    'total_value': 'totalValue',
    'fee_usd': 'feeUSD',
    'status': 'status',
    'txid': 'txid',
}

HISTORY_KEYS = {
    'date': 'date',
    'total_value': 'totalValue',
    'pnl': 'pnl',
    'pnl_percentage': 'pnlPercentage',
    'day_return_percentage': 'dayReturnPercentage',
}

INSIGHT_KEYS = ('type', 'confidence', 'title', 'description')

DATE_FIELDS = {'date', 'first_purchase_date', 'last_purchase_date'}


def load_portfolio_snapshot(path: Path) -> Portfolio:
    """
    Load and validate a portfolio snapshot from a JSON file.

    Args:
        path: Path to snapshot JSON

    Returns:
        Validated Portfolio

    Raises:
        SnapshotLoadError: If the file is unreadable, not UTF-8 or not valid JSON
        ValidationError: If required fields are missing or malformed
    """
    path = Path(path)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise SnapshotLoadError(f"Snapshot not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(f"Invalid JSON in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise SnapshotLoadError(f"{path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise SnapshotLoadError(f"Cannot read {path}: {e}") from e

    portfolio = portfolio_from_dict(data)
    logger.debug(
        "Loaded snapshot %s: %d holdings, %d transactions, %d history points",
        path, len(portfolio.holdings), len(portfolio.transactions),
        len(portfolio.performance_history)
    )
    return portfolio


def portfolio_from_dict(data: Dict[str, Any]) -> Portfolio:
    """
    Build a validated Portfolio from a camelCase mapping.

    Args:
        data: Snapshot mapping

    Returns:
        Validated Portfolio

    Raises:
        ValidationError: If required fields are missing or malformed
    """
    require_keys(data, ['address', 'lastUpdated', 'metrics'], 'portfolio')

    portfolio = Portfolio(
        address=data['address'],
        last_updated=parse_timestamp(data['lastUpdated'], 'portfolio.lastUpdated'),
        metrics=PortfolioMetrics(**_map_fields(data['metrics'], METRICS_KEYS, 'metrics')),
        holdings=tuple(
            AssetHolding(**_map_fields(row, HOLDING_KEYS, f'holdings[{i}]'))
            for i, row in enumerate(_list_field(data, 'holdings'))
        ),
        transactions=tuple(
            _build_transaction(row, i)
            for i, row in enumerate(_list_field(data, 'transactions'))
        ),
        performance_history=tuple(
            PerformanceHistoryPoint(**_map_fields(row, HISTORY_KEYS, f'performanceHistory[{i}]'))
            for i, row in enumerate(_list_field(data, 'performanceHistory'))
        ),
        ai_insights=tuple(
            _build_insight(row, i)
            for i, row in enumerate(_list_field(data, 'aiInsights'))
        ),
    )

    validate_portfolio(portfolio)
    return portfolio


def parse_timestamp(value: Any, context: str) -> datetime:
    """
    Parse a snapshot timestamp without timezone conversion.

    Accepts datetime objects, ISO 8601 strings and other formats dateutil understands.
    """
    if isinstance(value, datetime):
        return value

    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{context} must be a timestamp string, got {value!r}")

    try:
        return date_parser.isoparse(value)
    except ValueError:
        pass

    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"{context}: unparseable timestamp {value!r}") from e


def _list_field(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"portfolio.{key} must be a list, got {type(value).__name__}")
    return value


def _map_fields(row: Dict[str, Any], key_map: Dict[str, str], context: str) -> Dict[str, Any]:
    """Translate camelCase keys to dataclass fields, parsing date fields."""
    require_keys(row, key_map.values(), context)

    fields = {}
    for field_name, source_key in key_map.items():
        value = row[source_key]
        if field_name in DATE_FIELDS:
            value = parse_timestamp(value, f'{context}.{source_key}')
        fields[field_name] = value
    return fields


def _build_transaction(row: Dict[str, Any], index: int) -> Transaction:
    context = f'transactions[{index}]'
    fields = _map_fields(row, TRANSACTION_KEYS, context)
    # realizedPNL is only present on closing trades
    fields['realized_pnl'] = row.get('realizedPNL')
    return Transaction(**fields)


def _build_insight(row: Dict[str, Any], index: int) -> AIInsight:
    context = f'aiInsights[{index}]'
    require_keys(row, INSIGHT_KEYS, context)
    return AIInsight(**{key: row[key] for key in INSIGHT_KEYS})
