"""
Tabular exports - portfolio, transactions and holdings as quoted CSV text.
Pure functions - no IO. Header rows are fixed contracts for downstream parsers.
"""

import csv
import io
from typing import List, Sequence

from portfolio.models import Portfolio, AssetHolding, Transaction, PerformanceHistoryPoint
from reports.formatters import format_plain_number, format_export_datetime, FormatterError


class SerializationError(Exception):
    """Raised when a snapshot cannot be serialized."""
    pass


TRANSACTION_HEADERS = [
    'Date',
    'Type',
    'Asset',
    'Amount',
    'Price',
    'Total Value',
    'Fee (USD)',
    'P&L',
    'Status',
    'Transaction ID'
]

HOLDING_HEADERS = [
    'Asset',
    'Type',
    'Amount',
    'Avg Buy Price',
    'Current Price',
    'Total Cost',
    'Current Value',
    'Unrealized P&L',
    'Unrealized P&L %',
    'Realized P&L',
    'Total P&L',
    'Total P&L %',
    'Day Change %',
    'Week Change %',
    'Month Change %',
    'First Purchase',
    'Last Purchase',
    'Buy Count',
    'Sell Count',
    'Volatility 30d',
    'Sharpe Ratio'
]

# Holdings block of the full portfolio export
HOLDINGS_SUMMARY_HEADERS = ['Asset', 'Current Value', 'P&L', 'P&L %', 'Day Change %']

PERFORMANCE_HEADERS = ['Date', 'Total Value', 'P&L', 'P&L %', 'Day Return %']

PERFORMANCE_EXPORT_POINTS = 30

BLANK_ROW = ['', '']


def to_quoted_csv(rows: Sequence[Sequence[str]]) -> str:
    """
    Join rows into CSV text with every field quoted.

    Embedded quotes are doubled. Rows are separated by "\\n" with no
    trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerows(rows)
    return buffer.getvalue().rstrip('\n')


def transaction_row(tx: Transaction) -> List[str]:
    """Project one transaction onto TRANSACTION_HEADERS."""
    return [
        format_export_datetime(tx.date),
        tx.type,
        tx.asset,
        format_plain_number(tx.amount),
        format_plain_number(tx.price),
        format_plain_number(tx.total_value),
        format_plain_number(tx.fee_usd),
        format_plain_number(tx.realized_pnl),  # None -> ""
        tx.status,
        tx.txid
    ]


def holding_row(holding: AssetHolding) -> List[str]:
    """Project one holding onto HOLDING_HEADERS."""
    return [
        holding.asset,
        holding.asset_type,
        format_plain_number(holding.total_amount),
        format_plain_number(holding.average_buy_price),
        format_plain_number(holding.current_price),
        format_plain_number(holding.total_cost),
        format_plain_number(holding.current_value),
        format_plain_number(holding.unrealized_pnl),
        format_plain_number(holding.unrealized_pnl_percentage),
        format_plain_number(holding.realized_pnl),
        format_plain_number(holding.total_pnl),
        format_plain_number(holding.total_pnl_percentage),
        format_plain_number(holding.day_change_percentage),
        format_plain_number(holding.week_change_percentage),
        format_plain_number(holding.month_change_percentage),
        format_export_datetime(holding.first_purchase_date),
        format_export_datetime(holding.last_purchase_date),
        format_plain_number(holding.buy_count),
        format_plain_number(holding.sell_count),
        format_plain_number(holding.volatility_30d),
        format_plain_number(holding.sharpe_ratio)
    ]


def serialize_transactions(transactions: Sequence[Transaction]) -> str:
    """
    Serialize transactions with the fixed transaction header.

    Args:
        transactions: Transactions in the order to export

    Returns:
        CSV text; header only when the list is empty

    Raises:
        SerializationError: If a value cannot be formatted
    """
    try:
        rows = [TRANSACTION_HEADERS] + [transaction_row(tx) for tx in transactions]
    except (FormatterError, AttributeError) as e:
        raise SerializationError(f"Transaction export failed: {e}") from e

    return to_quoted_csv(rows)


def serialize_holdings(holdings: Sequence[AssetHolding]) -> str:
    """
    Serialize holdings with the fixed 21-column holdings header.

    Args:
        holdings: Holdings in the order to export

    Returns:
        CSV text; header only when the list is empty

    Raises:
        SerializationError: If a value cannot be formatted
    """
    try:
        rows = [HOLDING_HEADERS] + [holding_row(h) for h in holdings]
    except (FormatterError, AttributeError) as e:
        raise SerializationError(f"Holdings export failed: {e}") from e

    return to_quoted_csv(rows)


def serialize_portfolio(portfolio: Portfolio) -> str:
    """
    Serialize the full portfolio report.

    Block order: summary, blank row, holdings, blank row, last 30
    performance history points.

    Args:
        portfolio: Snapshot to export

    Returns:
        CSV text

    Raises:
        SerializationError: If a value cannot be formatted
    """
    try:
        rows = (
            _summary_rows(portfolio)
            + [BLANK_ROW]
            + _holdings_block(portfolio.holdings)
            + [BLANK_ROW]
            + _performance_block(portfolio.performance_history)
        )
    except (FormatterError, AttributeError) as e:
        raise SerializationError(f"Portfolio export failed: {e}") from e

    return to_quoted_csv(rows)


def _summary_rows(portfolio: Portfolio) -> List[List[str]]:
    """Label/value pairs for every aggregate metric."""
    metrics = portfolio.metrics
    return [
        ['Portfolio Summary', ''],
        ['Address', portfolio.address],
        ['Last Updated', format_export_datetime(portfolio.last_updated)],
        ['Total Value', format_plain_number(metrics.total_value)],
        ['Total Cost', format_plain_number(metrics.total_cost)],
        ['Total P&L', format_plain_number(metrics.total_pnl)],
        ['Total P&L %', format_plain_number(metrics.total_pnl_percentage)],
        ['Unrealized P&L', format_plain_number(metrics.unrealized_pnl)],
        ['Realized P&L', format_plain_number(metrics.realized_pnl)],
        ['Day Return %', format_plain_number(metrics.day_return_percentage)],
        ['Week Return %', format_plain_number(metrics.week_return_percentage)],
        ['Month Return %', format_plain_number(metrics.month_return_percentage)],
        ['Year Return %', format_plain_number(metrics.year_return_percentage)],
        ['Volatility', format_plain_number(metrics.volatility)],
        ['Sharpe Ratio', format_plain_number(metrics.sharpe_ratio)],
        ['Max Drawdown', format_plain_number(metrics.max_drawdown)],
        ['Win Rate', format_plain_number(metrics.win_rate)],
        ['Total Transactions', format_plain_number(metrics.total_transactions)],
        ['Total Fees', format_plain_number(metrics.total_fees)],
    ]


def _holdings_block(holdings: Sequence[AssetHolding]) -> List[List[str]]:
    rows = [['Holdings', ''], list(HOLDINGS_SUMMARY_HEADERS)]
    for h in holdings:
        rows.append([
            h.asset,
            format_plain_number(h.current_value),
            format_plain_number(h.total_pnl),
            format_plain_number(h.total_pnl_percentage),
            format_plain_number(h.day_change_percentage)
        ])
    return rows


def _performance_block(history: Sequence[PerformanceHistoryPoint]) -> List[List[str]]:
    rows = [['Performance History', ''], list(PERFORMANCE_HEADERS)]
    recent = sorted(history, key=lambda p: p.date)[-PERFORMANCE_EXPORT_POINTS:]
    for point in recent:
        rows.append([
            format_export_datetime(point.date),
            format_plain_number(point.total_value),
            format_plain_number(point.pnl),
            format_plain_number(point.pnl_percentage),
            format_plain_number(point.day_return_percentage)
        ])
    return rows
