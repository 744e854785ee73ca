"""
Narrative portfolio report - builds the printable Document from a snapshot.
Pure function - no I/O. Inputs are never mutated.
"""

from datetime import datetime
from typing import Optional, Sequence, Tuple

from analysis.risk_metrics import RiskMetrics, round_half_up
from portfolio.models import Portfolio, AssetHolding, Transaction, AIInsight
from reports.document import (
    Align,
    Card,
    CardGroup,
    Cell,
    Column,
    Document,
    Footer,
    HeaderBlock,
    InsightCard,
    InsightList,
    Section,
    Table,
    Tone,
    tone_for,
)
from reports.formatters import (
    format_amount,
    format_currency,
    format_date_display,
    format_generated_timestamp,
    format_long_date,
    format_percent_points,
    format_plain_number,
    format_ratio,
    format_signed_currency,
    format_signed_percent,
    format_time,
    FormatterError,
)


class TemplateError(Exception):
    """Raised when the report document cannot be built."""
    pass


BRAND = 'CYPHER ORDI FUTURE'
REPORT_TITLE = 'Professional Portfolio Report'
RECENT_TRANSACTION_LIMIT = 10
INSIGHT_LIMIT = 5

DISCLAIMER = (
    'This report is for informational purposes only and does not constitute financial advice. '
    'Past performance does not guarantee future results. '
    'Cryptocurrency investments carry significant risk.'
)

SECTION_OVERVIEW = 'Portfolio Overview'
SECTION_RISK = 'Risk Metrics'
SECTION_HOLDINGS = 'Holdings'
SECTION_TRANSACTIONS = 'Recent Transactions'
SECTION_INSIGHTS = 'AI Insights'

HOLDING_COLUMNS = (
    Column('Asset'),
    Column('Amount', Align.RIGHT),
    Column('Avg Buy Price', Align.RIGHT),
    Column('Current Price', Align.RIGHT),
    Column('Value', Align.RIGHT),
    Column('P&L', Align.RIGHT),
    Column('% of Portfolio', Align.RIGHT),
)

TRANSACTION_COLUMNS = (
    Column('Date'),
    Column('Type'),
    Column('Asset'),
    Column('Amount', Align.RIGHT),
    Column('Price', Align.RIGHT),
    Column('Total Value', Align.RIGHT),
)


def build_portfolio_document(
    portfolio: Portfolio,
    risk_metrics: RiskMetrics,
    generated_at: Optional[datetime] = None
) -> Document:
    """
    Build the printable report document.

    Args:
        portfolio: Snapshot to report on
        risk_metrics: Metrics computed from the snapshot's performance history
        generated_at: Generation timestamp (defaults to now)

    Returns:
        Document with header, overview cards, risk cards, holdings,
        recent transactions, insights and footer

    Raises:
        TemplateError: If a required value is missing or cannot be formatted
    """
    if portfolio is None or risk_metrics is None:
        raise TemplateError("Portfolio and risk metrics are required")

    if generated_at is None:
        generated_at = datetime.now()

    try:
        sections = (
            Section(SECTION_OVERVIEW, _overview_cards(portfolio)),
            Section(SECTION_RISK, _risk_cards(risk_metrics)),
            Section(SECTION_HOLDINGS, holdings_table(portfolio.holdings, portfolio.metrics.total_value)),
            Section(SECTION_TRANSACTIONS, transactions_table(portfolio.transactions)),
            Section(SECTION_INSIGHTS, _insight_list(portfolio.ai_insights)),
        )
    except (FormatterError, AttributeError, TypeError) as e:
        raise TemplateError(f"Report document build failed: {e}") from e

    return Document(
        title=f'Portfolio Report - {portfolio.address}',
        header=HeaderBlock(
            brand=BRAND,
            title=REPORT_TITLE,
            address=portfolio.address,
            generated=format_generated_timestamp(generated_at)
        ),
        sections=sections,
        footer=Footer(
            attribution=f'This report was generated by {BRAND} Professional Analytics',
            generated_line=(
                f'Report generated on {format_long_date(generated_at)} at {format_time(generated_at)}'
            ),
            disclaimer=DISCLAIMER
        ),
        generated_at=generated_at
    )


def portfolio_share(holding: AssetHolding, total_value: float) -> float:
    """
    Holding value as percent of the portfolio, rounded to 1 decimal.

    Returns 0.0 when the portfolio total is zero.
    """
    if total_value == 0:
        return 0.0
    return round_half_up(holding.current_value / total_value * 100, 1)


def recent_transactions(
    transactions: Sequence[Transaction],
    limit: int = RECENT_TRANSACTION_LIMIT
) -> Tuple[Transaction, ...]:
    """Most recent transactions by date, oldest first; ties keep input order."""
    ordered = sorted(transactions, key=lambda tx: tx.date)
    return tuple(ordered[-limit:]) if limit > 0 else ()


def holdings_table(holdings: Sequence[AssetHolding], total_value: float) -> Table:
    """7-column holdings table."""
    rows = []
    for holding in holdings:
        pnl_text = (
            f'{format_signed_currency(holding.total_pnl)} '
            f'({format_percent_points(holding.total_pnl_percentage)})'
        )
        rows.append((
            Cell(holding.asset),
            Cell(format_amount(holding.total_amount)),
            Cell(format_currency(holding.average_buy_price)),
            Cell(format_currency(holding.current_price)),
            Cell(format_currency(holding.current_value)),
            Cell(pnl_text, tone_for(holding.total_pnl)),
            Cell(f'{portfolio_share(holding, total_value):.1f}%'),
        ))
    return Table(HOLDING_COLUMNS, tuple(rows))


def transactions_table(transactions: Sequence[Transaction]) -> Table:
    """6-column table of the most recent transactions."""
    rows = []
    for tx in recent_transactions(transactions):
        rows.append((
            Cell(format_date_display(tx.date)),
            Cell(tx.type.upper()),
            Cell(tx.asset),
            Cell(format_amount(tx.amount)),
            Cell(format_currency(tx.price)),
            Cell(format_currency(tx.total_value)),
        ))
    return Table(TRANSACTION_COLUMNS, tuple(rows))


def _overview_cards(portfolio: Portfolio) -> CardGroup:
    metrics = portfolio.metrics
    return CardGroup((
        Card('Total Value', format_currency(metrics.total_value)),
        Card('Total P&L', format_signed_currency(metrics.total_pnl), tone_for(metrics.total_pnl)),
        Card(
            'Return %',
            format_signed_percent(metrics.total_pnl_percentage),
            tone_for(metrics.total_pnl_percentage)
        ),
        Card('Win Rate', format_percent_points(metrics.win_rate, 1)),
    ))


def _risk_cards(risk_metrics: RiskMetrics) -> CardGroup:
    return CardGroup((
        Card('Sharpe Ratio', format_ratio(risk_metrics.sharpe_ratio), tone_for(risk_metrics.sharpe_ratio)),
        Card('Sortino Ratio', format_ratio(risk_metrics.sortino_ratio), tone_for(risk_metrics.sortino_ratio)),
        # drawdown is a loss: always shown as adverse
        Card('Max Drawdown', f'-{format_percent_points(risk_metrics.max_drawdown)}', Tone.NEGATIVE),
        Card('VaR (95%)', format_percent_points(risk_metrics.value_at_risk)),
    ))


def _insight_list(insights: Sequence[AIInsight]) -> InsightList:
    return InsightList(tuple(
        InsightCard(
            insight_type=insight.type,
            confidence=f'{format_plain_number(insight.confidence)}%',
            title=insight.title,
            description=insight.description
        )
        for insight in insights[:INSIGHT_LIMIT]
    ))
