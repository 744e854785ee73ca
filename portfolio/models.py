"""
Immutable portfolio snapshot types.
Frozen dataclasses; collections are tuples so a snapshot cannot change after load.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class PortfolioMetrics:
    """Aggregate portfolio statistics supplied with the snapshot."""
    total_value: float
    total_cost: float
    total_pnl: float
    total_pnl_percentage: float
    unrealized_pnl: float
    realized_pnl: float
    day_return_percentage: float
    week_return_percentage: float
    month_return_percentage: float
    year_return_percentage: float
    volatility: float
    sharpe_ratio: float
    max_drawdown: float
    win_rate: float
    total_transactions: int
    total_fees: float


@dataclass(frozen=True)
class AssetHolding:
    """
    A position in one asset.

    current_value is expected to equal total_amount * current_price; it is
    taken as supplied and never recomputed.
    """
    asset: str
    asset_type: str
    total_amount: float
    average_buy_price: float
    current_price: float
    total_cost: float
    current_value: float
    unrealized_pnl: float
    unrealized_pnl_percentage: float
    realized_pnl: float
    total_pnl: float
    total_pnl_percentage: float
    day_change_percentage: float
    week_change_percentage: float
    month_change_percentage: float
    first_purchase_date: datetime
    last_purchase_date: datetime
    buy_count: int
    sell_count: int
    volatility_30d: float
    sharpe_ratio: float


@dataclass(frozen=True)
class Transaction:
    """A single buy/sell/transfer record. Fee is in the reporting currency."""
    date: datetime
    type: str
    asset: str
    amount: float
    price: float
    total_value: float
    fee_usd: float
    status: str
    txid: str
    realized_pnl: Optional[float] = None


@dataclass(frozen=True)
class PerformanceHistoryPoint:
    """Total portfolio valuation at one date."""
    date: datetime
    total_value: float
    pnl: float
    pnl_percentage: float
    day_return_percentage: float


@dataclass(frozen=True)
class AIInsight:
    """Insight record produced elsewhere; carried through verbatim."""
    type: str
    confidence: float
    title: str
    description: str


@dataclass(frozen=True)
class Portfolio:
    """Complete portfolio snapshot consumed by the export pipeline."""
    address: str
    last_updated: datetime
    metrics: PortfolioMetrics
    holdings: Tuple[AssetHolding, ...] = field(default_factory=tuple)
    transactions: Tuple[Transaction, ...] = field(default_factory=tuple)
    performance_history: Tuple[PerformanceHistoryPoint, ...] = field(default_factory=tuple)
    ai_insights: Tuple[AIInsight, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Freeze list inputs into tuples."""
        for name in ('holdings', 'transactions', 'performance_history', 'ai_insights'):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))
