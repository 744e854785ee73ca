"""
Analysis Engine Module

Calculates risk statistics from a portfolio's performance history:
- Per-period simple returns
- Sharpe and Sortino ratios
- Maximum drawdown
- Historical Value-at-Risk (95%)
"""

__version__ = "0.1.0"
