"""
Portfolio Snapshot Module

Immutable data model for a portfolio snapshot:
- Holdings, transactions, performance history, AI insights
- JSON snapshot loading
- Input contract validation
"""

__version__ = "0.1.0"
