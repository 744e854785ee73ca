"""
Guardrails for export inputs - bound the work done per invocation.
Rejects pathologically large snapshots before serialization starts.
"""

from typing import Dict

from portfolio.models import Portfolio


class InputLimitError(Exception):
    """Raised when a snapshot exceeds configured size limits."""
    pass


def enforce_input_limits(
    portfolio: Portfolio,
    max_transactions: int,
    max_history_points: int
) -> Dict[str, int]:
    """
    Check transaction and performance-history sizes against limits.

    Args:
        portfolio: Snapshot to check
        max_transactions: Maximum transactions accepted
        max_history_points: Maximum performance history points accepted

    Returns:
        Dictionary with the observed sizes

    Raises:
        InputLimitError: If either list is over its limit
    """
    sizes = {
        'transactions': len(portfolio.transactions),
        'performance_history': len(portfolio.performance_history),
        'holdings': len(portfolio.holdings),
    }

    if sizes['transactions'] > max_transactions:
        raise InputLimitError(
            f"Too many transactions: {sizes['transactions']} (limit {max_transactions})"
        )

    if sizes['performance_history'] > max_history_points:
        raise InputLimitError(
            f"Too many performance history points: {sizes['performance_history']} "
            f"(limit {max_history_points})"
        )

    return sizes
