"""
Pure calculation functions: returns, ratios, drawdown, Value-at-Risk.
"""
