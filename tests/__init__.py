"""
Shared test helpers for portfolio exports.

Includes:
- Snapshot factories (tests.factories)
- JSON snapshot fixtures (tests/fixtures)
"""
