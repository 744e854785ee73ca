"""
Shared utilities: settings resolution and logging setup.
"""
