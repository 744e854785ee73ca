"""
Logging setup for command-line runs.
Library modules only create named loggers; the entry point configures handlers.
"""

import logging


LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def configure_logging(level: str = 'INFO') -> None:
    """
    Configure root logging once for a CLI invocation.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        force=True
    )
