"""Observability module for promptweave.

Provides structured logging.
"""

from promptweave.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
    get_logs_dir,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
    "get_logs_dir",
]
