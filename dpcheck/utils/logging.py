"""Logging utilities for dpcheck."""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "DPCHECK_LOG_LEVEL"


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger with rich formatting.

    Args:
        name: Logger name
        level: Log level (default: $DPCHECK_LOG_LEVEL or INFO)

    Returns:
        Configured logger
    """
    logger = logging.getLogger(f"dpcheck.{name}")

    if logger.handlers:
        return logger

    level_name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    rich_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    rich_handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
    logger.addHandler(rich_handler)

    # pytest's caplog and any outer collector hang off the root logger
    logger.propagate = True

    return logger


def mask(value: Optional[str], keep: int = 8) -> str:
    """Render a secret with only its first ``keep`` characters visible."""
    if not value:
        return "<unset>"
    return f"{value[:keep]}..."


def mask_username(username: Optional[str]) -> str:
    if not username:
        return "<unset>"
    return f"{username[:3]}***"
