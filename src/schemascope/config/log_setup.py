"""Process-wide logging setup for the CLI and server entry points."""
from __future__ import annotations

import logging
import sys

from .app import LoggingConfig


def configure_logging(config: LoggingConfig | None = None, verbose: bool = False) -> None:
    """Configure root logging to stderr.

    Args:
        config: Logging section of the app config (defaults when None)
        verbose: Force DEBUG regardless of the configured level
    """
    config = config or LoggingConfig()
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper())

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ],
        force=True,
    )
