"""Logging configuration for the application."""

import logging
import os
import sys


def configure_logging(level: str = "") -> None:
    """Configure root logging from ``level`` or the LOG_LEVEL environment variable.

    Log records go to stderr so stdout carries only command output.
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level_int = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(
        level=log_level_int,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
