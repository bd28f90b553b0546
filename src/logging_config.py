"""Logging configuration for py2048."""

import logging
import sys

FORMATS = {
    "simple": "%(name)s - %(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
}


def setup_logging(level: str = "INFO", format_style: str = "simple") -> None:
    """
    Set up logging for the whole application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_style: "simple" or "detailed"; unknown styles fall back to "simple"
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format=FORMATS.get(format_style, FORMATS["simple"]),
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
