"""
Logging configuration.
"""
import logging
import sys

from webperf.config import settings

# Create logger
logger = logging.getLogger("webperf")
logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

# Console handler (stderr keeps stdout clean for reports)
console_handler = logging.StreamHandler(sys.stderr)
console_handler.setLevel(logging.DEBUG)

# Formatter
formatter = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
console_handler.setFormatter(formatter)

# Add handler
if not logger.handlers:
    logger.addHandler(console_handler)


def set_level(level: int) -> None:
    """Change the package log level (used by the CLI --verbose flag)."""
    logger.setLevel(level)
