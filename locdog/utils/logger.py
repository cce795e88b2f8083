"""Structured JSON logging configuration."""

import logging
import sys
from pythonjsonlogger import jsonlogger


LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'


def setup_logger(name: str = "locdog", level: str = "INFO") -> logging.Logger:
    """
    Configure structured JSON logging for a locdog logger.

    Component loggers are derived with ``logger.getChild(...)`` and inherit
    the handler installed here.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        logging.Logger: Configured logger instance

    Raises:
        ValueError: If level is not a known logging level name
    """
    level_value = getattr(logging, level.upper(), None)
    if not isinstance(level_value, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(name)
    logger.setLevel(level_value)

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(LOG_FORMAT, timestamp=True)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.propagate = False

    return logger
