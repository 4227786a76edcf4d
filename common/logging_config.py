import logging
import os
import sys
from typing import Iterable, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def resolve_level(log_level: Optional[str]) -> int:
    """
    Translate a level name into a logging level.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or WARNING

    Returns:
        Numeric logging level; unknown names fall back to WARNING
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'WARNING')
    return getattr(logging, log_level.upper(), logging.WARNING)


def setup_logging(component_name: str, log_level: Optional[str] = None) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Log output goes to stderr: stdout is reserved for command
    output, including object contents written with ``--local -``.

    Args:
        component_name: Name of the top-level package (e.g., 'cli', 'gridstore')
        log_level: Log level name. Defaults to LOG_LEVEL env var or WARNING

    Returns:
        Configured logger instance
    """
    level = resolve_level(log_level)
    stream = sys.stderr

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
            if isinstance(handler, logging.StreamHandler):
                handler.setStream(stream)
        return logger

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def setup_components(components: Iterable[str], log_level: Optional[str] = None) -> None:
    """Configure several component loggers with the same level."""
    for component in components:
        setup_logging(component, log_level=log_level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
