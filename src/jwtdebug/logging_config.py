"""Python logging configuration for the jwtdebug CLI.

Log records go to stderr so that stdout stays usable for JSON and raw output.

Environment Variables:
    JWTDEBUG_LOG_LEVEL: Logging level override (DEBUG, INFO, WARNING, ERROR)
    JWTDEBUG_LOG_FORMAT: Log message format (default: see below)
"""

import logging
import os
import sys
from typing import Optional

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        """Format the log record with colors."""
        msg = super().format(record)
        color = self.COLORS.get(record.levelname, '')
        if color:
            msg = f"{color}{msg}{self.RESET}"
        return msg


def setup_logging(
    log_level: Optional[str] = None,
    use_colors: bool = True,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """Configure the ``jwtdebug`` logger with a stderr handler.

    Args:
        log_level: Logging level name (if None, reads JWTDEBUG_LOG_LEVEL, default WARNING)
        use_colors: Whether to use colored output when stderr is a TTY
        log_format: Custom log format (if None, reads JWTDEBUG_LOG_FORMAT)

    Returns:
        Configured package logger
    """
    env_level = os.getenv('JWTDEBUG_LOG_LEVEL')
    if env_level:
        log_level = env_level
    if log_level is None:
        log_level = 'WARNING'
    level = getattr(logging, log_level.upper(), logging.WARNING)

    if log_format is None:
        log_format = os.getenv('JWTDEBUG_LOG_FORMAT', DEFAULT_LOG_FORMAT)

    logger = logging.getLogger('jwtdebug')
    # Repeated CLI invocations in one process (tests) must not stack handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if use_colors and sys.stderr.isatty():
        handler.setFormatter(ColoredFormatter(log_format))
    else:
        handler.setFormatter(logging.Formatter(log_format))

    logger.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False

    logger.debug(f"Logging configured: level={logging.getLevelName(level)}")
    return logger
