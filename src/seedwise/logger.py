"""Logging facade for seedwise.

All modules log through the helpers in this module (``logger.debug(...)``,
``logger.success(...)``) which forward to the ``seedwise`` stdlib logger.
"""

import logging
import sys
from typing import Any
from urllib.parse import urlsplit, urlunsplit

LOGGER_NAME = "seedwise"

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[37m",
    SUCCESS: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}
_RESET = "\033[0m"

_logger_instance: logging.Logger | None = None


class ColorFormatter(logging.Formatter):
    """Formatter that colors the level name when writing to a terminal."""

    def __init__(self, use_color: bool) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)
        color = _LEVEL_COLORS.get(record.levelno, "")
        original = record.levelname
        record.levelname = f"{color}{original}{_RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def init_logger(loglevel: str = "info") -> logging.Logger:
    """Initialize the seedwise logger.

    Args:
        loglevel: Level name (debug, info, success, warning, error, critical).

    Returns:
        logging.Logger: The configured logger.

    Raises:
        ValueError: If the level name is unknown.
    """
    global _logger_instance

    level = logging.getLevelName(loglevel.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {loglevel}")

    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(level)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ColorFormatter(use_color=sys.stdout.isatty()))
        log.addHandler(handler)

    _logger_instance = log
    return log


def get_logger() -> logging.Logger:
    """Get the seedwise logger, initializing it with defaults if needed."""
    if _logger_instance is None:
        return init_logger()
    return _logger_instance


def redact_url_password(url: str) -> str:
    """Replace the password part of a URL with asterisks.

    Args:
        url: URL possibly carrying ``user:password@`` credentials.

    Returns:
        str: The URL with the password redacted.
    """
    parts = urlsplit(url)
    if not parts.password:
        return url
    userinfo = f"{parts.username or ''}:****"
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return urlunsplit(parts._replace(netloc=f"{userinfo}@{host}"))


def debug(msg: str, *args: Any) -> None:
    get_logger().debug(msg, *args)


def info(msg: str, *args: Any) -> None:
    get_logger().info(msg, *args)


def success(msg: str, *args: Any) -> None:
    get_logger().log(SUCCESS, msg, *args)


def warning(msg: str, *args: Any) -> None:
    get_logger().warning(msg, *args)


def error(msg: str, *args: Any) -> None:
    get_logger().error(msg, *args)


def critical(msg: str, *args: Any) -> None:
    get_logger().critical(msg, *args)


def exception(msg: str, *args: Any) -> None:
    get_logger().exception(msg, *args)
