"""Logging configuration for the rendezvous relay.

The relay's own records and aiohttp's request/server records go through
one set of handlers, so a single log file shows each request line next
to the pairing events it caused.
"""

import logging
from pathlib import Path

from rendezvous.config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# aiohttp.access carries one line per request; aiohttp.server carries
# handler crashes that never reach our middleware.
SHARED_LOGGERS = ("aiohttp.access", "aiohttp.server")

_logger: logging.Logger | None = None
_handlers: list[logging.Handler] = []


def _build_handlers(config: Config) -> list[logging.Handler]:
    """Create the console handler plus a file handler if configured."""
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _attach(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    logger.handlers.clear()
    for handler in _handlers:
        logger.addHandler(handler)
    logger.propagate = False


def setup_logging(config: Config) -> logging.Logger:
    """Set up relay and aiohttp logging from configuration.

    Only the first call configures anything; later calls return the
    same logger.

    Args:
        config: Configuration object with log settings.

    Returns:
        The "rendezvous" package logger.
    """
    global _logger

    if _logger is not None:
        return _logger

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    _handlers.extend(_build_handlers(config))

    logger = logging.getLogger("rendezvous")
    _attach(logger, level)
    for name in SHARED_LOGGERS:
        _attach(logging.getLogger(name), level)

    _logger = logger
    return logger


def reset_logging() -> None:
    """Detach and close all handlers. Used for testing."""
    global _logger
    if _logger is None:
        return

    for name in ("rendezvous", *SHARED_LOGGERS):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
    for handler in _handlers:
        handler.close()
    _handlers.clear()
    _logger = None
