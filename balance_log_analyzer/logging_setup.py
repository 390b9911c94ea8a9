"""Centralized logging configuration for the balance_log_analyzer package.

Library modules only call ``get_logger("balance_log_analyzer.<module>")``; the
console entrypoint calls ``configure_logging()`` once at startup.
"""

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "balance_log_analyzer"
_LEVEL_ENV_VAR_NAME = "BALANCE_LOG_ANALYZER_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_configured = False


def _parse_level(level: int | str | None) -> int:
    """Resolve level from argument, environment override, or WARNING default."""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        text = level.strip().upper()
        if text.isdigit():
            return int(text)
        numeric = logging.getLevelName(text)
        if isinstance(numeric, int):
            return numeric
    if env_value := os.environ.get(_LEVEL_ENV_VAR_NAME):
        return _parse_level(env_value)
    return logging.WARNING


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Attach one stream handler to the package logger, exactly once."""
    global _configured
    if _configured:
        return
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return named logger, keeping the package root silent until configured."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _configured and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
