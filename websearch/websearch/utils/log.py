"""Package logger.

All output goes to stderr: stdout is reserved for protocol frames.
"""

import logging
import os
import sys
from typing import Any, Optional, Union

LOGGER_NAME = "websearch"
LOG_LEVEL_ENV = "WEBSEARCH_LOG_LEVEL"

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _resolve_level(level: Union[str, int, None]) -> int:
  if level is None:
    return logging.WARNING
  if isinstance(level, int):
    return level
  resolved = logging.getLevelName(level.strip().upper())
  if isinstance(resolved, int):
    return resolved
  return logging.WARNING


def build_logger(name: str = LOGGER_NAME, level: Union[str, int, None] = None) -> logging.Logger:
  """Create (or fetch) the package logger with a single stderr handler."""
  _logger = logging.getLogger(name)
  if not any(getattr(h, "_websearch_handler", False) for h in _logger.handlers):
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._websearch_handler = True  # type: ignore[attr-defined]
    _logger.addHandler(handler)
  _logger.setLevel(_resolve_level(level if level is not None else os.environ.get(LOG_LEVEL_ENV)))
  _logger.propagate = False
  return _logger


logger: logging.Logger = build_logger()


def set_log_level(level: Union[str, int, None]) -> None:
  """Change the package log level (e.g. ``"DEBUG"``)."""
  logger.setLevel(_resolve_level(level))


def log_debug(msg: str, *args: Any, exc_info: Optional[bool] = None) -> None:
  logger.debug(msg, *args, exc_info=exc_info)


def log_info(msg: str, *args: Any) -> None:
  logger.info(msg, *args)


def log_warning(msg: str, *args: Any) -> None:
  logger.warning(msg, *args)


def log_error(msg: str, *args: Any, exc_info: Optional[bool] = None) -> None:
  logger.error(msg, *args, exc_info=exc_info)
