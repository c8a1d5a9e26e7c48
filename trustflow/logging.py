"""Centralized logging configuration for trustflow.

Every module obtains its logger through :func:`get_logger`; all of them hang
off the single ``"trustflow"`` root logger configured here. The initial level
can be set through the ``TRUSTFLOW_LOG_LEVEL`` environment variable (a level
name such as ``DEBUG`` or a number).
"""

import logging
import os
import sys
from typing import Optional, Union

ROOT_LOGGER_NAME = "trustflow"
LOG_LEVEL_ENV = "TRUSTFLOW_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_ROOT_LOGGER_CONFIGURED = False


def _level_from_env(default: int) -> int:
    """Resolve the level named by ``TRUSTFLOW_LOG_LEVEL`` or return ``default``."""
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    # getLevelName returns "Level <name>" strings for unknown names
    return level if isinstance(level, int) else default


def setup_root_logger(
    level: Optional[int] = None,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Attach one handler to the ``trustflow`` root logger.

    Calling it again is a no-op until :func:`reset_logging` runs.

    Args:
        level: Logging level. Defaults to ``TRUSTFLOW_LOG_LEVEL`` or INFO.
        format_string: Custom format string (optional).
        handler: Custom handler (optional, defaults to a stdout StreamHandler).
    """
    global _ROOT_LOGGER_CONFIGURED

    if _ROOT_LOGGER_CONFIGURED:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level if level is not None else _level_from_env(logging.INFO))
    root_logger.handlers.clear()

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    root_logger.addHandler(handler)

    # Propagate so pytest's caplog sees package records
    root_logger.propagate = True

    _ROOT_LOGGER_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a package logger that inherits the root configuration.

    Args:
        name: Logger name, normally ``__name__`` of the calling module.

    Returns:
        Logger with level NOTSET so the ``trustflow`` root level applies.
    """
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: Union[int, str]) -> None:
    """Set the level of the root logger and of its handlers.

    Args:
        level: Numeric level or a level name such as ``"warning"``.
    """
    setup_root_logger()
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level '{level}'")
        level = resolved

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def reset_logging() -> None:
    """Drop handlers and forget the configuration (used by tests)."""
    global _ROOT_LOGGER_CONFIGURED
    _ROOT_LOGGER_CONFIGURED = False

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)


setup_root_logger()
