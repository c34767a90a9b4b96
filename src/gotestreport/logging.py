"""Logging for gotestreport.

Everything logs under the ``gotestreport`` logger. Records go to stderr so
that stdout carries only the run summary and report path printed by the CLI,
which keeps ``go test -json ./... | gotestreport > summary.txt`` usable.

The CLI maps its flags onto levels with ``configure_cli_logging``:

    (none)      INFO     "Test report generated successfully"
    -v          DEBUG    event, suite and case counts from the reader/engine
    -q          WARNING  errors only
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "gotestreport"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_configured = False


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Attach the single stderr handler to the package logger.

    Later calls are no-ops until ``reset_logging()``.

    Args:
        level: Logging level (default: INFO).
        format_string: Custom format string (default: ``DEFAULT_FORMAT``).
        handler: Custom handler (default: StreamHandler on stderr).
    """
    global _configured
    if _configured:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    root_logger.addHandler(handler)

    # caplog listens on the stdlib root logger
    root_logger.propagate = True
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger that defers its level to ``gotestreport``."""
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Set the level of the package logger and its handlers."""
    setup_root_logger()
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def enable_debug_logging() -> None:
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    set_global_log_level(logging.INFO)


def level_for_flags(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI's ``-v``/``-q`` flags to a level. ``-v`` wins over ``-q``."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_cli_logging(verbose: bool = False, quiet: bool = False) -> int:
    """Apply the CLI verbosity flags and return the level chosen."""
    level = level_for_flags(verbose, quiet)
    set_global_log_level(level)
    return level


def reset_logging() -> None:
    """Drop the handler and level so the next setup starts fresh (tests)."""
    global _configured
    _configured = False
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)


setup_root_logger()
