#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/logging_utils.py
"""Centralized logging utilities for mdtex entry points."""

from __future__ import annotations

import logging
import sys
from typing import Optional

# Diagnostics raised during conversion are WARNING; quiet mode hides them.
QUIET_LEVEL = logging.ERROR


def resolve_log_level(log_level: int | str | None = None, verbosity: int = 0, quiet: bool = False) -> int:
    """Resolve the effective numeric log level from CLI style settings.

    Parameters
    ----------
    log_level : int | str, optional
        Explicit level name or number. Takes precedence when given.
    verbosity : int, default 0
        Number of ``-v`` flags. One selects INFO, two or more DEBUG.
    quiet : bool, default False
        Suppress everything below ERROR.

    Returns
    -------
    int
        Numeric logging level.

    """
    if log_level is not None:
        if isinstance(log_level, int):
            return log_level
        return getattr(logging, str(log_level).upper(), logging.WARNING)
    if quiet:
        return QUIET_LEVEL
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Configure root logging handlers for the CLI.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or string name (e.g., "INFO").
    log_file : str, optional
        Optional path to a log file for teeing log output.
    trace_mode : bool, default False
        When true, emit timestamps and logger names for debugging traces.

    Returns
    -------
    logging.Logger
        The configured root logger instance.

    """
    resolved_level = resolve_log_level(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)
    root_logger.handlers.clear()

    format_str = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s" if trace_mode else "%(levelname)s: %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S" if trace_mode else None
    formatter = logging.Formatter(format_str, datefmt=date_format)

    # LaTeX may go to stdout, so diagnostics always go to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            root_logger.warning("Could not create log file %s: %s", log_file, exc)
        else:
            file_handler.setLevel(resolved_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            root_logger.info("Logging to file: %s", log_file)

    return root_logger
