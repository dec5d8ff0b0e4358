"""Logging utilities for licaudit commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "licaudit"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the licaudit hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _console_level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the licaudit logger for CLI runs.

    Console records go to stderr so the audit table on stdout stays
    machine-readable. ``quiet`` hides milestone messages; ``verbose`` wins
    over ``quiet``. The optional file sink always records debug detail.
    """
    console_level = _console_level(verbose, quiet)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else console_level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(console_level)
    stream_handler.setFormatter(logging.Formatter("[licaudit] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
