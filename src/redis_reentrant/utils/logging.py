"""Logging helpers with consistent formatting."""

from __future__ import annotations

import logging
import sys
from typing import Union

from rich.logging import RichHandler


def resolve_level(level: Union[int, str]) -> int:
    """Translate a level name such as ``"debug"`` into its numeric value."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def get_logger(name: str, level: Union[int, str] = logging.INFO, *, rich: bool = True) -> logging.Logger:
    """Configure and return a logger."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    numeric = resolve_level(level)
    logger.setLevel(numeric)

    if rich:
        handler: logging.Handler = RichHandler(
            level=numeric,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            show_time=True,
            show_path=False,
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(numeric)

    formatter = logging.Formatter(
        "%(asctime)s %(name)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def set_level(level: Union[int, str], *names: str) -> None:
    """Apply ``level`` to the named loggers and all of their handlers."""
    numeric = resolve_level(level)
    for name in names:
        logger = logging.getLogger(name)
        logger.setLevel(numeric)
        for handler in logger.handlers:
            handler.setLevel(numeric)
