"""Logging setup for the fill engine.

Loaders log table summaries at INFO, candidate and chain queries log their
rejection counts at DEBUG, commits log at INFO and failed validations or
unsolvable slot sets log at WARNING. Everything goes through loggers named
under ``cruxword``.
"""

from __future__ import annotations

import logging
from typing import Optional


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging with a sensible formatter.

    Candidate and chain queries run interactively, so per-query detail is
    kept at DEBUG and only load summaries and commits surface at INFO.
    Callers may reconfigure before building a :class:`FillSession`.
    """

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger, configuring defaults if needed."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name or "cruxword")
