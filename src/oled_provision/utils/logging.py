"""Logging configuration helpers for the provisioning CLI."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> int:
    """Install the root handler and return the level that was applied.

    Debug output includes every external command before it runs, so it is only
    enabled when the operator asks for it.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    return level
