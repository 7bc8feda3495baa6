"""Logging setup shared by the CLI and scripts."""
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def configure_root(level: int = logging.INFO) -> None:
    """Reset the root logger to a single stderr handler.

    stdout is reserved for the stdio transport, so nothing may log there.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


__all__ = ["LOG_FORMAT", "configure_root"]
