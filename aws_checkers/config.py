"""Runtime config for checker modules (simple dependency injection)."""

from __future__ import annotations
from typing import Optional
import logging

LOGGER: Optional[logging.Logger] = None


def setup(*, logger: Optional[logging.Logger] = None) -> None:
    """Provide the shared logger to all checker modules."""
    # pylint: disable=global-statement
    global LOGGER
    LOGGER = logger or logging.getLogger("aws_checkers")
