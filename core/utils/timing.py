"""Timing helper for startup tasks."""

import logging
import time
from contextlib import contextmanager

logger = logging.getLogger("core.timer")


@contextmanager
def time_taken(name: str):
    """Log how long the wrapped block took.

    Example:
        with time_taken("filesystem_startup"):
            provision_filesystem(paths, resizer)
    """
    logger.info(f"Task: {name} started.")
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"Task: {name} took {elapsed_ms:.1f}ms.")
