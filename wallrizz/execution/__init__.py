"""Extension script execution, in process or in worker processes."""

import logging

from .base import ExecutionStrategy
from .inline import InlineStrategy
from .isolated import IsolatedStrategy
from .protocol import ExecutionRequest

__all__ = ["ExecutionRequest", "ExecutionStrategy", "InlineStrategy", "IsolatedStrategy", "create_strategy"]


def create_strategy(limit: int, log: logging.Logger, timeout: float = 0) -> ExecutionStrategy:
    """Return the strategy matching the concurrency limit.

    A limit of 1 runs scripts inline, anything else uses worker processes.
    """
    if limit == 1:
        log.debug("Running extensions inline")
        return InlineStrategy(log)
    log.debug("Running extensions in worker processes")
    return IsolatedStrategy(log, timeout=timeout)
