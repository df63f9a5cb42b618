"""Bounded concurrency runner for deferred tasks."""

__all__ = ["ConcurrencyLimitedScheduler", "Task", "resolve_limit"]

import asyncio
import contextlib
import logging
import os
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from .constants import DEFAULT_PROCESS_LIMIT

Task = Callable[[], Awaitable[Any]]


def resolve_limit(explicit: int | None = None) -> int:
    """Return the concurrency limit to use.

    Explicit value first, then the available CPUs minus the main one,
    DEFAULT_PROCESS_LIMIT when the CPU count can't be determined.
    """
    if explicit:
        return explicit
    try:
        cpus = len(os.sched_getaffinity(0))
    except (AttributeError, OSError):
        cpus = os.cpu_count() or 0
    if not cpus:
        return DEFAULT_PROCESS_LIMIT
    return max(1, cpus - 1)


class ConcurrencyLimitedScheduler:
    """Runs batches of tasks with at most `limit` of them in flight.

    Tasks are started in submission order, completion order is unconstrained.
    The first failure cancels the rest of the batch and is raised.
    """

    def __init__(self, limit: int, log: logging.Logger) -> None:
        if limit < 1:
            msg = f"Invalid concurrency limit: {limit}"
            raise ValueError(msg)
        self.limit = limit
        self.log = log

    async def run(self, tasks: Iterable[Task], limit: int | None = None) -> None:
        """Run all `tasks`, waiting for a free slot before starting each one.

        Args:
            tasks: Deferred computations, each returning an awaitable when called
            limit: Overrides the scheduler's limit for this batch
        """
        bound = limit or self.limit
        working: set[asyncio.Future] = set()
        try:
            for task in tasks:
                while len(working) >= bound:
                    done, working = await asyncio.wait(working, return_when=asyncio.FIRST_COMPLETED)
                    self._check(done)
                working.add(asyncio.ensure_future(task()))
            while working:
                done, working = await asyncio.wait(working, return_when=asyncio.FIRST_EXCEPTION)
                self._check(done)
        finally:
            await self._cancel(working)

    @staticmethod
    def _check(done: set[asyncio.Future]) -> None:
        """Raise the first error found in `done`."""
        errors = [future.exception() for future in done if not future.cancelled()]
        for error in errors:
            if error is not None:
                raise error

    async def _cancel(self, pending: set[asyncio.Future]) -> None:
        """Cancel unfinished tasks and wait for their cleanup."""
        if not pending:
            return
        self.log.debug("Cancelling %d pending tasks", len(pending))
        for future in pending:
            future.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await asyncio.gather(*pending, return_exceptions=True)
