"""Extension execution in short-lived worker processes."""

__all__ = ["IsolatedStrategy", "WorkerSession"]

import asyncio
import contextlib
import logging
import os
import sys
from pathlib import Path
from typing import Any

from ..constants import WORKER_GRACEFUL_TIMEOUT
from ..models import OperationalError
from ..process import ManagedProcess
from .base import ExecutionStrategy
from .protocol import (
    ExecutionRequest,
    Outcome,
    Success,
    decode_outcome,
    encode_abort,
    encode_start,
    outcome_to_error,
    unpack_results,
)

WORKER_MODULE = "wallrizz.execution.worker"
STREAM_LIMIT = 2**24  # replies carry whole theme files on one line
PACKAGE_ROOT = Path(__file__).resolve().parents[2]


def _worker_env() -> dict[str, str]:
    env = os.environ.copy()
    paths = [str(PACKAGE_ROOT)]
    if env.get("PYTHONPATH"):
        paths.append(env["PYTHONPATH"])
    env["PYTHONPATH"] = os.pathsep.join(paths)
    return env


class WorkerSession:
    """One request handled by one worker process.

    The first terminal message resolves the session and detaches the
    message handler, anything received afterwards is dropped.
    """

    def __init__(self, log: logging.Logger) -> None:
        self.log = log
        self.proc = ManagedProcess(graceful_timeout=WORKER_GRACEFUL_TIMEOUT)
        self.result: asyncio.Future[Outcome] = asyncio.get_running_loop().create_future()
        self._handler = self._on_message
        self._reader: asyncio.Task | None = None
        self._aborted = False

    def dispatch(self, line: str) -> None:
        """Route a line received from the worker."""
        if self._handler is None:
            self.log.debug("Ignoring worker message after completion: %.80s", line)
            return
        self._handler(line)

    def _on_message(self, line: str) -> None:
        outcome = decode_outcome(line)
        if outcome is None:
            self.log.warning("Ignoring unknown worker message: %.80s", line)
            return
        self._handler = None
        if not self.result.done():
            self.result.set_result(outcome)

    async def _read(self) -> None:
        try:
            async for line in self.proc.iter_lines():
                if line:
                    self.dispatch(line)
        except ValueError as e:
            # readline() refuses lines over STREAM_LIMIT
            if not self.result.done():
                self.result.set_exception(OperationalError("Invalid worker output", str(e)))
            return
        if not self.result.done():
            returncode = await self.proc.wait()
            self.result.set_exception(
                OperationalError(
                    "Extension worker crashed",
                    "The worker process exited without reporting a result.",
                    {"returncode": returncode},
                )
            )

    async def run(self, request: ExecutionRequest) -> Outcome:
        """Start a worker for `request` and wait for its outcome."""
        try:
            await self.proc.start_exec(
                sys.executable,
                "-m",
                WORKER_MODULE,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                env=_worker_env(),
                limit=STREAM_LIMIT,
            )
        except OSError as e:
            raise OperationalError("Unable to start extension worker", str(e)) from e
        self._reader = asyncio.create_task(self._read())
        await self.proc.send_line(encode_start(request))
        try:
            return await self.result
        finally:
            await self.abort()

    async def abort(self) -> None:
        """Ask the worker to stop, then stop it. Safe to call more than once."""
        if self._aborted:
            return
        self._aborted = True
        self._handler = None
        if self.proc.is_alive:
            await self.proc.send_line(encode_abort())
        await self.proc.stop()
        if self._reader is not None:
            self._reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader
        if not self.result.done():
            self.result.cancel()


class IsolatedStrategy(ExecutionStrategy):
    """Runs every request in a fresh worker process.

    Attributes:
        timeout: Seconds before a worker is killed, 0 disables it
    """

    def __init__(self, log: logging.Logger, timeout: float = 0) -> None:
        super().__init__(log)
        self.timeout = timeout

    async def _run(self, request: ExecutionRequest) -> dict[str, Any]:
        session = WorkerSession(self.log)
        try:
            outcome = await asyncio.wait_for(session.run(request), timeout=self.timeout or None)
        except TimeoutError as e:
            raise OperationalError(
                "Extension timed out",
                f"{request.script_path} didn't answer within {self.timeout} seconds.",
                {"capabilities": list(request.capabilities)},
            ) from e
        finally:
            await session.abort()

        if isinstance(outcome, Success):
            return unpack_results(outcome.value)
        raise outcome_to_error(outcome)
