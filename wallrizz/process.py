"""Subprocess helpers.

run_command: run a shell command to completion, capturing its output.
ManagedProcess: a long running child talking over stdin/stdout lines,
stopped with SIGTERM then SIGKILL.
"""

__all__ = ["CommandResult", "ManagedProcess", "run_command"]

import asyncio
import contextlib
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class CommandResult:
    """Exit status and decoded output of a finished command."""

    returncode: int
    stdout: str
    stderr: str


async def run_command(command: str) -> CommandResult:
    """Run `command` through the shell.

    Raises:
        OSError: If the shell can't be spawned
    """
    proc = await asyncio.create_subprocess_shell(command, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE)
    out, err = await proc.communicate()
    return CommandResult(
        returncode=-1 if proc.returncode is None else proc.returncode,
        stdout=out.decode(errors="replace"),
        stderr=err.decode(errors="replace"),
    )


class ManagedProcess:
    """Owns at most one child process.

    Starting again stops the previous child. `stop` closes stdin, sends
    SIGTERM, waits `graceful_timeout` seconds then kills, and always reaps.
    """

    _proc: asyncio.subprocess.Process | None

    def __init__(self, graceful_timeout: float = 1.0) -> None:
        self._proc = None
        self._graceful_timeout = graceful_timeout

    @property
    def process(self) -> asyncio.subprocess.Process | None:
        return self._proc

    @property
    def pid(self) -> int | None:
        return None if self._proc is None else self._proc.pid

    @property
    def returncode(self) -> int | None:
        return None if self._proc is None else self._proc.returncode

    @property
    def is_alive(self) -> bool:
        return self._proc is not None and self._proc.returncode is None

    async def start(self, command: str, **kwargs: Any) -> None:  # noqa: ANN401
        """Run `command` through the shell, `kwargs` go to create_subprocess_shell."""
        await self.stop()
        self._proc = await asyncio.create_subprocess_shell(command, **kwargs)

    async def start_exec(self, program: str, *args: str, **kwargs: Any) -> None:  # noqa: ANN401
        """Run `program` directly, `kwargs` go to create_subprocess_exec."""
        await self.stop()
        self._proc = await asyncio.create_subprocess_exec(program, *args, **kwargs)

    async def send_line(self, line: str) -> None:
        """Write `line` to the child's stdin, dropped if the pipe is already closed.

        Raises:
            RuntimeError: If the child has no stdin pipe
        """
        stdin = None if self._proc is None else self._proc.stdin
        if stdin is None:
            msg = "No process or stdin not piped"
            raise RuntimeError(msg)
        if stdin.is_closing():
            return
        stdin.write(f"{line}\n".encode())
        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            await stdin.drain()

    async def iter_lines(self) -> AsyncIterator[str]:
        """Yield the stripped stdout lines until EOF.

        Raises:
            RuntimeError: If the child has no stdout pipe
        """
        stdout = None if self._proc is None else self._proc.stdout
        if stdout is None:
            msg = "No process or stdout not piped"
            raise RuntimeError(msg)
        while line := await stdout.readline():
            yield line.decode().strip()

    async def wait(self) -> int:
        """Return the exit code once the child is gone.

        Raises:
            RuntimeError: If nothing was started
        """
        if self._proc is None:
            msg = "No process running"
            raise RuntimeError(msg)
        return await self._proc.wait()

    async def stop(self) -> int | None:
        """Stop the child, returns its exit code (None if never started)."""
        proc = self._proc
        if proc is None:
            return None
        if proc.stdin is not None and not proc.stdin.is_closing():
            proc.stdin.close()
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.terminate()
            try:
                await asyncio.wait_for(proc.wait(), timeout=self._graceful_timeout)
            except TimeoutError:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()
        return proc.returncode
