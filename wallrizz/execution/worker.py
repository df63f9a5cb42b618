"""Worker process entry point: `python -m wallrizz.execution.worker`.

Reads JSON messages on stdin, runs the requested capabilities and replies
with a single outcome on stdout. Script output printed on stdout is
redirected to stderr to keep the channel clean.
"""

import asyncio
import logging
import os
import sys
import traceback
from typing import TextIO

from ..logging_setup import get_logger, init_logger
from ..models import OperationalError, ScriptError
from .base import import_script, run_capabilities
from .protocol import (
    ExecutionRequest,
    MessageType,
    Outcome,
    ScriptFailure,
    Success,
    SystemFailure,
    decode_command,
    encode_outcome,
    pack_results,
)


async def handle(request: ExecutionRequest, log: logging.Logger) -> Outcome:
    """Run `request` and return its outcome, never raises."""
    try:
        module = import_script(request.script_path)
        results = await run_capabilities(module, request, log)
    except ScriptError as e:
        return ScriptFailure(e.source_file, e.cause)
    except OperationalError as e:
        return SystemFailure(e.name, e.description, e.serialized_body())
    except Exception as e:  # pylint: disable=broad-except
        return SystemFailure("Extension worker failure", str(e), traceback.format_exc())
    return Success(pack_results(results))


async def serve(channel: TextIO, log: logging.Logger) -> None:
    """Process messages until abort or end of input."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)

    async def execute(request: ExecutionRequest) -> None:
        outcome = await handle(request, log)
        channel.write(encode_outcome(outcome) + "\n")
        channel.flush()

    running: asyncio.Task | None = None
    while line := await reader.readline():
        message = decode_command(line)
        if message is None:
            log.warning("Ignoring unknown message: %.80s", line)
            continue
        message_type, request = message
        if message_type == MessageType.ABORT:
            break
        if request is not None and running is None:
            running = asyncio.create_task(execute(request))

    if running is not None and not running.done():
        running.cancel()
        try:
            await running
        except asyncio.CancelledError:
            log.debug("Request aborted")


def main() -> None:
    """Run the worker."""
    init_logger()
    channel = os.fdopen(os.dup(sys.stdout.fileno()), "w", encoding="utf-8")
    os.dup2(sys.stderr.fileno(), sys.stdout.fileno())
    try:
        asyncio.run(serve(channel, get_logger("wallrizz.worker")))
    finally:
        channel.close()


if __name__ == "__main__":
    main()
