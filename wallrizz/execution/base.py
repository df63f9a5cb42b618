"""Common part of the extension execution strategies."""

__all__ = ["ExecutionStrategy", "import_script", "run_capabilities", "write_outputs"]

import importlib.util
import inspect
import logging
import sys
import traceback
from abc import ABC, abstractmethod
from pathlib import Path
from types import ModuleType
from typing import Any

from ..aioops import aimakedirs, aiopen
from ..models import ControlFlow, OperationalError, ScriptError
from .protocol import ExecutionRequest


def import_script(path: str | Path) -> ModuleType:
    """Import an extension script from its file.

    Raises:
        ScriptError: If the module can't be loaded
    """
    path = Path(path)
    module_name = f"wallrizz_extension_{path.stem}_{abs(hash(str(path.resolve())))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ScriptError(path, "not a python module")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:  # pylint: disable=broad-except
        del sys.modules[module_name]
        raise ScriptError(path, _describe(e)) from e
    return module


def _describe(error: BaseException) -> str:
    return "".join(traceback.format_exception_only(type(error), error)).strip()


async def run_capabilities(module: ModuleType, request: ExecutionRequest, log: logging.Logger) -> dict[str, Any]:
    """Call the requested capabilities of `module` in order.

    Returns a mapping of capability -> result. `ControlFlow.STOP_REQUESTED`
    only ends the capability which returned it, the next ones still run.

    Raises:
        ScriptError: If a capability is missing or raises
        OperationalError: Raised by the script itself
    """
    results: dict[str, Any] = {}
    for capability in request.capabilities:
        function = getattr(module, capability, None)
        if not callable(function):
            raise ScriptError(request.script_path, f"{capability} is not defined")
        try:
            result = function(*request.args)
            if inspect.isawaitable(result):
                result = await result
        except OperationalError:
            raise
        except Exception as e:  # pylint: disable=broad-except
            log.debug("%s.%s failed", request.script_path, capability, exc_info=True)
            raise ScriptError(request.script_path, _describe(e)) from e
        if result is ControlFlow.CONTINUE:
            result = None
        results[capability] = result
        if result is ControlFlow.STOP_REQUESTED:
            log.debug("%s requested a stop from %s", request.script_path, capability)
    return results


async def write_outputs(request: ExecutionRequest, results: dict[str, Any]) -> None:
    """Write each string result to the output path of its capability."""
    for capability, output_path in request.capabilities.items():
        value = results.get(capability)
        if not output_path or not value or not isinstance(value, str):
            continue
        path = Path(output_path)
        await aimakedirs(path.parent, exist_ok=True)
        async with aiopen(path, "w", encoding="utf-8") as f:
            await f.write(value)


class ExecutionStrategy(ABC):
    """Runs extension script capabilities.

    `execute` returns capability -> result for every capability called,
    a capability which asked to stop maps to `ControlFlow.STOP_REQUESTED`.
    """

    def __init__(self, log: logging.Logger) -> None:
        self.log = log

    @abstractmethod
    async def _run(self, request: ExecutionRequest) -> dict[str, Any]:
        """Call the capabilities, without writing outputs."""

    async def execute(self, request: ExecutionRequest) -> dict[str, Any]:
        """Run `request` and write its outputs.

        Raises:
            ScriptError: On a failure of the extension code
            OperationalError: On any other failure
        """
        results = await self._run(request)
        await write_outputs(request, results)
        return results

    async def invoke(
        self,
        script_path: str | Path,
        capability: str,
        args: list[Any] | None = None,
        output_path: str | Path | None = None,
    ) -> Any:  # noqa: ANN401
        """Call a single capability and return its result."""
        request = ExecutionRequest(
            script_path=str(script_path),
            capabilities={capability: str(output_path) if output_path else None},
            args=list(args or []),
        )
        results = await self.execute(request)
        return results.get(capability)

    async def close(self) -> None:
        """Release resources held by the strategy."""
