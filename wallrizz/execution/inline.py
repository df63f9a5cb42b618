"""Extension execution in the calling process."""

__all__ = ["InlineStrategy"]

from pathlib import Path
from types import ModuleType
from typing import Any

from .base import ExecutionStrategy, import_script, run_capabilities
from .protocol import ExecutionRequest


class InlineStrategy(ExecutionStrategy):
    """Imports scripts once and calls them directly."""

    _modules: dict[Path, ModuleType]

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._modules = {}

    def _get_module(self, script_path: str) -> ModuleType:
        path = Path(script_path).resolve()
        module = self._modules.get(path)
        if module is None:
            module = import_script(path)
            self._modules[path] = module
        return module

    async def _run(self, request: ExecutionRequest) -> dict[str, Any]:
        return await run_capabilities(self._get_module(request.script_path), request, self.log)
