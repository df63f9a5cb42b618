"""Discovery and validation of theme extension scripts."""

__all__ = ["ExtensionRegistry", "detect_shape"]

import logging
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType

from .aioops import aimakedirs, ailistdir
from .execution.base import import_script
from .models import (
    GET_DARK_THEME_CONF,
    GET_LIGHT_THEME_CONF,
    GET_THEMES,
    SET_THEME,
    ExtensionScript,
    RegistrationError,
    ScriptError,
    ScriptShape,
)

SCRIPT_SUFFIX = ".py"


def _has(module: ModuleType, capability: str) -> bool:
    return callable(getattr(module, capability, None))


def detect_shape(module: ModuleType, path: Path) -> ScriptShape:
    """Return the shape of a script from the capabilities it exposes.

    Raises:
        RegistrationError: If the capability set is incomplete
    """
    missing = [] if _has(module, SET_THEME) else [SET_THEME]
    if _has(module, GET_THEMES):
        shape = ScriptShape.COMBINED
    elif _has(module, GET_DARK_THEME_CONF) and _has(module, GET_LIGHT_THEME_CONF):
        shape = ScriptShape.SEPARATE
    else:
        missing.extend(
            name for name in (GET_THEMES, GET_DARK_THEME_CONF, GET_LIGHT_THEME_CONF) if not _has(module, name)
        )
        shape = None
    if missing or shape is None:
        raise RegistrationError(path, missing)
    return shape


class ExtensionRegistry:
    """The extension scripts found at startup, by file name.

    Attributes:
        themes_cache_dir: Parent of the per-script artifact directories
    """

    def __init__(self, themes_cache_dir: Path, log: logging.Logger) -> None:
        self.themes_cache_dir = themes_cache_dir
        self.log = log
        self.scripts: dict[str, ExtensionScript] = {}

    def __getitem__(self, name: str) -> ExtensionScript:
        return self.scripts[name]

    def __iter__(self) -> Iterator[ExtensionScript]:
        return iter(self.scripts.values())

    def __len__(self) -> int:
        return len(self.scripts)

    async def load(self, directory: Path) -> dict[str, ExtensionScript]:
        """Register every script of `directory`.

        Raises:
            RegistrationError: If a script can't be imported or lacks capabilities
        """
        await aimakedirs(directory, exist_ok=True)
        names = sorted(
            name for name in await ailistdir(directory) if name.endswith(SCRIPT_SUFFIX) and not name.startswith(".")
        )
        scripts = {}
        for name in names:
            path = directory / name
            try:
                module = import_script(path)
            except ScriptError as e:
                self.log.error("Unable to load extension %s: %s", name, e.cause)
                raise RegistrationError(path, reason=e.cause) from e
            shape = detect_shape(module, path)
            cache_dir = self.themes_cache_dir / name
            await aimakedirs(cache_dir, exist_ok=True)
            scripts[name] = ExtensionScript(name=name, path=path, shape=shape, cache_dir=cache_dir)
            self.log.debug("Registered %s (%s)", name, shape)
        self.scripts = scripts
        return scripts
