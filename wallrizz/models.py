"""Common types and the error taxonomy."""

import json
from dataclasses import dataclass
from enum import Enum, IntEnum, StrEnum
from pathlib import Path
from typing import Any

from .ansi import BOLD, RED, colorize

__all__ = [
    "CacheMissError",
    "ColourPalette",
    "ControlFlow",
    "ExitCode",
    "ExtensionScript",
    "GET_DARK_THEME_CONF",
    "GET_LIGHT_THEME_CONF",
    "GET_THEMES",
    "ExtractionError",
    "OperationalError",
    "RegistrationError",
    "SET_THEME",
    "ScriptError",
    "ScriptShape",
    "StalenessCheckError",
    "Variant",
    "WallRizzError",
    "Wallpaper",
]

ColourPalette = list[str]

SET_THEME = "setTheme"
GET_THEMES = "getThemes"
GET_DARK_THEME_CONF = "getDarkThemeConf"
GET_LIGHT_THEME_CONF = "getLightThemeConf"


class Variant(StrEnum):
    """Light/dark flavor of a generated theme."""

    DARK = "dark"
    LIGHT = "light"


class ScriptShape(StrEnum):
    """The two capability sets an extension script may expose."""

    SEPARATE = "separate"  # setTheme, getDarkThemeConf, getLightThemeConf
    COMBINED = "combined"  # setTheme, getThemes


class ControlFlow(Enum):
    """Outcome returned (never raised) to request a clean early stop."""

    CONTINUE = "continue"
    STOP_REQUESTED = "stop"


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    FAILURE = 1
    REGISTRATION_ERROR = 2
    INTERRUPTED = 130  # 128 + SIGINT


@dataclass(frozen=True, slots=True)
class Wallpaper:
    """A wallpaper file known to the engine."""

    unique_id: str  # stored file name, the cache key
    name: str  # display only


@dataclass(frozen=True, slots=True)
class ExtensionScript:
    """A registered theme extension script."""

    name: str
    path: Path
    shape: ScriptShape
    cache_dir: Path


class WallRizzError(Exception):
    """Base class for all engine failures."""

    exit_code: ExitCode = ExitCode.FAILURE


class ExtractionError(WallRizzError):
    """The extraction command failed or produced no recognizable colour."""


class RegistrationError(WallRizzError):
    """An extension script can't be registered."""

    exit_code = ExitCode.REGISTRATION_ERROR

    def __init__(self, script: str | Path, missing: list[str] | None = None, reason: str = "") -> None:
        self.script = str(script)
        self.missing = missing or []
        self.reason = reason
        details = reason or f"missing capabilities: {', '.join(self.missing)}"
        super().__init__(f"Invalid extension script {self.script}: {details}")


class StalenessCheckError(WallRizzError):
    """The freshness of a cached artifact can't be determined."""


class CacheMissError(WallRizzError):
    """A palette or artifact was requested before being generated."""


class ScriptError(WallRizzError):
    """An exception raised by extension code."""

    def __init__(self, source_file: str | Path, cause: str) -> None:
        self.source_file = str(source_file)
        self.cause = cause
        super().__init__(f'Error in "{self.source_file}": {cause}')


class OperationalError(WallRizzError):
    """Operational failure distinct from script bugs (missing tool, bad configuration...).

    Extension scripts may raise it to report a readable diagnostic.
    """

    def __init__(self, name: str, description: str = "", body: Any = None) -> None:  # noqa: ANN401
        self.name = name
        self.description = description
        self.body = body
        super().__init__(name)

    def serialized_body(self) -> str:
        """Return the body as a JSON string."""
        return json.dumps(self.body, default=str)

    def format(self) -> str:
        """Return a human-readable, colored report."""
        text = f"\n  {colorize(self.name + ':', RED, BOLD)}\n  {colorize(self.description, RED)}\n"
        if self.body is not None:
            text += f"\n{self.body}\n"
        return text
