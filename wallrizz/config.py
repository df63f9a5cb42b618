"""Typed access to the configuration section."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from .constants import CACHE_DIR, COLOURS_CACHE_FILENAME, THEMES_CACHE_DIRNAME

if TYPE_CHECKING:
    import logging

    from .validation import ConfigItems

__all__ = ["BOOL_FALSE_STRINGS", "BOOL_STRINGS", "BOOL_TRUE_STRINGS", "Configuration", "coerce_to_bool"]

ConfigValueType = float | bool | str | list | dict

BOOL_TRUE_STRINGS = frozenset({"true", "yes", "on", "1", "enabled"})
BOOL_FALSE_STRINGS = frozenset({"false", "no", "off", "0", "disabled"})
BOOL_STRINGS = BOOL_TRUE_STRINGS | BOOL_FALSE_STRINGS


def coerce_to_bool(value: ConfigValueType | None, default: bool = False) -> bool:
    """Interpret loosely typed booleans ("yes", "off", 1...).

    None gives `default`, blank and false-like strings give False.
    """
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        return bool(text) and text not in BOOL_FALSE_STRINGS
    return bool(value)


class Configuration(dict):
    """The `[wallrizz]` section, falling back to the schema defaults.

    Invalid numbers are logged and replaced with the getter's default.
    """

    def __init__(self, *args: Any, logger: logging.Logger, schema: ConfigItems | None = None, **kwargs: Any) -> None:  # noqa: ANN401
        super().__init__(*args, **kwargs)
        self.log = logger
        self._defaults: dict[str, ConfigValueType] = {}
        if schema:
            self.set_schema(schema)

    def set_schema(self, schema: ConfigItems) -> None:
        """Use the defaults declared by `schema`."""
        self._defaults = {f.name: f.default for f in schema if f.default is not None}

    def get(self, name: str, default: ConfigValueType | None = None) -> ConfigValueType | None:  # type: ignore[override]
        """Return the configured value, else the schema default, else `default`."""
        if name in self:
            return self[name]  # type: ignore[no-any-return]
        return self._defaults.get(name, default)

    def get_bool(self, name: str, default: bool = False) -> bool:
        return coerce_to_bool(self.get(name), default)

    def _get_number(self, name: str, kind: type, default: float) -> Any:  # noqa: ANN401
        value = self.get(name)
        if value is None:
            return default
        try:
            return kind(value)
        except (ValueError, TypeError):
            self.log.warning("Invalid %s value for %s: %s", kind.__name__, name, value)
            return default

    def get_int(self, name: str, default: int = 0) -> int:
        return self._get_number(name, int, default)  # type: ignore[no-any-return]

    def get_float(self, name: str, default: float = 0.0) -> float:
        return self._get_number(name, float, default)  # type: ignore[no-any-return]

    def get_str(self, name: str, default: str = "") -> str:
        value = self.get(name)
        return default if value is None else str(value)

    def get_list(self, name: str) -> list[str]:
        """Return a list, a string is split on commas."""
        value = self.get(name)
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return [str(item) for item in value]  # type: ignore[union-attr]

    def get_path(self, name: str, default: Path) -> Path:
        """Return a path with `~` expanded, `default` when unset or empty."""
        value = self.get_str(name)
        return Path(value).expanduser() if value else default

    @property
    def cache_dir(self) -> Path:
        return self.get_path("cache_dir", CACHE_DIR)

    @property
    def colours_cache_file(self) -> Path:
        """The palette document."""
        return self.cache_dir / COLOURS_CACHE_FILENAME

    @property
    def themes_cache_dir(self) -> Path:
        """Parent of the per-script artifact directories."""
        return self.cache_dir / THEMES_CACHE_DIRNAME
