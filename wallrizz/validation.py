"""Declarative schema for the configuration file and its validator."""

import difflib
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .config import BOOL_STRINGS

__all__ = [
    "ConfigField",
    "ConfigItems",
    "ConfigValidator",
    "format_config_error",
]

FieldType = type | tuple[type, ...]


@dataclass(frozen=True)
class ConfigField:
    """One configuration key.

    `validator` receives a value of the right type and returns the problems found.
    """

    name: str
    field_type: FieldType = str
    required: bool = False
    default: Any = None
    description: str = ""
    validator: Callable[[Any], list[str]] | None = None

    @property
    def type_name(self) -> str:
        """'int', 'list or str'..."""
        types = self.field_type if isinstance(self.field_type, tuple) else (self.field_type,)
        return " or ".join(t.__name__ for t in types)


class ConfigItems(list):
    """The fields of a section, in declaration order."""

    def __init__(self, *fields: ConfigField) -> None:
        super().__init__(fields)
        self._by_name = {f.name: f for f in fields}

    def get(self, name: str) -> ConfigField | None:
        """Return the field called `name`, if declared."""
        return self._by_name.get(name)


def _find_similar_key(unknown_key: str, known_keys: Iterable[str]) -> str | None:
    matches = difflib.get_close_matches(unknown_key, list(known_keys), n=1)
    return matches[0] if matches else None


def format_config_error(section: str, field: str, message: str, suggestion: str = "") -> str:
    """Return a one line error message for `field`."""
    text = f"[{section}] Config error for '{field}': {message}"
    return f"{text} -> {suggestion}" if suggestion else text


def _matches(expected: type, value: Any) -> bool:  # noqa: ANN401
    if expected is bool:
        return isinstance(value, bool) or (isinstance(value, str) and value.strip().lower() in BOOL_STRINGS)
    if expected in (int, float):
        if isinstance(value, bool):
            return False
        if isinstance(value, int | float):
            return True
        try:
            expected(value)
        except (TypeError, ValueError):
            return False
        return True
    return isinstance(value, expected)


class ConfigValidator:
    """Checks a configuration section against its fields.

    Attributes:
        section: Section name used in messages
    """

    def __init__(self, config: dict, section: str, logger: logging.Logger) -> None:
        self.config = config
        self.section = section
        self.log = logger

    def _error(self, field: ConfigField, message: str, suggestion: str = "") -> str:
        return format_config_error(self.section, field.name, message, suggestion)

    def validate(self, schema: Iterable[ConfigField]) -> list[str]:
        """Return the problems found, an empty list means valid."""
        errors = []
        for field in schema:
            value = self.config.get(field.name)
            if value is None:
                if field.required:
                    errors.append(self._error(field, "Missing required field"))
                continue
            types = field.field_type if isinstance(field.field_type, tuple) else (field.field_type,)
            if not any(_matches(t, value) for t in types):
                hint = "Use true/false (without quotes)" if types == (bool,) else ""
                errors.append(self._error(field, f"Expected {field.type_name}, got {type(value).__name__}", hint))
                continue
            if field.validator:
                errors.extend(self._error(field, problem) for problem in field.validator(value))
        return errors

    def warn_unknown_keys(self, schema: Iterable[ConfigField]) -> list[str]:
        """Log a warning for each key no field declares, suggesting the closest one."""
        known = [f.name for f in schema]
        warnings = []
        for key in self.config:
            if key in known:
                continue
            similar = _find_similar_key(key, known)
            hint = f"(did you mean '{similar}'?)" if similar else "- will be ignored"
            msg = f"[{self.section}] Unknown option '{key}' {hint}"
            self.log.warning(msg)
            warnings.append(msg)
        return warnings
