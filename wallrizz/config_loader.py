"""Configuration file loading utilities."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .config import Configuration
from .constants import CONFIG_FILE
from .models import OperationalError
from .schema import WALLRIZZ_CONFIG_SCHEMA
from .validation import ConfigValidator

if TYPE_CHECKING:
    import logging

__all__ = ["ConfigLoader"]

SECTION = "wallrizz"


class ConfigLoader:
    """Loads the TOML configuration and wraps it with the schema.

    A missing file is not an error: every field has a usable default.
    """

    def __init__(self, log: logging.Logger) -> None:
        self.log = log

    def load(self, config_filename: str | Path = "") -> Configuration:
        """Load and validate the configuration.

        Args:
            config_filename: Optional path to the config file, defaults to CONFIG_FILE

        Raises:
            OperationalError: If the file has syntax errors or invalid values
        """
        fname = Path(os.path.expandvars(config_filename)).expanduser() if config_filename else CONFIG_FILE
        section = self._load_config_file(fname).get(SECTION, {})

        env_dir = os.environ.get("WALLPAPER_DIR")
        if env_dir:
            section["wallpapers_dir"] = env_dir

        validator = ConfigValidator(section, SECTION, self.log)
        errors = validator.validate(WALLRIZZ_CONFIG_SCHEMA)
        validator.warn_unknown_keys(WALLRIZZ_CONFIG_SCHEMA)
        if errors:
            raise OperationalError("Invalid configuration.", f"Check {fname}", "\n".join(errors))

        return Configuration(section, logger=self.log, schema=WALLRIZZ_CONFIG_SCHEMA)

    def _load_config_file(self, fname: Path) -> dict[str, Any]:
        """Load a single configuration file."""
        if not fname.exists():
            self.log.debug("No config file at %s, using defaults", fname)
            return {}
        self.log.debug("Loading %s", fname)
        with fname.open("rb") as f:
            try:
                return tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise OperationalError("Problem reading the configuration.", str(fname), str(e)) from e
