"""Shared constants for wallrizz."""

import os
from pathlib import Path

__all__ = [
    "CACHE_DIR",
    "COLOURS_CACHE_FILENAME",
    "CONFIG_FILE",
    "DEFAULT_COLOR_BACKEND",
    "DEFAULT_IMAGE_EXTENSIONS",
    "DEFAULT_PROCESS_LIMIT",
    "EXTENSIONS_DIR",
    "THEMES_CACHE_DIRNAME",
    "WORKER_GRACEFUL_TIMEOUT",
]

# XDG locations with the usual fallbacks
_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
_xdg_cache_home = Path(os.environ.get("XDG_CACHE_HOME") or Path.home() / ".cache")

CONFIG_FILE = _xdg_config_home / "wallrizz" / "config.toml"
EXTENSIONS_DIR = _xdg_config_home / "wallrizz" / "themeExtensionScripts"
CACHE_DIR = _xdg_cache_home / "wallrizz"

COLOURS_CACHE_FILENAME = "colours.json"
THEMES_CACHE_DIRNAME = "themes"

# {} is replaced with the wallpaper's absolute path
DEFAULT_COLOR_BACKEND = "magick {} -format %c -define histogram:method=kmeans -colors 16 histogram:info:"

DEFAULT_IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "webp"]

# Used when the number of CPUs cannot be determined
DEFAULT_PROCESS_LIMIT = 4

# Seconds to wait after SIGTERM before killing an extension worker
WORKER_GRACEFUL_TIMEOUT = 1.0
