"""Schema of the [wallrizz] configuration section."""

from .constants import DEFAULT_COLOR_BACKEND, DEFAULT_IMAGE_EXTENSIONS
from .validation import ConfigField, ConfigItems

__all__ = ["WALLRIZZ_CONFIG_SCHEMA"]


def _validate_backend(value: str) -> list[str]:
    """The extraction command needs a placeholder for the wallpaper path."""
    if "{}" not in value:
        return ["Missing '{}' placeholder for the wallpaper path"]
    return []


def _validate_positive(value: float) -> list[str]:
    if float(value) < 0:
        return ["Must be zero or positive"]
    return []


WALLRIZZ_CONFIG_SCHEMA = ConfigItems(
    ConfigField("wallpapers_dir", str, description="Wallpaper directory path (WALLPAPER_DIR overrides it)"),
    ConfigField("color_backend", str, default=DEFAULT_COLOR_BACKEND, description="Color extraction command", validator=_validate_backend),
    ConfigField("process_limit", int, default=0, description="Number of concurrent tasks (0 = auto)", validator=_validate_positive),
    ConfigField("light_theme", bool, default=False, description="Apply the light variant of themes"),
    ConfigField("inspection", bool, default=True, description="Log progress messages"),
    ConfigField("extensions_dir", str, description="Theme extension scripts directory"),
    ConfigField("cache_dir", str, description="Cache directory"),
    ConfigField("image_extensions", (list, str), default=DEFAULT_IMAGE_EXTENSIONS, description="Wallpaper file extensions"),
    ConfigField("worker_timeout", float, default=0.0, description="Seconds before an extension worker is killed (0 = never)", validator=_validate_positive),
)
