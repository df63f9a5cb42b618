"""Sample theme extension script for the kitty terminal.

Copy it to the extensions directory (~/.config/wallrizz/themeExtensionScripts/).

- `getDarkThemeConf` / `getLightThemeConf` render a kitty colour theme from the palette
- `setTheme` installs the rendered file and asks running kitty instances to reload
"""

import shutil
import subprocess
from pathlib import Path

from wallrizz.models import OperationalError

KITTY_THEME = Path("~/.config/kitty/wallrizz-theme.conf").expanduser()


def _luminance(colour: str) -> float:
    r, g, b = (int(colour[i : i + 2], 16) for i in (1, 3, 5))
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def _render(colours: list[str], dark: bool) -> str:
    ordered = sorted(colours, key=_luminance)
    if not dark:
        ordered.reverse()
    background, foreground = ordered[0], ordered[-1]
    accents = (ordered[1:-1] or ordered) * 16
    lines = [f"background {background}", f"foreground {foreground}", f"cursor {foreground}"]
    lines.extend(f"color{i} {accents[i]}" for i in range(16))
    return "\n".join(lines) + "\n"


def getDarkThemeConf(colours: list[str]) -> str:  # noqa: N802
    """Return the dark kitty theme."""
    return _render(colours, dark=True)


def getLightThemeConf(colours: list[str]) -> str:  # noqa: N802
    """Return the light kitty theme."""
    return _render(colours, dark=False)


def setTheme(path: str) -> None:  # noqa: N802
    """Install the theme and reload kitty."""
    if not KITTY_THEME.parent.exists():
        raise OperationalError("kitty isn't configured", f"{KITTY_THEME.parent} doesn't exist")
    shutil.copyfile(path, KITTY_THEME)
    if shutil.which("pkill"):
        subprocess.run(["pkill", "-USR1", "-x", "kitty"], check=False)
