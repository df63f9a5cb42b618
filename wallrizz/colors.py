"""Colour token parsing and normalization."""

import re

from .models import ColourPalette

__all__ = ["normalize_color", "parse_palette", "to_hex"]

HEX_SHORT_LENGTHS = (3, 4)
HEX_LONG_LENGTHS = (6, 8)
MAX_CHANNEL = 255

_FUNC_PATTERN = re.compile(r"^rgba?\(([^()]*)\)$")
_TRAILING = ",;:"


def to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB values to a hex color string."""
    return f"#{r:02x}{g:02x}{b:02x}"


def _parse_channel(text: str) -> int | None:
    text = text.strip()
    try:
        if text.endswith("%"):
            value = round(float(text[:-1]) * MAX_CHANNEL / 100)
        else:
            value = round(float(text))
    except ValueError:
        return None
    if 0 <= value <= MAX_CHANNEL:
        return value
    return None


def _from_hex(digits: str) -> str | None:
    if not all(c in "0123456789abcdef" for c in digits):
        return None
    if len(digits) in HEX_SHORT_LENGTHS:
        return "#" + "".join(c * 2 for c in digits[:3])
    if len(digits) in HEX_LONG_LENGTHS:
        return "#" + digits[:6]
    return None


def _from_function(args: str) -> str | None:
    parts = [p for p in re.split(r"[,\s/]+", args.strip()) if p]
    if len(parts) not in (3, 4):
        return None
    channels = [_parse_channel(p) for p in parts[:3]]
    if any(c is None for c in channels):
        return None
    r, g, b = channels
    return to_hex(r, g, b)  # type: ignore[arg-type]


def normalize_color(token: str) -> str | None:
    """Return the `#rrggbb` form of `token`, or None if it isn't a colour.

    Accepts `#rgb`, `#rgba`, `#rrggbb`, `#rrggbbaa` and `rgb()`/`rgba()`.
    Alpha is dropped. ImageMagick histograms print each colour twice (`#112233 srgb(...)`),
    `srgb()` and colour names are therefore not accepted to avoid duplicates.
    """
    color = token.strip().rstrip(_TRAILING).lower()
    if not color:
        return None
    if color.startswith("#"):
        return _from_hex(color[1:])
    match = _FUNC_PATTERN.match(color)
    if match:
        return _from_function(match.group(1))
    return None


def parse_palette(raw_output: str) -> ColourPalette:
    """Extract the colours found in a command output, in order of appearance.

    Tokens are separated by whitespace or newlines, anything that isn't a colour is ignored.
    """
    colors = []
    for token in raw_output.split():
        color = normalize_color(token)
        if color:
            colors.append(color)
    return colors
