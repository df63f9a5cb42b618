"""Terminal colours, honouring NO_COLOR / FORCE_COLOR."""

import os
import sys
from typing import TextIO

__all__ = [
    "BOLD",
    "DIM",
    "GREEN",
    "RED",
    "RESET",
    "YELLOW",
    "LogStyles",
    "colorize",
    "make_style",
    "should_colorize",
]

_CSI = "\x1b["
RESET = f"{_CSI}0m"

BOLD = "1"
DIM = "2"
RED = "31"
GREEN = "32"
YELLOW = "33"


def should_colorize(stream: TextIO | None = None) -> bool:
    """Tell if escape codes may be written to `stream` (stderr by default).

    NO_COLOR wins over FORCE_COLOR, otherwise only terminals get colours.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    target = sys.stderr if stream is None else stream
    isatty = getattr(target, "isatty", None)
    return bool(isatty and isatty())


def make_style(*codes: str) -> tuple[str, str]:
    """Return the (prefix, suffix) pair applying `codes`."""
    return (f"{_CSI}{';'.join(codes)}m" if codes else "", RESET)


def colorize(text: str, *codes: str, stream: TextIO | None = None) -> str:
    """Wrap `text` with `codes` when the stream supports colours."""
    if not codes or not should_colorize(stream):
        return text
    prefix, suffix = make_style(*codes)
    return prefix + text + suffix


class LogStyles:
    """Codes used by the screen log formatter, per level."""

    INFO = (GREEN,)
    WARNING = (YELLOW, DIM)
    ERROR = (RED, DIM)
    CRITICAL = (RED, BOLD)
