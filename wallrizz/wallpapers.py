"""Wallpaper discovery."""

__all__ = ["discover_wallpapers", "find_wallpaper"]

from collections.abc import Iterable
from pathlib import Path

from .aioops import aiexists, aiisfile, ailistdir
from .models import OperationalError, Wallpaper


async def discover_wallpapers(directory: Path, extensions: Iterable[str]) -> list[Wallpaper]:
    """Return the images of `directory` (not recursive), sorted by file name.

    Raises:
        OperationalError: If the directory doesn't exist
    """
    if not await aiexists(directory):
        raise OperationalError("Wallpaper directory not found", f"{directory} doesn't exist.")
    wanted = {ext.lower().lstrip(".") for ext in extensions}
    wallpapers = []
    for fname in sorted(await ailistdir(directory)):
        ext = fname.rsplit(".", 1)[-1]
        if fname.startswith(".") or ext.lower() not in wanted:
            continue
        if not await aiisfile(directory / fname):
            continue
        wallpapers.append(Wallpaper(unique_id=fname, name=Path(fname).stem))
    return wallpapers


def find_wallpaper(wallpapers: Iterable[Wallpaper], key: str) -> Wallpaper | None:
    """Return the wallpaper matching a file name, a path or a display name."""
    key = Path(key).name
    for wallpaper in wallpapers:
        if key in (wallpaper.unique_id, wallpaper.name):
            return wallpaper
    return None
