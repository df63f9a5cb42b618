"""Persisted wallpaper -> colour palette cache."""

import json
import logging
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path

from .aioops import aiexists, aimakedirs, aiopen, aireplace
from .colors import parse_palette
from .models import ColourPalette, ExtractionError, Wallpaper
from .scheduler import ConcurrencyLimitedScheduler, Task

__all__ = ["Extractor", "PaletteCache"]

Extractor = Callable[[Path], Awaitable[str]]


class PaletteCache:
    """Palettes held in memory and mirrored to a single JSON document.

    The document is read on the first miss and always rewritten as a whole
    (load, merge, flush), never partially.

    Attributes:
        path: Location of the JSON document
    """

    def __init__(self, path: Path, scheduler: ConcurrencyLimitedScheduler, log: logging.Logger) -> None:
        self.path = path
        self.scheduler = scheduler
        self.log = log
        self._palettes: dict[str, ColourPalette] = {}
        self._unflushed: dict[str, ColourPalette] = {}
        self._loaded = False

    def __contains__(self, unique_id: str) -> bool:
        return unique_id in self._palettes

    async def load(self) -> None:
        """Replace the in-memory map with the persisted document.

        Entries stored with `put` and not yet flushed are kept on top.
        A missing document means an empty cache, a corrupt one is ignored.
        """
        self._loaded = True
        palettes: dict[str, ColourPalette] = {}
        if await aiexists(self.path):
            async with aiopen(self.path, encoding="utf-8") as f:
                content = await f.read()
            try:
                document = json.loads(content or "{}")
            except json.JSONDecodeError as e:
                self.log.warning("Ignoring corrupt colours cache %s: %s", self.path, e)
                document = {}
            if isinstance(document, dict):
                palettes = {key: value for key, value in document.items() if isinstance(value, list) and value}
            else:
                self.log.warning("Ignoring colours cache %s: not a JSON object", self.path)
        palettes.update(self._unflushed)
        self._palettes = palettes

    async def get(self, unique_id: str) -> ColourPalette | None:
        """Return the palette of `unique_id`, loading the document on the first miss."""
        palette = self._palettes.get(unique_id)
        if palette is None and not self._loaded:
            await self.load()
            palette = self._palettes.get(unique_id)
        return palette

    def put(self, unique_id: str, palette: ColourPalette) -> None:
        """Store a palette in memory, `flush_all` persists it.

        Raises:
            ValueError: If the palette is empty
        """
        if not palette:
            msg = f"Refusing to cache an empty palette for {unique_id}"
            raise ValueError(msg)
        self._palettes[unique_id] = list(palette)
        self._unflushed[unique_id] = self._palettes[unique_id]

    async def flush_all(self) -> None:
        """Write the whole map to disk as one document, merged with the persisted one."""
        if not self._loaded:
            await self.load()
        await aimakedirs(self.path.parent, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        async with aiopen(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(self._palettes))
        await aireplace(tmp_path, self.path)
        self._unflushed.clear()

    async def build_missing(self, wallpapers: Iterable[Wallpaper], extract: Extractor, directory: Path) -> None:
        """Extract and persist the palettes of wallpapers which have none.

        One failure fails the whole batch and nothing is flushed.

        Args:
            wallpapers: The wallpapers which need a palette
            extract: Runs the extraction command on a wallpaper path, returns its output
            directory: Folder holding the wallpaper files

        Raises:
            ExtractionError: If a command fails or prints no colour
        """
        missing = [wallpaper for wallpaper in wallpapers if await self.get(wallpaper.unique_id) is None]
        if not missing:
            return

        results: dict[str, ColourPalette] = {}

        def make_task(wallpaper: Wallpaper) -> Task:
            async def extract_one() -> None:
                raw_output = await extract(directory / wallpaper.unique_id)
                palette = parse_palette(raw_output)
                if not palette:
                    msg = f"Color extraction failed for {wallpaper.name}: no colour found. Make sure the backend is extracting colors correctly."
                    raise ExtractionError(msg)
                results[wallpaper.unique_id] = palette

            return extract_one

        self.log.info("Extracting colours from %d wallpapers...", len(missing))
        await self.scheduler.run([make_task(wallpaper) for wallpaper in missing])
        for unique_id, palette in results.items():
            self.put(unique_id, palette)
        await self.flush_all()
        self.log.info("Done.")
