"""Wires the caches, the scheduler and the extension runner together."""

__all__ = ["ThemeManager"]

import logging
from pathlib import Path

from .artifacts import ThemeArtifactCache
from .config import Configuration
from .constants import EXTENSIONS_DIR
from .execution import ExecutionStrategy, create_strategy
from .extraction import ColourExtractor
from .models import ControlFlow, OperationalError, Variant, Wallpaper
from .palette_cache import PaletteCache
from .registry import ExtensionRegistry
from .scheduler import ConcurrencyLimitedScheduler, resolve_limit
from .wallpapers import discover_wallpapers, find_wallpaper


class ThemeManager:
    """Builds the caches for a wallpaper directory and applies themes."""

    strategy: ExecutionStrategy

    def __init__(self, config: Configuration, log: logging.Logger) -> None:
        self.config = config
        self.log = log
        limit = resolve_limit(config.get_int("process_limit"))
        self.log.debug("Running up to %d tasks at once", limit)
        self.scheduler = ConcurrencyLimitedScheduler(limit, log)
        self.strategy = create_strategy(limit, log, timeout=config.get_float("worker_timeout"))
        self.palettes = PaletteCache(config.colours_cache_file, self.scheduler, log)
        self.registry = ExtensionRegistry(config.themes_cache_dir, log)
        self.artifacts = ThemeArtifactCache(self.registry, self.strategy, self.scheduler, log)
        self.extractor = ColourExtractor(config.get_str("color_backend"), log)
        self.wallpapers_dir = config.get_path("wallpapers_dir", Path.cwd())
        self.extensions_dir = config.get_path("extensions_dir", EXTENSIONS_DIR)
        self._extensions_loaded = False

    async def load_extensions(self) -> None:
        """Register the extension scripts, once."""
        if not self._extensions_loaded:
            await self.registry.load(self.extensions_dir)
            self._extensions_loaded = True

    async def prepare(self) -> list[Wallpaper]:
        """Bring both caches up to date for every wallpaper.

        Palettes first, then extensions, then the missing theme files.
        """
        wallpapers = await discover_wallpapers(self.wallpapers_dir, self.config.get_list("image_extensions"))
        self.log.debug("Found %d wallpapers in %s", len(wallpapers), self.wallpapers_dir)
        await self.palettes.build_missing(wallpapers, self.extractor, self.wallpapers_dir)
        await self.load_extensions()
        await self.artifacts.generate_missing(wallpapers, None, self.palettes)
        return wallpapers

    async def set_theme(self, wallpaper: str, variant: Variant | None = None) -> ControlFlow:
        """Apply the themes generated for `wallpaper` with every script.

        Args:
            wallpaper: File name, path or display name of the wallpaper
            variant: Defaults to the `light_theme` setting
        """
        if variant is None:
            variant = Variant.LIGHT if self.config.get_bool("light_theme") else Variant.DARK
        wallpapers = await discover_wallpapers(self.wallpapers_dir, self.config.get_list("image_extensions"))
        selected = find_wallpaper(wallpapers, wallpaper)
        if selected is None:
            raise OperationalError("Wallpaper not found", f"No wallpaper matches {wallpaper!r} in {self.wallpapers_dir}")
        await self.load_extensions()
        self.log.info("Setting %s theme for %s", variant, selected.name)
        return await self.artifacts.apply_all(selected.unique_id, variant)

    async def close(self) -> None:
        """Release the execution resources."""
        await self.strategy.close()
