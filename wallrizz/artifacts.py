"""Generated theme configuration files, one directory per extension script."""

__all__ = ["ThemeArtifactCache"]

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from .aioops import aiexists, aimakedirs, aiopen, aistat
from .execution import ExecutionRequest, ExecutionStrategy
from .models import (
    GET_DARK_THEME_CONF,
    GET_LIGHT_THEME_CONF,
    GET_THEMES,
    SET_THEME,
    CacheMissError,
    ControlFlow,
    ExtensionScript,
    ScriptShape,
    StalenessCheckError,
    Variant,
    Wallpaper,
)
from .palette_cache import PaletteCache
from .registry import ExtensionRegistry
from .scheduler import ConcurrencyLimitedScheduler, Task

ARTIFACT_SUFFIX = ".conf"


class ThemeArtifactCache:
    """Creates, checks and applies the per-wallpaper theme files of every script."""

    def __init__(
        self,
        registry: ExtensionRegistry,
        strategy: ExecutionStrategy,
        scheduler: ConcurrencyLimitedScheduler,
        log: logging.Logger,
    ) -> None:
        self.registry = registry
        self.strategy = strategy
        self.scheduler = scheduler
        self.log = log

    @staticmethod
    def artifact_path(script: ExtensionScript, unique_id: str, variant: Variant) -> Path:
        """Return where the `variant` theme of `unique_id` is stored for `script`."""
        return script.cache_dir / f"{unique_id}-{variant}{ARTIFACT_SUFFIX}"

    async def is_stale(self, unique_id: str, script_name: str) -> bool:
        """Tell if the artifacts must be generated again.

        Only the light artifact is checked: it is missing, or not newer than the script.

        Raises:
            StalenessCheckError: If the script file can't be read
        """
        script = self.registry[script_name]
        light_path = self.artifact_path(script, unique_id, Variant.LIGHT)
        if not await aiexists(light_path):
            return True
        try:
            script_mtime = (await aistat(script.path)).st_mtime
            artifact_mtime = (await aistat(light_path)).st_mtime
        except OSError as e:
            msg = f"Unable to check {light_path} against {script.path}: {e}"
            raise StalenessCheckError(msg) from e
        return artifact_mtime <= script_mtime

    async def _write(self, path: Path, text: str) -> None:
        await aimakedirs(path.parent, exist_ok=True)
        async with aiopen(path, "w", encoding="utf-8") as f:
            await f.write(text)

    async def _write_pair(self, script: ExtensionScript, unique_id: str, result: Any) -> None:  # noqa: ANN401
        """Store the texts returned by `getThemes`, if any."""
        if isinstance(result, Mapping):
            texts = {Variant.DARK: result.get("dark"), Variant.LIGHT: result.get("light")}
        elif isinstance(result, list | tuple) and len(result) == 2:  # noqa: PLR2004
            texts = {Variant.DARK: result[0], Variant.LIGHT: result[1]}
        else:
            return
        for variant, text in texts.items():
            if text and isinstance(text, str):
                await self._write(self.artifact_path(script, unique_id, variant), text)

    async def generate(self, wallpaper: Wallpaper, script: ExtensionScript, palettes: PaletteCache) -> None:
        """Render both variants of `wallpaper` for `script`.

        Raises:
            CacheMissError: If the wallpaper has no palette
        """
        palette = await palettes.get(wallpaper.unique_id)
        if palette is None:
            msg = f"No colour palette cached for {wallpaper.name}"
            raise CacheMissError(msg)

        dark_path = self.artifact_path(script, wallpaper.unique_id, Variant.DARK)
        light_path = self.artifact_path(script, wallpaper.unique_id, Variant.LIGHT)
        await aimakedirs(script.cache_dir, exist_ok=True)
        self.log.info("Generating theme config for wallpaper %s (%s)", wallpaper.name, script.name)

        if script.shape == ScriptShape.COMBINED:
            result = await self.strategy.invoke(script.path, GET_THEMES, [palette, [str(dark_path), str(light_path)]])
            await self._write_pair(script, wallpaper.unique_id, result)
        else:
            request = ExecutionRequest(
                script_path=str(script.path),
                capabilities={GET_DARK_THEME_CONF: str(dark_path), GET_LIGHT_THEME_CONF: str(light_path)},
                args=[palette],
            )
            await self.strategy.execute(request)

    async def generate_missing(
        self,
        wallpapers: Iterable[Wallpaper],
        scripts: Iterable[ExtensionScript] | None,
        palettes: PaletteCache,
    ) -> None:
        """Render the artifacts of every stale (wallpaper, script) pair.

        Args:
            wallpapers: Wallpapers to cover
            scripts: Scripts to render with, None for every registered script
            palettes: Source of the colours, never refilled here
        """
        scripts = list(self.registry if scripts is None else scripts)
        tasks: list[Task] = []

        def make_task(wallpaper: Wallpaper, script: ExtensionScript) -> Task:
            return lambda: self.generate(wallpaper, script, palettes)

        for wallpaper in wallpapers:
            for script in scripts:
                if await self.is_stale(wallpaper.unique_id, script.name):
                    tasks.append(make_task(wallpaper, script))
        if not tasks:
            return
        self.log.info("Generating %d theme configs...", len(tasks))
        await self.scheduler.run(tasks)

    async def apply(self, unique_id: str, variant: Variant, script_name: str) -> Any:  # noqa: ANN401
        """Call `setTheme` of `script_name` with the stored artifact.

        Raises:
            CacheMissError: If the artifact was never generated
        """
        script = self.registry[script_name]
        path = self.artifact_path(script, unique_id, variant)
        if not await aiexists(path):
            msg = f"No {variant} theme generated by {script_name} for {unique_id}"
            raise CacheMissError(msg)
        return await self.strategy.invoke(script.path, SET_THEME, [str(path)])

    async def apply_all(self, unique_id: str, variant: Variant) -> ControlFlow:
        """Apply the theme of `unique_id` for every registered script.

        Returns STOP_REQUESTED when any script asked for it.
        """
        results: list[Any] = []

        def make_task(script: ExtensionScript) -> Task:
            async def apply_one() -> None:
                results.append(await self.apply(unique_id, variant, script.name))

            return apply_one

        await self.scheduler.run([make_task(script) for script in self.registry])
        if ControlFlow.STOP_REQUESTED in results:
            return ControlFlow.STOP_REQUESTED
        return ControlFlow.CONTINUE
