"""External colour extraction command."""

import logging
import shlex
from pathlib import Path

from .models import ExtractionError
from .process import run_command

__all__ = ["ColourExtractor"]

PLACEHOLDER = "{}"


class ColourExtractor:
    """Runs the configured extraction command for a wallpaper.

    The command template contains `{}`, replaced with the wallpaper's absolute path.
    """

    def __init__(self, command_template: str, log: logging.Logger) -> None:
        self.command_template = command_template
        self.log = log

    def build_command(self, wallpaper_path: str | Path) -> str:
        """Return the shell command for `wallpaper_path`."""
        quoted = shlex.quote(str(Path(wallpaper_path).absolute()))
        return self.command_template.replace(PLACEHOLDER, quoted)

    async def __call__(self, wallpaper_path: str | Path) -> str:
        """Run the command and return its standard output.

        Raises:
            ExtractionError: If the command can't run or exits with an error
        """
        command = self.build_command(wallpaper_path)
        self.log.debug("Running %s", command)
        try:
            result = await run_command(command)
        except OSError as e:
            msg = f"Color extraction failed for {wallpaper_path}: {e}"
            raise ExtractionError(msg) from e
        if result.returncode != 0:
            msg = f"Color extraction command failed ({result.returncode}): {command}\n{result.stderr.strip()}"
            raise ExtractionError(msg)
        return result.stdout
