"""WallRizz - wallpaper driven desktop theming (command line entry point)."""

import asyncio
import logging
import sys

from .config_loader import ConfigLoader
from .logging_setup import get_logger, init_logger
from .manager import ThemeManager
from .models import ControlFlow, ExitCode, OperationalError, Variant, WallRizzError

__all__ = ["main", "run", "use_param"]

USAGE = """Syntax: wallrizz [--config PATH] [--debug FILE] [command]

Commands:
 build                  Extract missing palettes and generate missing themes (default)
 apply WALLPAPER        Generate what is missing, then apply the themes of WALLPAPER
       [--light]        Use the light variant instead of the configured one
 help                   Show this help
"""


def use_param(txt: str, args: list[str] | None = None) -> str:
    """Check if parameter `txt` is in the arguments (sys.argv by default).

    if found, removes it from the list & returns the argument value
    """
    argv = sys.argv if args is None else args
    v = ""
    if txt in argv:
        i = argv.index(txt)
        v = argv[i + 1] if i + 1 < len(argv) else ""
        del argv[i : i + 2]
    return v


def use_flag(txt: str, args: list[str]) -> bool:
    """Remove the flag `txt` from `args`, return True if it was there."""
    if txt in args:
        args.remove(txt)
        return True
    return False


async def run(args: list[str], config_filename: str, log: logging.Logger) -> ControlFlow:
    """Execute the command found in `args`.

    Raises:
        WallRizzError: On any engine failure
    """
    config = ConfigLoader(log).load(config_filename)
    if config.get_bool("inspection"):
        log.setLevel(min(log.level, logging.INFO))

    variant = Variant.LIGHT if use_flag("--light", args) else None
    command = args[0] if args else "build"
    if command == "apply" and len(args) < 2:  # noqa: PLR2004
        raise OperationalError("Missing argument", "Usage: wallrizz apply WALLPAPER [--light]")
    if command not in {"build", "apply"}:
        raise OperationalError("Unknown command", f"{command!r} is not a command, try `wallrizz help`")

    manager = ThemeManager(config, log)
    try:
        await manager.prepare()
        if command == "apply":
            return await manager.set_theme(args[1], variant)
        return ControlFlow.CONTINUE
    finally:
        await manager.close()


def main() -> None:
    """Run the command."""
    debug_flag = use_param("--debug")
    if debug_flag:
        init_logger(filename=debug_flag, force_debug=True)
    else:
        init_logger()
    log = get_logger()

    config_override = use_param("--config")
    args = sys.argv[1:]
    if args and args[0] in {"help", "--help", "-h"}:
        print(USAGE)
        return

    exit_code = ExitCode.SUCCESS
    try:
        if asyncio.run(run(args, config_override, log)) is ControlFlow.STOP_REQUESTED:
            log.debug("Stopped by an extension")
    except KeyboardInterrupt:
        exit_code = ExitCode.INTERRUPTED
    except OperationalError as e:
        log.critical(e.format())
        exit_code = e.exit_code
    except WallRizzError as e:
        log.critical("%s", e)
        exit_code = e.exit_code
    except Exception:  # pylint: disable=W0718
        log.critical("Unhandled exception:", exc_info=True)
        exit_code = ExitCode.FAILURE
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
