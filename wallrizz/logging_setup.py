"""Logging setup: colored screen output, optional debug file."""

import logging
import os

from .ansi import LogStyles, make_style, should_colorize

__all__ = [
    "LogObjects",
    "get_logger",
    "init_logger",
    "is_debug",
    "set_debug",
]

FILE_FORMAT = r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"


class LogObjects:
    """State shared by every logger."""

    debug: bool = bool(os.environ.get("DEBUG"))
    handlers: list[logging.Handler] = []


def is_debug() -> bool:
    """Return True when debug output is on (DEBUG variable or --debug)."""
    return LogObjects.debug


def set_debug(value: bool) -> None:
    LogObjects.debug = value


class ScreenLogFormatter(logging.Formatter):
    """One colour per level, progress messages (INFO) get a bullet."""

    def __init__(self) -> None:
        super().__init__()
        fmt = r"%(name)20s - %(message)s // %(filename)s:%(lineno)d" if is_debug() else r"%(message)s"
        styles = {
            logging.DEBUG: (),
            logging.INFO: LogStyles.INFO,
            logging.WARNING: LogStyles.WARNING,
            logging.ERROR: LogStyles.ERROR,
            logging.CRITICAL: LogStyles.CRITICAL,
        }
        colored = should_colorize()
        self._formatters = {}
        for level, codes in styles.items():
            prefix, suffix = make_style(*codes) if colored and codes else ("", "")
            bullet = " ◉ " if level == logging.INFO else ""
            self._formatters[level] = logging.Formatter(prefix + bullet + fmt + suffix)

    def format(self, record: logging.LogRecord) -> str:
        return self._formatters.get(record.levelno, self._formatters[logging.ERROR]).format(record)


def init_logger(filename: str | None = None, force_debug: bool = False) -> None:
    """Prepare the handlers used by `get_logger`.

    Args:
        filename: Also log everything to this file
        force_debug: Turn debug output on
    """
    if force_debug:
        set_debug(True)
    LogObjects.handlers.clear()
    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT))
        LogObjects.handlers.append(file_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ScreenLogFormatter())
    LogObjects.handlers.append(stream_handler)


def get_logger(name: str = "wallrizz", level: int | None = None) -> logging.Logger:
    """Return the logger called `name`, using the current handlers.

    The level is DEBUG in debug mode and WARNING otherwise, unless `level` is given.
    """
    logger = logging.getLogger(name)
    if level is None:
        level = logging.DEBUG if is_debug() else logging.WARNING
    logger.setLevel(level)
    logger.propagate = False
    for handler in [h for h in logger.handlers if h not in LogObjects.handlers]:
        logger.removeHandler(handler)
    for handler in LogObjects.handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logger.debug('Logger "%s" initialized', name)
    return logger
