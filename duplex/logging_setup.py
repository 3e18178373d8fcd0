"""
Duplex logging: the "duplex" logger tree, printed through rich.

- init_logger(filename=None, force_debug=False): install a RichHandler on stderr
  (and a plain file handler when filename is given) on the "duplex" logger.
- get_logger(name): a logger below "duplex"; modules use get_logger("duplex.<module>").
- DUPLEX_DEBUG: any non-empty value switches the package to DEBUG level and shows
  source locations; otherwise only warnings and above are printed.

The package logs registration (debug), hook failures (warning), unbindable flags
(error) and fatal errors (critical).
"""
import logging
import os

from rich.console import Console
from rich.logging import RichHandler


class LogObjects:
    """Handlers installed by the last init_logger() call."""

    handlers = []


def is_debug():
    return bool(os.environ.get("DUPLEX_DEBUG"))


def init_logger(filename=None, force_debug=False):
    """
    (Re)configure the package logger; previous duplex handlers are replaced.

    Parameters
    - filename: also append records to this file (timestamped, with source location).
    - force_debug: DEBUG level regardless of DUPLEX_DEBUG.
    """
    debug = is_debug() or force_debug

    LogObjects.handlers.clear()
    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"))
        LogObjects.handlers.append(file_handler)
    screen_handler = RichHandler(console=Console(stderr=True), show_path=debug, markup=False)
    screen_handler.setFormatter(logging.Formatter(r"%(message)s"))
    LogObjects.handlers.append(screen_handler)

    logger = logging.getLogger("duplex")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    for handler in LogObjects.handlers:
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


def get_logger(name="duplex"):
    """
    Return the logger called name, prefixed with "duplex." when it is not already
    part of the package tree.
    """
    if name != "duplex" and not name.startswith("duplex."):
        name = f"duplex.{name}"
    return logging.getLogger(name)


__all__ = (
    "LogObjects",
    "get_logger",
    "init_logger",
    "is_debug",
)
