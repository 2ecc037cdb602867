"""
Logging configuration for fuzzytunes.

Console output goes to stderr, since fzf draws on stdout while a view is on
screen. Level names are colored only when stderr is a terminal.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

LOGGER_NAME = 'fuzzytunes'

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
FILE_FORMAT = '%(asctime)s %(levelname)-8s %(name)s [%(funcName)s:%(lineno)d] %(message)s'

RESET = '\033[0m'
LEVEL_COLORS = {
    logging.DEBUG: '\033[2m',       # dim
    logging.INFO: '\033[34m',       # blue
    logging.WARNING: '\033[33m',    # yellow
    logging.ERROR: '\033[31m',      # red
    logging.CRITICAL: '\033[1;31m', # bold red
}


class LevelColorFormatter(logging.Formatter):
    """Wraps the level name in the color for its level."""

    def formatMessage(self, record):
        color = LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().formatMessage(record)
        # Other handlers share the record, so color a copy
        painted = logging.makeLogRecord(record.__dict__)
        painted.levelname = f"{color}{record.levelname}{RESET}"
        return super().formatMessage(painted)


def console_formatter(stream: TextIO) -> logging.Formatter:
    if stream.isatty():
        return LevelColorFormatter(CONSOLE_FORMAT)
    return logging.Formatter(CONSOLE_FORMAT)


def setup_logging(level: str = "WARNING", log_file: Optional[Path] = None,
                  stream: Optional[TextIO] = None) -> logging.Logger:
    """Attach the console handler, plus a DEBUG file handler when asked.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path that receives every record
        stream: Console stream, stderr by default

    Returns:
        The package logger
    """
    stream = stream or sys.stderr
    console_level = logging.getLevelName(level.upper())

    root = logging.getLogger(LOGGER_NAME)
    root.handlers.clear()
    root.propagate = False

    console = logging.StreamHandler(stream)
    console.setLevel(console_level)
    console.setFormatter(console_formatter(stream))
    root.addHandler(console)

    if log_file:
        to_file = logging.FileHandler(log_file)
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(to_file)

    root.setLevel(logging.DEBUG if log_file else console_level)
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for one fuzzytunes module, e.g. ``get_logger('client')``."""
    return logging.getLogger(f'{LOGGER_NAME}.{name}')


class FuzzyTunesError(Exception):
    """Base exception for fuzzytunes."""
    pass


class SelectorError(FuzzyTunesError):
    """The fuzzy selector failed to run or reported an error."""
    pass


class ControlClientError(FuzzyTunesError):
    """The MPD control client failed or could not reach the server."""
    pass


class MissingDependencyError(FuzzyTunesError):
    """A required external command is not installed."""
    pass


class NavigationInvariantError(FuzzyTunesError):
    """A view was entered without the parameters it requires."""
    pass
