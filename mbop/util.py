"""Small helpers: text truncation, the start-up banner and logging setup."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

_BANNER = r"""  __  __ ____   ____  _____  
 |  \/  |  _ \ / __ \|  __ \ 
 | \  / | |_) | |  | | |__) |
 | |\/| |  _ <| |  | |  ___/ 
 | |  | | |_) | |__| | |     
 |_|  |_|____/ \____/|_|
-- Merry Band of Pirates - Multi Agent Automation"""

_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}

LOGGER_NAME = "mbop"


def elliptical_truncate(text: str, max_len: int) -> str:
    """Cut ``text`` to at most ``max_len`` characters, preferably at a space, adding '...'."""
    last_space = max_len
    for index, char in enumerate(text):
        if char.isspace():
            last_space = index
        if index + 1 > max_len:
            return text[:last_space] + "..."
    return text


def banner() -> str:
    """Return the start-up banner."""
    return _BANNER


def print_banner() -> None:
    """Print the start-up banner to standard output."""
    print(_BANNER)


def _parse_bool(value: str | None) -> bool | None:
    if value in _TRUE_WORDS:
        return True
    if value in _FALSE_WORDS:
        return False
    return None


def setup_logging(name: str) -> logging.Logger:
    """Configure the package logger to write to stdout and, unless disabled, to a log file.

    ``DISABLE_LOG_FILE`` turns the file off; ``LOG_FILE`` chooses its path,
    otherwise ``./logs/<name>.log`` is used.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    logger.addHandler(console)

    disable_file = _parse_bool(os.environ.get("DISABLE_LOG_FILE")) or False
    if not disable_file:
        log_file = os.environ.get("LOG_FILE", "")
        if not log_file:
            Path("logs").mkdir(exist_ok=True)
            log_file = os.path.join("logs", f"{name}.log")
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger