# core/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from . import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# requests' transport logs every connection at DEBUG; one line per page is enough.
_NOISY_LOGGERS = ("urllib3",)

_configured = False


def _level(name: Optional[str]) -> int:
    return getattr(logging, (name or "").upper(), logging.INFO)


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(formatter)
    return ch


def _file_handler(path: str, level: int, formatter: logging.Formatter) -> logging.Handler:
    # Lives next to the checkpoint files, so the directory may not exist yet.
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    fh = RotatingFileHandler(
        path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUPS,
        encoding="utf-8",
    )
    fh.setLevel(level)
    fh.setFormatter(formatter)
    return fh


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure the root logger once for the scraper run: progress lines to
    stdout, and a rotating copy next to the checkpoint unless LOG_TO_FILE=false.
    """
    global _configured
    if _configured:
        return

    lvl = _level(level or config.LOG_LEVEL)
    root = logging.getLogger()
    root.setLevel(lvl)
    formatter = logging.Formatter(LOG_FORMAT)

    if not root.handlers:
        if config.LOG_TO_STDOUT:
            root.addHandler(_console_handler(lvl, formatter))

        if config.LOG_TO_FILE:
            path = log_file or config.LOG_FILE
            try:
                root.addHandler(_file_handler(path, lvl, formatter))
            except OSError as e:
                root.warning("Failed to initialize file logging at %s: %s", path, e)

    if lvl > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str | None = None) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
