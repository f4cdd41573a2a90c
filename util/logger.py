# util/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, TextIO

from config.settings import settings

logging.captureWarnings(True)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Loggers whose own defaults would otherwise drown the job lifecycle lines.
_QUIET = {"asyncio": logging.WARNING}
_UVICORN = ("uvicorn", "uvicorn.error", "uvicorn.access")


class LevelColorFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[37m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, datefmt: str, colorize: bool = True) -> None:
        super().__init__(fmt, datefmt=datefmt)
        self.colorize = colorize

    def formatMessage(self, record: logging.LogRecord) -> str:
        if not self.colorize:
            return super().formatMessage(record)
        # The record is shared with the file handler, so restore the level.
        plain = record.levelname
        record.levelname = f"{self.COLORS.get(plain, self.RESET)}{plain}{self.RESET}"
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = plain


def _wants_color(stream: TextIO, override: Optional[bool]) -> bool:
    if override is not None:
        return override
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        LevelColorFormatter(
            TEXT_FORMAT,
            DATE_FORMAT,
            colorize=_wants_color(sys.stdout, settings.LOG_COLOR),
        )
    )
    return handler


def _file_handler(level: int) -> logging.Handler:
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    handler = RotatingFileHandler(
        os.path.join(settings.LOG_DIR, settings.LOG_FILE_NAME),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))
    return handler


def init_logger() -> logging.Logger:
    """
    Configure the root logger once per process.

    Console output always goes to stdout. A size-rotated file under LOG_DIR is
    added when LOG_TO_FILE is set. Uvicorn's loggers are routed through the
    same handlers so request lines and job lines share one format.
    """
    root = logging.getLogger()
    if getattr(root, "_luarip_inited", False):
        return logging.getLogger(settings.LOGGER_NAME)

    level = logging.getLevelName((settings.LOG_LEVEL or "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(_console_handler(level))
    if settings.LOG_TO_FILE:
        root.addHandler(_file_handler(level))

    for name, quiet_level in _QUIET.items():
        logging.getLogger(name).setLevel(quiet_level)
    for name in _UVICORN:
        uv = logging.getLogger(name)
        uv.handlers.clear()
        uv.propagate = True

    root._luarip_inited = True  # type: ignore[attr-defined]
    logger = logging.getLogger(settings.LOGGER_NAME)
    logger.debug("logger.init level=%s file=%s", logging.getLevelName(level), settings.LOG_TO_FILE)
    return logger
