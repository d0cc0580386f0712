import logging
import os
from pathlib import Path
from typing import Optional

from .config import LOG_MAX_LINES
from .log_buffer import LogBuffer, LogHandler

# Default logging level
LOGGING_LEVEL = getattr(logging, (os.getenv("LOG_LEVEL") or "INFO").upper(), logging.INFO)

# Optional log file; test helpers stay off the filesystem unless asked.
_log_file = os.getenv("LOG_FILE_PATH")
LOG_FILE_PATH: Optional[Path] = Path(_log_file) if _log_file else None

LOGGER_PREFIX = "playwait"


class LoggingFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__()
        self.black = "\x1b[30m"
        self.red = "\x1b[31m"
        self.green = "\x1b[32m"
        self.yellow = "\x1b[33m"
        self.blue = "\x1b[34m"
        self.gray = "\x1b[38m"
        self.cyan = "\x1b[36m"
        self.reset = "\x1b[0m"
        self.bold = "\x1b[1m"
        self.COLORS = {
            logging.DEBUG: self.gray + self.bold,
            logging.INFO: self.blue + self.bold,
            logging.WARNING: self.yellow + self.bold,
            logging.ERROR: self.red,
            logging.CRITICAL: self.red + self.bold,
        }

    def format(self, record: logging.LogRecord) -> str:
        log_color = self.COLORS.get(record.levelno, self.blue + self.bold)
        fmt = "(black){asctime}(reset) (levelcolor){levelname:<8}(reset) (green){name}(reset)  (cyan){message}(reset)"
        fmt = fmt.replace("(black)", self.black + self.bold)
        fmt = fmt.replace("(reset)", self.reset)
        fmt = fmt.replace("(levelcolor)", log_color)
        fmt = fmt.replace("(green)", self.green + self.bold)
        fmt = fmt.replace("(cyan)", self.cyan)
        formatter = logging.Formatter(fmt, "%Y-%m-%d %H:%M:%S", style="{")
        return formatter.format(record)


class PlainFormatter(logging.Formatter):
    """Plain text formatter for file/buffer logging (no ANSI codes)."""

    def __init__(self) -> None:
        super().__init__(
            fmt="{asctime} {levelname:<8} {name}  {message}",
            datefmt="%Y-%m-%d %H:%M:%S",
            style="{",
        )


_console_handler: Optional[logging.Handler] = None
_file_handler: Optional[logging.Handler] = None
_buffer_handler: Optional[LogHandler] = None


def _ensure_console_handler() -> logging.Handler:
    global _console_handler
    if _console_handler is not None:
        return _console_handler

    handler = logging.StreamHandler()
    handler.setLevel(LOGGING_LEVEL)
    handler.setFormatter(LoggingFormatter())
    _console_handler = handler
    return handler


def _ensure_file_handler() -> Optional[logging.Handler]:
    global _file_handler
    if _file_handler is not None or LOG_FILE_PATH is None:
        return _file_handler

    LOG_FILE_PATH.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(LOG_FILE_PATH, encoding="utf-8")
    handler.setLevel(LOGGING_LEVEL)
    handler.setFormatter(PlainFormatter())
    _file_handler = handler
    return handler


def _ensure_buffer_handler() -> LogHandler:
    global _buffer_handler
    if _buffer_handler is not None:
        return _buffer_handler

    handler = LogHandler(LogBuffer(max_lines=LOG_MAX_LINES))
    handler.setLevel(LOGGING_LEVEL)
    handler.setFormatter(PlainFormatter())
    _buffer_handler = handler
    return handler


def _handlers() -> list[logging.Handler]:
    handlers = [_ensure_console_handler(), _ensure_buffer_handler()]
    file_handler = _ensure_file_handler()
    if file_handler is not None:
        handlers.append(file_handler)
    return handlers


def init_root_logging() -> LogBuffer:
    """Initialize root logging and return the in-memory log buffer."""

    root_logger = logging.getLogger()
    root_logger.setLevel(LOGGING_LEVEL)

    if LOGGING_LEVEL > logging.DEBUG:
        logging.getLogger("discord").setLevel(logging.WARNING)
        logging.getLogger("discord.player").setLevel(logging.WARNING)

    for h in _handlers():
        if h not in root_logger.handlers:
            root_logger.addHandler(h)

    return _ensure_buffer_handler().buffer


def get_log_buffer() -> LogBuffer:
    return _ensure_buffer_handler().buffer


def set_logger(logger: logging.Logger) -> logging.Logger:
    """Configure a logger with console/buffer handlers (and the file handler if enabled)."""

    logger.setLevel(LOGGING_LEVEL)
    logger.propagate = False

    for h in _handlers():
        if h not in logger.handlers:
            logger.addHandler(h)

    return logger


def get_logger(module: str) -> logging.Logger:
    """Get a logger named like `playwait.<module>` with handlers attached."""

    return set_logger(logging.getLogger(f"{LOGGER_PREFIX}.{module}"))
