"""Logging setup with the browsed dataset key attached to every record."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from vector_results.config import get_settings

# Vector set key of the operation currently running, "-" outside of one
dataset_key_var: ContextVar[str | None] = ContextVar("dataset_key", default=None)

LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(dataset_key)s | "
    "%(name)s:%(funcName)s:%(lineno)d | %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers of the HTTP stack under the store client
QUIET_LOGGERS = ("httpx", "httpcore")


class DatasetKeyFilter(logging.Filter):
    """Stamp records with ``dataset_key`` so the format string can show it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.dataset_key = dataset_key_var.get() or "-"
        return True


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name by severity."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        # Format a copy so other handlers still see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def setup_logging(level: str | None = None) -> None:
    """Install a single stdout handler on the root logger.

    Calling it again replaces the handler instead of adding a second one.

    Args:
        level: Log level name; defaults to ``Settings.log_level``
    """
    level = level or get_settings().log_level

    formatter_class = ColoredFormatter if sys.stdout.isatty() else logging.Formatter
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter_class(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(DatasetKeyFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured at {level}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def dataset_context(key_name: str | None) -> Iterator[None]:
    """Attach ``key_name`` to records logged inside the block.

    The previous key is restored on exit, also across ``await`` points of
    the task that entered the block.
    """
    token = dataset_key_var.set(key_name)
    try:
        yield
    finally:
        dataset_key_var.reset(token)
