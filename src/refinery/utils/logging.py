"""
Logging setup for Refinery.

All loggers live under the ``refinery`` logger. Records go to stderr
(stdout carries extracted text) and optionally to a rotating file.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from refinery.config.settings import LoggingSettings

ROOT_LOGGER_NAME = "refinery"

_logging_configured = False


def setup_logging(
    settings: LoggingSettings | None = None,
    level: str | None = None,
) -> logging.Logger:
    """
    Configure the ``refinery`` logger.

    Only the first call has an effect until ``reset_logging`` is called.

    Args:
        settings: Logging configuration. Defaults are used if None.
        level: Level name overriding the configured one (e.g. "DEBUG").

    Returns:
        The application logger.
    """
    global _logging_configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if _logging_configured:
        return logger

    settings = settings or LoggingSettings()
    numeric_level = getattr(logging, (level or settings.level).upper())
    formatter = logging.Formatter(fmt=settings.format, datefmt=settings.date_format)

    logger.handlers.clear()
    logger.setLevel(numeric_level)

    if settings.log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if settings.file_path is not None:
        logger.addHandler(_create_file_handler(
            file_path=settings.file_path,
            max_bytes=settings.max_file_size_mb * 1024 * 1024,
            backup_count=settings.backup_count,
            level=numeric_level,
            formatter=formatter,
        ))

    # Own handlers only; don't duplicate into the root logger
    logger.propagate = False
    _logging_configured = True

    return logger


def _create_file_handler(
    file_path: Path,
    max_bytes: int,
    backup_count: int,
    level: int,
    formatter: logging.Formatter,
) -> RotatingFileHandler:
    file_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(file_path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Logger for a module, placed under the ``refinery`` logger.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Normalization finished")
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Remove handlers and allow ``setup_logging`` to run again."""
    global _logging_configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    logger.propagate = True
    _logging_configured = False


class LoggerAdapter(logging.LoggerAdapter):
    """
    Appends ``[key=value]`` context to every message.

    Example:
        >>> logger = LoggerAdapter(get_logger(__name__), {"source": "page.html"})
        >>> logger.info("Extracted")  # "Extracted [source=page.html]"
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        if self.extra:
            context = " ".join(f"[{k}={v}]" for k, v in self.extra.items())
            msg = f"{msg} {context}"
        return msg, kwargs


def get_logger_with_context(name: str | None = None, **context: str) -> LoggerAdapter:
    """Module logger that tags every message with ``context``."""
    return LoggerAdapter(get_logger(name), context)
