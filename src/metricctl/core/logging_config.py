#!/usr/bin/env python3
"""
Logging setup for the metricctl package logger

Only the ``metricctl`` logger is touched; the host application's root logger
and its handlers are left alone. Handlers installed here are named
``metricctl.*`` so repeated calls replace them instead of stacking.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

PACKAGE_LOGGER = "metricctl"
HANDLER_PREFIX = "metricctl."

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Colors the level name by severity"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        # Color a copy so file handlers sharing the record see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname)
        if color:
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _package_handlers(package_logger: logging.Logger):
    return [h for h in package_logger.handlers if (h.get_name() or "").startswith(HANDLER_PREFIX)]


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    enable_colors: bool = True,
    console_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream: Optional[TextIO] = None,
    propagate: bool = False,
) -> logging.Logger:
    """
    Attach console and optional file handlers to the metricctl logger

    Args:
        level: Level name for the package logger (unknown names fall back to INFO)
        log_file: Optional log file path; parent directories are created
        enable_colors: Color level names on the console handler
        console_format: Format string for the console handler
        stream: Console stream, stdout by default
        propagate: Also pass records up to the root logger

    Returns:
        The configured package logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in _package_handlers(package_logger):
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.set_name(f"{HANDLER_PREFIX}console")
    console_handler.setFormatter(
        ColoredFormatter(console_format) if enable_colors else logging.Formatter(console_format)
    )
    package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.set_name(f"{HANDLER_PREFIX}file")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        package_logger.addHandler(file_handler)

    package_logger.setLevel(numeric_level)
    package_logger.propagate = propagate

    package_logger.debug(f"Logging configured at {logging.getLevelName(numeric_level)} level"
                         + (f", file {log_file}" if log_file else ""))
    return package_logger


def configure_logging_from_settings(settings) -> logging.Logger:
    """Apply the logging section of a Settings object; debug mode forces DEBUG"""
    section = settings.logging
    return configure_logging(
        level="DEBUG" if settings.debug else section.level,
        log_file=section.file,
        enable_colors=section.enable_colors,
        console_format=section.format,
    )
