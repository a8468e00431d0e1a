# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Logging setup for FilterBox.

Library modules only create named loggers (`filterbox.registry`,
`filterbox.pipeline`, ...). Applications and the CLI call configure_logging()
or get_logger() to attach console and, optionally, rotating file output.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

ROOT_LOGGER = "filterbox"


class FilterBoxLogger:
    """
    Handler setup for a FilterBox logger.

    Features:
    - Console logging to stderr
    - Optional file logging with rotation
    - Structured log format with timestamps
    """

    def __init__(
        self,
        name: str = ROOT_LOGGER,
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        console_output: bool = True,
    ):
        self.name = name
        self.logger = logging.getLogger(name)

        # Clear any existing handlers
        self.logger.handlers.clear()
        self.logger.setLevel(self._parse_level(level))

        console_formatter = logging.Formatter(
            fmt="[%(asctime)s] [%(name)s:%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        file_formatter = logging.Formatter(
            fmt="%(asctime)s | %(name)s | %(levelname)s | %(filename)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        if console_output:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(console_formatter)
            console_handler.setLevel(self._parse_level(level))
            self.logger.addHandler(console_handler)

        self.log_file: Optional[Path] = None
        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = log_dir / f"{name}.log"

            # Rotate after 10MB, keep 5 backup files
            file_handler = RotatingFileHandler(
                self.log_file,
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(file_formatter)
            file_handler.setLevel(logging.DEBUG)
            self.logger.addHandler(file_handler)

    def _parse_level(self, level: str) -> int:
        """Convert string level to logging constant"""
        levels = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return levels.get(level.upper(), logging.INFO)

    def set_level(self, level: str):
        """Change log level dynamically"""
        self.logger.setLevel(self._parse_level(level))


_loggers: Dict[str, FilterBoxLogger] = {}


def get_logger(name: str = ROOT_LOGGER, level: Optional[str] = None) -> FilterBoxLogger:
    """
    Get or create a configured logger.

    Level and log directory default to the `observability` config section.
    """
    if name not in _loggers:
        from .config import get_config

        observability = get_config().observability
        _loggers[name] = FilterBoxLogger(
            name=name,
            level=level or observability.log_level,
            log_dir=observability.log_dir,
        )
    elif level:
        _loggers[name].set_level(level)

    return _loggers[name]


def configure_logging(level: Optional[str] = None) -> FilterBoxLogger:
    """(Re)attach handlers to the package root logger, bound to the current stderr"""
    _loggers.pop(ROOT_LOGGER, None)
    return get_logger(ROOT_LOGGER, level=level)
