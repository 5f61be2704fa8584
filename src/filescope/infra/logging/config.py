from __future__ import annotations

"""
Logging Configuration Model.

Severity names accepted from the CLI and options files, and the immutable
settings object consumed by configure_logging().
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

LEVEL_NAMES: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings of the logging subsystem.

    Attributes:
        level: Minimum severity name.
        console: Write records to stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Size of a log file segment before rollover.
        backup_count: Rolled-over segments kept on disk.
        console_fmt: Format of console lines.
        file_fmt: Format of file lines; includes the worker thread name.
        datefmt: Timestamp format of file lines.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 3

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
