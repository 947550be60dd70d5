"""Centralized logging configuration for ticketfee."""

import sys
import logging
import logging.handlers
from pathlib import Path
from typing import Any, Dict
from .config import Config
from .constants import DEFAULT_LOG_BACKUP_COUNT, DEFAULT_LOG_MAX_BYTES

FILE_FORMAT = '%(asctime)s [%(levelname)-8s] [%(name)s] %(message)s'
CONSOLE_FORMAT = '[%(levelname)-8s] [%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _rotating_handler(path: Path, rotation: Dict[str, Any], archive_dir: Path,
                      timed: bool) -> logging.Handler:
    """
    Build a file handler rotating by time (rotation["when"]) or by size.

    Timed rotation moves rotated files into archive_dir.
    """
    backup_count = rotation.get("backup_count", DEFAULT_LOG_BACKUP_COUNT)
    if timed:
        handler = logging.handlers.TimedRotatingFileHandler(
            path,
            when=rotation["when"],
            backupCount=backup_count,
            encoding="utf-8"
        )
        handler.namer = lambda name: str(archive_dir / Path(name).name)
        return handler
    return logging.handlers.RotatingFileHandler(
        path,
        maxBytes=rotation.get("max_bytes", DEFAULT_LOG_MAX_BYTES),
        backupCount=backup_count,
        encoding="utf-8"
    )


def setup_logging(config: Config) -> None:
    """
    Initialize logging for a CLI run.

    The main log rotates by time when logging.rotation.when is set, by size
    otherwise; the error log always rotates by size. Console output goes to
    stderr because stdout carries the JSON result.

    Args:
        config: Configuration instance with logging settings
    """
    log_dir_path = Path(config.log_dir)
    log_dir_path.mkdir(parents=True, exist_ok=True)
    archive_dir = log_dir_path / "archive"
    archive_dir.mkdir(exist_ok=True)

    file_level = getattr(logging, config.log_level.upper(), logging.INFO)
    console_level = getattr(logging, config.console_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(file_level, console_level))
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    rotation = config.log_rotation
    file_formatter = logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT)

    main_handler = _rotating_handler(
        log_dir_path / "ticketfee.log", rotation, archive_dir, timed=bool(rotation.get("when"))
    )
    main_handler.setLevel(file_level)
    main_handler.setFormatter(file_formatter)
    root_logger.addHandler(main_handler)

    error_handler = _rotating_handler(
        log_dir_path / "ticketfee-error.log", rotation, archive_dir, timed=False
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(file_formatter)
    root_logger.addHandler(error_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific component."""
    return logging.getLogger(name)
