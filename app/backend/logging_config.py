"""Logging configuration for the MongoDB dump job.

The job runs as a short-lived container, so console output is the primary
sink. When a log directory is configured, rotating files are written as well,
including an error-only file for quick triage of failed runs.

The configuration is safe to call multiple times.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


TRACE_LEVEL_NUM = 5

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _install_trace_level() -> None:
    """Install the TRACE logging level and `Logger.trace` helper."""

    if logging.getLevelName(TRACE_LEVEL_NUM) != "TRACE":
        logging.addLevelName(TRACE_LEVEL_NUM, "TRACE")

    if not hasattr(logging.Logger, "trace"):

        def trace(self: logging.Logger, message: str, *args, **kwargs) -> None:
            if self.isEnabledFor(TRACE_LEVEL_NUM):
                self._log(TRACE_LEVEL_NUM, message, args, **kwargs)

        logging.Logger.trace = trace  # type: ignore[attr-defined]


def resolve_log_level(log_level: Optional[str], *, debug: bool = False) -> int:
    """Translate a level name into a numeric logging level.

    Args:
        log_level: Level name (e.g. INFO, DEBUG, TRACE). Empty means default.
        debug: When True, an empty level resolves to DEBUG instead of INFO.

    Returns:
        int: Numeric log level.

    Raises:
        ValueError: When the level name is unknown.
    """

    name = str(log_level or "").strip().upper()
    if not name:
        name = "DEBUG" if debug else "INFO"

    if name == "TRACE":
        return TRACE_LEVEL_NUM

    level = getattr(logging, name, None)
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {log_level}")
    return level


def configure_logging(
    *,
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    debug: bool = False,
    log_filename: str = "mongodump-widget.log",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Configure process-wide logging.

    Args:
        log_dir: Directory for log files. Console-only logging when empty.
        log_level: Root log level name (e.g. INFO, DEBUG, TRACE).
        debug: When True, defaults to DEBUG unless log_level explicitly overrides it.
        log_filename: Log file name (within log_dir).
        max_bytes: Rotate the log file after this size.
        backup_count: Number of rotated files to keep.

    Raises:
        ValueError: When the provided log_level is invalid.
    """

    _install_trace_level()
    resolved_level = resolve_log_level(log_level, debug=debug)

    root = logging.getLogger()
    if getattr(root, "_mongodump_widget_logging_configured", False):
        return

    root.setLevel(resolved_level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_dir:
        log_filename_path = Path(log_filename)
        error_filename = f"{log_filename_path.stem}.error{log_filename_path.suffix or '.log'}"

        log_path = Path(log_dir) / str(log_filename)
        error_log_path = Path(log_dir) / error_filename
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(resolved_level)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

            error_file_handler = RotatingFileHandler(
                filename=str(error_log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            error_file_handler.setLevel(logging.ERROR)
            error_file_handler.setFormatter(formatter)
            root.addHandler(error_file_handler)
        except OSError:
            logging.getLogger(__name__).warning(
                "Failed to configure file logging under %s; continuing with console-only logging",
                log_dir,
            )

    logging.captureWarnings(True)
    root._mongodump_widget_logging_configured = True  # type: ignore[attr-defined]


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger instance.

    Args:
        name: Logger name.

    Returns:
        logging.Logger: Logger instance.
    """

    return logging.getLogger(name or __name__)
