#!/usr/bin/env python3
"""MongoDB dump job.

This script runs once per schedule (a Kubernetes CronJob) and exits:
1. Validates configuration and the mongodump, age and rclone binaries
2. Dumps one collection, archives and encrypts it in a temporary directory
3. Uploads the encrypted dump and prunes uploads beyond the retention window

Backup configuration comes from environment variables only; the command line
only tunes logging and where the temporary directory lives.

Usage:
    python runner.py [--log-level LEVEL] [--log-dir DIR] [--work-dir DIR]
"""

import argparse
import logging
import os
import signal
import sys
from typing import List, Optional

from backend.logging_config import configure_logging, get_logger
from backend.services.automation.errors import BackupError
from backend.services.automation.executor import MongoBackupExecutor, run_backup


logger = get_logger(__name__)


def _handle_termination(signum, frame) -> None:
    """Turn a termination signal into SystemExit so cleanup handlers run."""

    logger.error("Received signal %s, aborting", signal.Signals(signum).name)
    raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Dump, encrypt and upload a MongoDB collection")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        help="Log level: TRACE, DEBUG, INFO, WARNING, ERROR (default: INFO)",
    )
    parser.add_argument(
        "--log-dir",
        default=os.environ.get("LOG_DIR", ""),
        help="Directory for rotating log files (default: console only)",
    )
    parser.add_argument(
        "--work-dir",
        default=os.environ.get("WORK_DIR") or None,
        help="Parent directory for the temporary working directory (default: system temp)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point.

    Args:
        argv: Command line arguments. Defaults to `sys.argv[1:]`.

    Returns:
        int: Process exit code, 0 on success and 1 on any failure.
    """

    args = build_parser().parse_args(argv)

    try:
        configure_logging(
            log_dir=args.log_dir or None,
            log_level=args.log_level,
            debug=os.environ.get("DEBUG", "").strip().lower() in ("1", "true", "yes"),
            log_filename=os.environ.get("LOG_FILENAME", "mongodump-widget.log"),
        )
    except ValueError as exc:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logger.error("Invalid logging configuration: %s", exc)
        return 1

    signal.signal(signal.SIGTERM, _handle_termination)

    executor = MongoBackupExecutor()
    try:
        result = run_backup(executor, work_dir_parent=args.work_dir)
    except BackupError as exc:
        stage = executor.failed_state.value if executor.failed_state else "starting"
        logger.error("Backup failed while %s: %s", stage, exc)
        return 1
    except KeyboardInterrupt:
        logger.error("Backup interrupted")
        return 1
    except OSError as exc:
        logger.error("Backup failed: %s", exc)
        return 1

    logger.info(
        "Backup complete: uploaded %s, removed %s expired dump file(s)",
        result.artifact_name,
        len(result.retention.deleted_names),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
