"""Execution engine for the MongoDB dump job.

This module contains the orchestration to:
- Validate configuration and tooling
- Dump, archive and encrypt one collection inside a private working directory
- Upload the encrypted artifact and prune uploads beyond the retention window

The run is a straight line of states; the first failure stops it.
"""

from __future__ import annotations

import shutil
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Mapping, Optional

from backend.logging_config import get_logger
from backend.services.automation.archive import compress_dump
from backend.services.automation.artifact import DumpArtifact
from backend.services.automation.backup_file_crypto import encrypt_file
from backend.services.automation.environment import validate_environment
from backend.services.automation.retention import BackupObject, parse_retention_period, plan_retention
from backend.services.automation.storage.base import StorageProvider
from backend.services.automation.storage.factory import build_storage_provider
from backend.services.automation.tool_runner import ToolRunner
from backend.services.mongo.dump_service import MongoDumpService
from backend.settings import BackupSettings


logger = get_logger(__name__)

WORK_DIR_PREFIX = "mongodump-widget-"


class PipelineState(str, Enum):
    VALIDATING = "validating"
    DUMPING = "dumping"
    ARCHIVING = "archiving"
    ENCRYPTING = "encrypting"
    UPLOADING = "uploading"
    PRUNING = "pruning"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RetentionSummary:
    """Outcome of the pruning stage."""

    threshold_seconds: int
    now: int
    existing: int = 0
    kept: int = 0
    deleted_names: List[str] = field(default_factory=list)


@dataclass
class BackupRunResult:
    """Outcome of a successful run."""

    started_at: int
    artifact_name: str
    uploaded: BackupObject
    retention: RetentionSummary


def _format_epoch(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%a %b %d %H:%M:%S UTC %Y")


@contextmanager
def working_directory(parent: Optional[str] = None) -> Iterator[Path]:
    """Create a private working directory that is removed on exit.

    The directory is removed however the block is left: normal return,
    exception, or `SystemExit` raised from a signal handler.

    Args:
        parent: Directory to create the working directory in. System temp by default.

    Yields:
        Path: The working directory.
    """

    with tempfile.TemporaryDirectory(prefix=WORK_DIR_PREFIX, dir=parent) as tmpdir:
        logger.debug("Created working directory: %s", tmpdir)
        try:
            yield Path(tmpdir)
        finally:
            logger.debug("Removing working directory: %s", tmpdir)


class MongoBackupExecutor:
    """Run the dump, archive, encrypt, upload and prune stages in order."""

    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        *,
        runner: Optional[ToolRunner] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the executor.

        Args:
            env: Environment mapping. Defaults to `os.environ`.
            runner: Tool runner for every external call.
            which: Executable resolver used during validation.
            clock: Source of the current time in epoch seconds.
        """

        self.env = env
        self.runner = runner or ToolRunner()
        self.which = which
        self.clock = clock
        self.state: Optional[PipelineState] = None
        self.failed_state: Optional[PipelineState] = None

    def _transition(self, state: PipelineState) -> None:
        logger.debug("Pipeline state: %s -> %s", self.state.value if self.state else None, state.value)
        self.state = state

    def run(self, work_dir: Path) -> BackupRunResult:
        """Execute the full pipeline inside `work_dir`.

        Args:
            work_dir: Working directory owned by this run.

        Returns:
            BackupRunResult: Run information.

        Raises:
            BackupError: On the first failing stage.
        """

        started_at = int(self.clock())

        try:
            self._transition(PipelineState.VALIDATING)
            settings = validate_environment(self.env, which=self.which)

            self._transition(PipelineState.DUMPING)
            artifact = self._dump(settings, DumpArtifact.raw(work_dir, started_at))

            self._transition(PipelineState.ARCHIVING)
            artifact = compress_dump(artifact, runner=self.runner)

            self._transition(PipelineState.ENCRYPTING)
            artifact = encrypt_file(artifact, recipient=settings.encryption_public_key, runner=self.runner)

            self._transition(PipelineState.UPLOADING)
            storage = build_storage_provider(settings, runner=self.runner)
            uploaded = storage.upload_backup(local_path=artifact.path)

            self._transition(PipelineState.PRUNING)
            summary = self._prune(storage, settings.retention_period)
        except BaseException:
            self.failed_state = self.state
            self._transition(PipelineState.FAILED)
            raise

        self._transition(PipelineState.DONE)
        return BackupRunResult(
            started_at=started_at,
            artifact_name=artifact.name,
            uploaded=uploaded,
            retention=summary,
        )

    def _dump(self, settings: BackupSettings, artifact: DumpArtifact) -> DumpArtifact:
        service = MongoDumpService(self.runner)
        return service.dump_collection(
            mongo_uri=settings.mongo_uri,
            db_name=settings.mongo_db,
            collection=settings.mongo_col,
            db_user=settings.mongo_ro_username,
            db_password=settings.mongo_ro_password,
            artifact=artifact,
        )

    def _prune(self, storage: StorageProvider, retention_value: str) -> RetentionSummary:
        """Delete uploaded artifacts older than the retention window.

        Args:
            storage: Destination provider.
            retention_value: Raw `RETENTION_PERIOD` value.

        Returns:
            RetentionSummary: What was found and deleted.
        """

        logger.info(
            "Removing prior dump files at '%s' beyond the retention period of: '%s'",
            storage.destination,
            retention_value,
        )
        retention = parse_retention_period(retention_value)
        logger.info("Using a maximum retention seconds of: %s (%s)", retention.seconds, retention.raw)

        logger.info("Fetch a list of database dump files at: %s", storage.destination)
        existing = storage.list_backups()

        now = int(self.clock())
        logger.info("Comparing database dump file timestamps against: %s (%s)", now, _format_epoch(now))
        keep, delete = plan_retention(existing, retention, now=now)

        summary = RetentionSummary(
            threshold_seconds=retention.seconds,
            now=now,
            existing=len(existing),
            kept=len(keep),
        )
        for backup in delete:
            logger.info(
                "Dump file '%s' has aged %s seconds (%s)",
                backup.name,
                now - backup.timestamp,
                _format_epoch(backup.timestamp),
            )
            logger.info(
                "Dump file '%s' is beyond the %s seconds (%s) retention period",
                backup.name,
                retention.seconds,
                retention.raw,
            )
            storage.delete_backup(backup)
            summary.deleted_names.append(backup.name)

        return summary


def run_backup(executor: MongoBackupExecutor, *, work_dir_parent: Optional[str] = None) -> BackupRunResult:
    """Run one backup inside a fresh working directory.

    Args:
        executor: Executor to run. Its state is left for the caller to inspect.
        work_dir_parent: Parent of the working directory.

    Returns:
        BackupRunResult: Run information.
    """

    with working_directory(work_dir_parent) as work_dir:
        return executor.run(work_dir)
