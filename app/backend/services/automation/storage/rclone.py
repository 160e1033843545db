"""Object storage provider backed by the `rclone` CLI.

Credentials never appear on the command line: rclone reads them from its own
config file, mounted read-only into the container.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from backend.logging_config import get_logger
from backend.services.automation.retention import BackupObject, backup_object_from_name
from backend.services.automation.storage.base import StorageProvider
from backend.services.automation.tool_runner import ToolRunner


logger = get_logger(__name__)

RCLONE_BIN = "rclone"


@dataclass
class RcloneConfig:
    """Configuration for rclone storage.

    Attributes:
        config_path: Path to the rclone config file.
        remote: rclone remote name.
        bucket: Bucket on the remote.
        path: Path prefix within the bucket, including its leading `/`.
    """

    config_path: str
    remote: str
    bucket: str
    path: str = ""

    @property
    def destination(self) -> str:
        return f"{self.remote}:{self.bucket}{self.path}"


def parse_ls_output(output: str) -> List[BackupObject]:
    """Parse `rclone ls` output into BackupObjects.

    Each line is `<size> <name>`, the size right-aligned. The line is split
    once after the size so names containing spaces are kept whole.

    Args:
        output: Raw stdout of `rclone ls`.

    Returns:
        List[BackupObject]: Listed objects, in listing order.
    """

    backups: List[BackupObject] = []
    for line in output.splitlines():
        stripped = line.lstrip()
        if not stripped:
            continue

        size_text, sep, rest = stripped.partition(" ")
        size: Optional[int] = None
        name = stripped
        if sep and rest and size_text.isdigit():
            size = int(size_text)
            name = rest
        backups.append(backup_object_from_name(name, size=size))
    return backups


class RcloneStorage(StorageProvider):
    """rclone-backed storage provider."""

    def __init__(self, config: RcloneConfig, runner: Optional[ToolRunner] = None):
        """Initialize rclone storage.

        Args:
            config: rclone storage configuration.
            runner: Tool runner used for rclone calls.
        """

        self.config = config
        self.runner = runner or ToolRunner()

    @property
    def destination(self) -> str:
        return self.config.destination

    def _rclone(self, *args: str):
        return self.runner.run_checked(RCLONE_BIN, ["--config", self.config.config_path, *args])

    def list_backups(self) -> List[BackupObject]:
        result = self._rclone("ls", self.destination)
        backups = parse_ls_output(result.stdout)
        logger.info("%s database dump files at: %s", len(backups), self.destination)
        return backups

    def upload_backup(self, *, local_path: Path) -> BackupObject:
        logger.info("Uploading the database dump file '%s' to: %s", local_path.name, self.destination)
        self._rclone("copy", str(local_path), self.destination)
        logger.info("Database dump file uploaded: %s/%s", self.destination, local_path.name)

        size = local_path.stat().st_size if local_path.exists() else None
        return backup_object_from_name(local_path.name, size=size)

    def delete_backup(self, backup: BackupObject) -> None:
        remote_path = f"{self.destination}/{backup.id}"
        logger.info("Removing dump file at: %s", remote_path)
        self._rclone("delete", remote_path)
