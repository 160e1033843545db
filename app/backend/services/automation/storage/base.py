"""Base storage provider interface for backup destinations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from backend.services.automation.retention import BackupObject


class StorageProvider(ABC):
    """Abstract base class for storage providers."""

    @property
    @abstractmethod
    def destination(self) -> str:
        """Human readable location backups are stored at."""

    @abstractmethod
    def list_backups(self) -> List[BackupObject]:
        """List all backups stored at the destination.

        Returns:
            List[BackupObject]: Stored backups.
        """

    @abstractmethod
    def upload_backup(self, *, local_path: Path) -> BackupObject:
        """Upload a local backup file, keeping its file name.

        Args:
            local_path: Path to the local file.

        Returns:
            BackupObject: Metadata about the uploaded file.
        """

    @abstractmethod
    def delete_backup(self, backup: BackupObject) -> None:
        """Delete a single stored backup.

        Args:
            backup: Backup to delete.
        """
