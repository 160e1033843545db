"""Storage provider factory for backup destinations.

Converts validated settings into the concrete provider the executor uploads to
and prunes from. Every destination is reached through rclone, which handles the
object storage specifics (S3, R2, GCS, ...) through its own config file.
"""

from __future__ import annotations

from typing import Optional

from backend.services.automation.storage.base import StorageProvider
from backend.services.automation.storage.rclone import RcloneConfig, RcloneStorage
from backend.services.automation.tool_runner import ToolRunner
from backend.settings import BackupSettings


def build_storage_provider(settings: BackupSettings, runner: Optional[ToolRunner] = None) -> StorageProvider:
    """Instantiate the storage provider for the configured destination.

    Args:
        settings: Validated backup settings.
        runner: Tool runner shared with the other stages.

    Returns:
        StorageProvider: Storage provider instance.
    """

    rclone_cfg = RcloneConfig(
        config_path=settings.rclone_conf,
        remote=settings.oss,
        bucket=settings.oss_bucket,
        path=settings.oss_path,
    )
    return RcloneStorage(rclone_cfg, runner=runner)
