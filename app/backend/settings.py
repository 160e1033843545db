"""Backup job configuration.

All configuration arrives as environment-style values. `BackupSettings.from_env`
reads the required names in a fixed order and fails on the first one that is
unset or empty, naming it in the error.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from backend.services.automation.errors import ConfigurationError


REQUIRED_ENV_VARS: Tuple[str, ...] = (
    "RCLONE_CONF",
    "OSS",
    "OSS_BUCKET",
    "OSS_PATH",
    "MONGO_DB",
    "MONGO_COL",
    "MONGO_URI",
    "MONGO_RO_USERNAME",
    "MONGO_RO_PASSWORD",
    "ENCRYPTION_PUBLIC_KEY",
    "RETENTION_PERIOD",
)

AUTHENTICATION_DATABASE = "admin"


def get_env_or_file(env: Mapping[str, str], name: str, default: str = "") -> str:
    """Get a value from the environment or from a `<NAME>_FILE` secret mount.

    Args:
        env: Environment mapping.
        name: Variable name.
        default: Value returned when neither source is set.

    Returns:
        str: The value.
    """

    value = env.get(name, "")
    if value:
        return value

    file_path = env.get(f"{name}_FILE", "")
    if file_path and os.path.exists(file_path):
        with open(file_path, "r", encoding="utf-8") as f:
            return f.read().strip()

    return default


class BackupSettings(BaseModel):
    """Immutable configuration for a single backup run."""

    model_config = ConfigDict(frozen=True)

    rclone_conf: str = Field(..., min_length=1, description="Path to the rclone config file")
    oss: str = Field(..., min_length=1, description="rclone remote name of the object storage")
    oss_bucket: str = Field(..., min_length=1, description="Destination bucket")
    oss_path: str = Field(..., min_length=1, description="Destination path prefix within the bucket")
    mongo_db: str = Field(..., min_length=1, description="Source database")
    mongo_col: str = Field(..., min_length=1, description="Source collection")
    mongo_uri: str = Field(..., min_length=1, repr=False, description="MongoDB connection string")
    mongo_ro_username: str = Field(..., min_length=1, description="Read-only database user")
    mongo_ro_password: str = Field(..., min_length=1, repr=False, description="Read-only database password")
    encryption_public_key: str = Field(..., min_length=1, description="age recipient for the dump")
    retention_period: str = Field(..., min_length=1, description="Retention window, e.g. 7d, 12h, 45m")

    @property
    def destination(self) -> str:
        """Remote rclone path artifacts are uploaded to and pruned from."""

        return f"{self.oss}:{self.oss_bucket}{self.oss_path}"

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> "BackupSettings":
        """Build settings from an environment mapping.

        Args:
            env: Environment mapping. Defaults to `os.environ`.
            logger: Optional logger used to report each checked variable.

        Returns:
            BackupSettings: Parsed settings.

        Raises:
            ConfigurationError: When a required variable is unset or empty.
        """

        env = os.environ if env is None else env

        values = {}
        for name in REQUIRED_ENV_VARS:
            if logger is not None:
                logger.info("Checking required environment variable: '%s'", name)
            value = get_env_or_file(env, name)
            if not value:
                raise ConfigurationError(f"Missing environment variable: {name}")
            values[name.lower()] = value

        return cls(**values)
