"""Exception types raised by the backup pipeline.

Every failure the pipeline detects is fatal. The runner catches `BackupError`,
logs a single error line and exits non-zero, so stages only need to raise the
most specific subclass below.
"""

from __future__ import annotations

from typing import Optional


class BackupError(RuntimeError):
    """Base class for all fatal backup failures."""


class ConfigurationError(BackupError):
    """Raised when required configuration or tooling is missing or invalid."""


class ToolExecutionError(BackupError):
    """Raised when an external tool cannot be started or exits non-zero.

    Attributes:
        tool: Executable name.
        returncode: Exit status, or None when the tool could not be started.
        stderr: Captured standard error output.
    """

    def __init__(self, tool: str, returncode: Optional[int], stderr: str = ""):
        self.tool = tool
        self.returncode = returncode
        self.stderr = (stderr or "").strip()

        if returncode is None:
            message = f"{tool} could not be started"
        else:
            message = f"{tool} exited with status {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ArtifactError(BackupError):
    """Raised when a stage's output cannot be confirmed on disk."""
