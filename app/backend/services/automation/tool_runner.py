"""Narrow interface for invoking the external backup tools.

All stages call `mongodump`, `tar`, `age` and `rclone` through a `ToolRunner`
so the orchestration can be exercised without the real binaries.
"""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from typing import List, Sequence

from backend.logging_config import get_logger
from backend.services.automation.errors import ToolExecutionError


logger = get_logger(__name__)

SENSITIVE_FLAGS = ("--password",)
URI_FLAGS = ("--uri",)

_URI_USERINFO_RE = re.compile(r"(://)[^/@]*@")


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a single tool invocation."""

    tool: str
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def redact_uri(uri: str) -> str:
    """Mask the userinfo part of a connection string, e.g. `mongodb://***@host`."""

    return _URI_USERINFO_RE.sub(r"\1***@", uri, count=1)


def redact_args(args: Sequence[str]) -> List[str]:
    """Return a copy of `args` with credential values masked.

    Args:
        args: Command line arguments.

    Returns:
        List[str]: Arguments safe to write to the log.
    """

    redacted: List[str] = []
    for arg in args:
        flag, sep, value = str(arg).partition("=")
        if sep and flag in SENSITIVE_FLAGS:
            redacted.append(f"{flag}=***")
        elif sep and flag in URI_FLAGS:
            redacted.append(f"{flag}={redact_uri(value)}")
        else:
            redacted.append(str(arg))
    return redacted


class ToolRunner:
    """Run external executables synchronously and capture their output."""

    def run(self, tool: str, args: Sequence[str]) -> ToolResult:
        """Run `tool` with `args` and wait for it to exit.

        Args:
            tool: Executable name, resolved on PATH.
            args: Arguments passed to the executable.

        Returns:
            ToolResult: Exit status and captured output.

        Raises:
            ToolExecutionError: When the executable cannot be started.
        """

        cmd = [tool, *[str(a) for a in args]]
        logger.debug("$ %s", " ".join([tool, *redact_args(args)]))

        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise ToolExecutionError(tool, None, str(exc)) from exc

        return ToolResult(
            tool=tool,
            args=list(cmd[1:]),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def run_checked(self, tool: str, args: Sequence[str]) -> ToolResult:
        """Run a tool and raise when it exits non-zero.

        Args:
            tool: Executable name.
            args: Arguments passed to the executable.

        Returns:
            ToolResult: The successful result.

        Raises:
            ToolExecutionError: When the tool fails.
        """

        result = self.run(tool, args)
        if not result.ok:
            logger.debug("%s stderr: %s", tool, result.stderr.strip())
            raise ToolExecutionError(tool, result.returncode, result.stderr)
        return result
