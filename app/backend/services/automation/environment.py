"""Pre-flight validation of configuration and external tooling."""

from __future__ import annotations

import shutil
from typing import Callable, Mapping, Optional, Tuple

from backend.logging_config import get_logger
from backend.services.automation.errors import ConfigurationError
from backend.settings import BackupSettings


logger = get_logger(__name__)

REQUIRED_TOOLS: Tuple[str, ...] = ("rclone", "mongodump", "age")


def check_required_tools(
    tools: Tuple[str, ...] = REQUIRED_TOOLS,
    *,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> None:
    """Ensure every required executable resolves on PATH.

    Args:
        tools: Executable names.
        which: Resolver, `shutil.which` by default.

    Raises:
        ConfigurationError: Naming the first tool that cannot be found.
    """

    for tool in tools:
        resolved = which(tool)
        if not resolved:
            raise ConfigurationError(f"{tool} is not installed. Aborting.")
        logger.debug("Found %s at %s", tool, resolved)


def validate_environment(
    env: Optional[Mapping[str, str]] = None,
    *,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> BackupSettings:
    """Validate configuration and tooling before any work starts.

    Args:
        env: Environment mapping. Defaults to `os.environ`.
        which: Executable resolver.

    Returns:
        BackupSettings: Validated settings.

    Raises:
        ConfigurationError: When a variable or tool is missing.
    """

    logger.info("Checking dependencies")
    settings = BackupSettings.from_env(env, logger=logger)
    check_required_tools(which=which)
    return settings
