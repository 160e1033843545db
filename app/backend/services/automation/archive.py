"""Pack and compress the raw dump directory into a single archive."""

from __future__ import annotations

import shutil
from typing import Optional

from backend.logging_config import get_logger
from backend.services.automation.artifact import ARCHIVE_SUFFIX, ArtifactKind, DumpArtifact
from backend.services.automation.errors import ArtifactError
from backend.services.automation.tool_runner import ToolRunner


logger = get_logger(__name__)

TAR_BIN = "tar"


def compress_dump(artifact: DumpArtifact, *, runner: Optional[ToolRunner] = None) -> DumpArtifact:
    """Replace the raw dump directory with a gzipped tarball next to it.

    Members are stored relative to the dump directory, so the archive holds
    only the dump contents and none of the working directory path. The raw
    directory is removed only once the archive is confirmed on disk.

    Args:
        artifact: Raw dump artifact.
        runner: Tool runner.

    Returns:
        DumpArtifact: The archive artifact.

    Raises:
        ToolExecutionError: When tar fails.
        ArtifactError: When the archive is missing after tar succeeded.
    """

    if artifact.kind != ArtifactKind.RAW:
        raise ValueError(f"Expected a raw dump artifact, got: {artifact.kind.value}")

    runner = runner or ToolRunner()
    archive = artifact.next(ArtifactKind.ARCHIVE, ARCHIVE_SUFFIX)

    logger.info("Packing and compressing database dump files at: %s", artifact.path)
    runner.run_checked(
        TAR_BIN,
        [
            "--create",
            "--gzip",
            f"--file={archive.path}",
            f"--directory={artifact.path}",
            ".",
        ],
    )

    if not archive.exists():
        raise ArtifactError(f"Archive was not created: {archive.path}")

    logger.info("Database dump files packed/compressed at: %s", archive.path)
    logger.info("Removing the unpacked/compressed database dump files at: %s", artifact.path)
    shutil.rmtree(artifact.path)

    return archive
