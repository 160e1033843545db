"""Backup file encryption with `age`.

Archives are encrypted for a single recipient public key; no passphrase is
involved, so the job never holds material able to decrypt its own output.
The plaintext archive is deleted once the ciphertext is confirmed on disk,
leaving no unencrypted dump at rest.
"""

from __future__ import annotations

from typing import Optional

from backend.logging_config import get_logger
from backend.services.automation.artifact import ENCRYPTED_SUFFIX, ArtifactKind, DumpArtifact
from backend.services.automation.errors import ArtifactError, ConfigurationError
from backend.services.automation.tool_runner import ToolRunner


logger = get_logger(__name__)

AGE_BIN = "age"


def encrypt_file(
    artifact: DumpArtifact,
    *,
    recipient: str,
    runner: Optional[ToolRunner] = None,
) -> DumpArtifact:
    """Encrypt an archive for `recipient` and remove the plaintext.

    Args:
        artifact: Archive artifact.
        recipient: age recipient public key.
        runner: Tool runner.

    Returns:
        DumpArtifact: The encrypted artifact.

    Raises:
        ConfigurationError: When no recipient is given.
        ToolExecutionError: When age fails; the plaintext is kept.
        ArtifactError: When the ciphertext is missing after age succeeded.
    """

    if artifact.kind != ArtifactKind.ARCHIVE:
        raise ValueError(f"Expected an archive artifact, got: {artifact.kind.value}")
    if not str(recipient or "").strip():
        raise ConfigurationError("Encryption recipient is required")

    runner = runner or ToolRunner()
    encrypted = artifact.next(ArtifactKind.ENCRYPTED, ENCRYPTED_SUFFIX)

    logger.info("Encrypting the database dump file: %s", artifact.path)
    runner.run_checked(
        AGE_BIN,
        [
            f"--recipient={recipient}",
            f"--output={encrypted.path}",
            str(artifact.path),
        ],
    )

    if not encrypted.exists():
        raise ArtifactError(f"Encrypted file was not created: {encrypted.path}")

    logger.info("Encrypted database dump file at: %s", encrypted.path)
    logger.info("Removing the unprotected database dump file: %s", artifact.path)
    artifact.path.unlink()

    return encrypted
