"""Local dump artifact as it moves through the pipeline.

The artifact starts as the raw `mongodump` output directory and is replaced in
place by an archive and then by its ciphertext. Names share the timestamp
captured when the run started, e.g. `dump-1700000000`, `dump-1700000000.tgz`,
`dump-1700000000.tgz.enc`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


DUMP_PREFIX = "dump-"
ARCHIVE_SUFFIX = ".tgz"
ENCRYPTED_SUFFIX = ".enc"


class ArtifactKind(str, Enum):
    RAW = "raw"
    ARCHIVE = "archive"
    ENCRYPTED = "encrypted"


@dataclass(frozen=True)
class DumpArtifact:
    """A single representation of the dump on local disk."""

    path: Path
    kind: ArtifactKind
    timestamp: int

    @property
    def name(self) -> str:
        return self.path.name

    @classmethod
    def raw(cls, work_dir: Path, timestamp: int) -> "DumpArtifact":
        """Return the raw dump artifact for a run started at `timestamp`."""

        timestamp = int(timestamp)
        return cls(path=Path(work_dir) / f"{DUMP_PREFIX}{timestamp}", kind=ArtifactKind.RAW, timestamp=timestamp)

    def next(self, kind: ArtifactKind, suffix: str) -> "DumpArtifact":
        """Return the artifact that replaces this one, named with an extra suffix."""

        return DumpArtifact(path=self.path.with_name(self.path.name + suffix), kind=kind, timestamp=self.timestamp)

    def exists(self) -> bool:
        if self.kind == ArtifactKind.RAW:
            return self.path.is_dir()
        return self.path.is_file()
