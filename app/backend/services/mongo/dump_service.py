"""MongoDB collection dump via `mongodump`."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from backend.logging_config import get_logger
from backend.services.automation.artifact import ArtifactKind, DumpArtifact
from backend.services.automation.errors import ArtifactError
from backend.services.automation.tool_runner import ToolRunner
from backend.settings import AUTHENTICATION_DATABASE


logger = get_logger(__name__)

MONGODUMP_BIN = "mongodump"


class MongoDumpService:
    """Service for dumping a single MongoDB collection to a directory."""

    def __init__(self, runner: Optional[ToolRunner] = None):
        self.runner = runner or ToolRunner()

    def build_command(
        self,
        *,
        mongo_uri: str,
        db_name: str,
        collection: str,
        db_user: str,
        db_password: str,
        out_path: Path,
        auth_database: str = AUTHENTICATION_DATABASE,
    ) -> list[str]:
        """Return the `mongodump` arguments for one collection."""

        return [
            f"--uri={mongo_uri}",
            f"--authenticationDatabase={auth_database}",
            f"--db={db_name}",
            f"--collection={collection}",
            f"--username={db_user}",
            f"--password={db_password}",
            f"--out={out_path}",
        ]

    def dump_collection(
        self,
        *,
        mongo_uri: str,
        db_name: str,
        collection: str,
        db_user: str,
        db_password: str,
        artifact: DumpArtifact,
        auth_database: str = AUTHENTICATION_DATABASE,
    ) -> DumpArtifact:
        """Dump `db_name.collection` into the raw artifact directory.

        Args:
            mongo_uri: MongoDB connection string.
            db_name: Source database.
            collection: Source collection.
            db_user: Read-only user.
            db_password: Read-only password.
            artifact: Raw artifact whose path receives the dump.
            auth_database: Database the user authenticates against.

        Returns:
            DumpArtifact: The populated raw artifact.

        Raises:
            ToolExecutionError: When mongodump fails.
            ArtifactError: When mongodump reports success but wrote nothing.
        """

        if artifact.kind != ArtifactKind.RAW:
            raise ValueError(f"Expected a raw dump artifact, got: {artifact.kind.value}")

        logger.info("Dumping Database '%s.%s' to: %s", db_name, collection, artifact.path)
        self.runner.run_checked(
            MONGODUMP_BIN,
            self.build_command(
                mongo_uri=mongo_uri,
                db_name=db_name,
                collection=collection,
                db_user=db_user,
                db_password=db_password,
                out_path=artifact.path,
                auth_database=auth_database,
            ),
        )

        if not artifact.exists():
            raise ArtifactError(f"mongodump output missing: {artifact.path}")

        logger.info("Database '%s.%s' dumped to: %s", db_name, collection, artifact.path)
        return artifact
