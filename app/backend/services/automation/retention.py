"""Retention policy planning for uploaded dumps.

Uploaded artifacts carry their creation time in their name
(`dump-<epoch seconds>.tgz.enc`), so the planner needs nothing but the remote
listing and the current time:

- `RETENTION_PERIOD` is parsed into a threshold in seconds (`7d`, `12h`, `45m`).
- Each listed name is reduced to its embedded timestamp.
- Anything strictly older than the threshold is planned for deletion.

Names that do not embed a timestamp are never deleted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from backend.logging_config import get_logger
from backend.services.automation.errors import ConfigurationError


logger = get_logger(__name__)

UNIT_SECONDS: Dict[str, int] = {
    "d": 86400,
    "h": 3600,
    "m": 60,
}

_MAGNITUDE_RE = re.compile(r"[0-9]+")
_TIMESTAMP_RE = re.compile(r".*-([0-9]+)\..*", re.DOTALL)


@dataclass(frozen=True)
class RetentionPeriod:
    """Parsed retention window.

    Attributes:
        raw: Original configuration value.
        magnitude: Number of units.
        unit: One of `d`, `h`, `m`.
    """

    raw: str
    magnitude: int
    unit: str

    @property
    def seconds(self) -> int:
        return self.magnitude * UNIT_SECONDS[self.unit]


@dataclass(frozen=True)
class BackupObject:
    """Metadata about a stored backup object."""

    id: str
    name: str
    timestamp: Optional[int] = None
    size: Optional[int] = None


def parse_retention_period(value: str) -> RetentionPeriod:
    """Parse a retention string such as `7d`, `12h` or `45m`.

    Args:
        value: Raw configuration value.

    Returns:
        RetentionPeriod: Parsed period.

    Raises:
        ConfigurationError: When the unit is unknown or the magnitude is not a
            non-negative integer.
    """

    raw = str(value or "")
    unit = raw[-1:]
    if unit not in UNIT_SECONDS:
        raise ConfigurationError(f"Unable to handle retention value: '{raw}'. Aborting.")

    magnitude = raw[:-1]
    if not _MAGNITUDE_RE.fullmatch(magnitude):
        raise ConfigurationError(f"Unable to handle retention value: '{raw}'. Aborting.")

    return RetentionPeriod(raw=raw, magnitude=int(magnitude), unit=unit)


def extract_timestamp(name: str) -> Optional[int]:
    """Return the creation timestamp embedded in an artifact name.

    The timestamp is the run of digits after the last `-` that is directly
    followed by a `.`, so `dump-1700000000.tgz.enc` yields `1700000000`.

    Args:
        name: Artifact file name.

    Returns:
        Optional[int]: Epoch seconds, or None when the name does not match.
    """

    match = _TIMESTAMP_RE.fullmatch(str(name or ""))
    if not match:
        return None
    return int(match.group(1))


def backup_object_from_name(name: str, *, size: Optional[int] = None) -> BackupObject:
    """Build a BackupObject for a remote name, parsing its embedded timestamp."""

    return BackupObject(id=name, name=name, timestamp=extract_timestamp(name), size=size)


def plan_retention(
    backups: Sequence[BackupObject],
    retention: RetentionPeriod,
    *,
    now: int,
) -> Tuple[List[BackupObject], List[BackupObject]]:
    """Return (keep, delete) lists according to the retention window.

    An artifact is deleted only when its age is strictly greater than the
    window; artifacts without an embedded timestamp are always kept.

    Args:
        backups: Existing backups.
        retention: Retention window.
        now: Current time in epoch seconds.

    Returns:
        Tuple[List[BackupObject], List[BackupObject]]: Keep and delete lists.
    """

    threshold = retention.seconds
    keep: List[BackupObject] = []
    delete: List[BackupObject] = []

    for obj in backups:
        if obj.timestamp is None:
            logger.debug("Skipping '%s': no embedded timestamp", obj.name)
            keep.append(obj)
            continue

        if now - obj.timestamp > threshold:
            delete.append(obj)
        else:
            keep.append(obj)

    return keep, delete
