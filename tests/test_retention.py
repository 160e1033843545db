"""Unit tests for retention parsing and planning."""

from __future__ import annotations

import pytest

from backend.services.automation.errors import ConfigurationError
from backend.services.automation.retention import (
    BackupObject,
    backup_object_from_name,
    extract_timestamp,
    parse_retention_period,
    plan_retention,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("7d", 7 * 86400),
        ("1d", 86400),
        ("12h", 12 * 3600),
        ("45m", 2700),
        ("0d", 0),
        ("365d", 365 * 86400),
    ],
)
def test_parse_retention_period_converts_to_seconds(value: str, expected: int) -> None:
    assert parse_retention_period(value).seconds == expected


def test_parse_retention_period_keeps_parts() -> None:
    period = parse_retention_period("12h")
    assert period.raw == "12h"
    assert period.magnitude == 12
    assert period.unit == "h"


@pytest.mark.parametrize("value", ["7x", "7", "d", "", "-1d", "7.5d", "7D", "seven d", " 7d", "7dd", "1w"])
def test_parse_retention_period_rejects_invalid_values(value: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_retention_period(value)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("dump-1000000000.tgz.enc", 1000000000),
        ("dump-1700000000.tgz", 1700000000),
        ("nightly-shop-1700000000.tgz.enc", 1700000000),
        ("dump-42.enc", 42),
        ("dump-.tgz.enc", None),
        ("dump-1700000000", None),
        ("dump1700000000.tgz.enc", None),
        ("notes.txt", None),
        ("dump-17000abc.tgz.enc", None),
        ("", None),
    ],
)
def test_extract_timestamp(name: str, expected) -> None:
    assert extract_timestamp(name) == expected


def test_backup_object_from_name_parses_timestamp() -> None:
    obj = backup_object_from_name("dump-0.tgz.enc", size=10)
    assert obj.timestamp == 0
    assert obj.size == 10
    assert backup_object_from_name("README").timestamp is None


def test_plan_retention_deletes_only_strictly_older_than_window() -> None:
    now = 1000605000
    old = backup_object_from_name("dump-1000000000.tgz.enc")
    recent = backup_object_from_name(f"dump-{now - 3600}.tgz.enc")

    keep, delete = plan_retention([old, recent], parse_retention_period("7d"), now=now)

    assert delete == [old]
    assert keep == [recent]


def test_plan_retention_keeps_artifact_exactly_at_threshold() -> None:
    now = 1_700_000_000
    at_threshold = backup_object_from_name(f"dump-{now - 2700}.tgz.enc")
    just_over = backup_object_from_name(f"dump-{now - 2701}.tgz.enc")

    keep, delete = plan_retention([at_threshold, just_over], parse_retention_period("45m"), now=now)

    assert keep == [at_threshold]
    assert delete == [just_over]


def test_plan_retention_never_deletes_names_without_timestamp() -> None:
    stray = BackupObject(id="manual-export.json", name="manual-export.json")

    keep, delete = plan_retention([stray], parse_retention_period("0m"), now=1_700_000_000)

    assert keep == [stray]
    assert delete == []


def test_plan_retention_with_zero_window_deletes_everything_older_than_now() -> None:
    now = 1_700_000_000
    current = backup_object_from_name(f"dump-{now}.tgz.enc")
    previous = backup_object_from_name(f"dump-{now - 1}.tgz.enc")

    keep, delete = plan_retention([current, previous], parse_retention_period("0d"), now=now)

    assert keep == [current]
    assert delete == [previous]


def test_plan_retention_empty_listing() -> None:
    assert plan_retention([], parse_retention_period("7d"), now=1) == ([], [])
