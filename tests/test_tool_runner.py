"""Tests for the subprocess-backed tool runner."""

from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from backend.services.automation.errors import ToolExecutionError
from backend.services.automation.tool_runner import ToolRunner, redact_uri


def test_run_captures_output(monkeypatch) -> None:
    seen = {}

    def fake_run(cmd, capture_output, text, check):  # noqa: ANN001
        seen["cmd"] = cmd
        seen["check"] = check
        return SimpleNamespace(returncode=0, stdout="  12 dump-1.tgz.enc\n", stderr="")

    monkeypatch.setattr("backend.services.automation.tool_runner.subprocess.run", fake_run)

    result = ToolRunner().run("rclone", ["ls", "r2:backups"])

    assert seen == {"cmd": ["rclone", "ls", "r2:backups"], "check": False}
    assert result.ok
    assert result.stdout == "  12 dump-1.tgz.enc\n"


def test_run_returns_non_zero_status(monkeypatch) -> None:
    monkeypatch.setattr(
        "backend.services.automation.tool_runner.subprocess.run",
        lambda *a, **k: SimpleNamespace(returncode=3, stdout="", stderr="boom"),
    )

    result = ToolRunner().run("tar", ["--create"])

    assert not result.ok
    assert result.returncode == 3


def test_run_checked_raises_with_stderr(monkeypatch) -> None:
    monkeypatch.setattr(
        "backend.services.automation.tool_runner.subprocess.run",
        lambda *a, **k: SimpleNamespace(returncode=1, stdout="", stderr="Failed to copy: 403 Forbidden\n"),
    )

    with pytest.raises(ToolExecutionError) as excinfo:
        ToolRunner().run_checked("rclone", ["copy", "a", "b"])

    assert excinfo.value.tool == "rclone"
    assert excinfo.value.returncode == 1
    assert str(excinfo.value) == "rclone exited with status 1: Failed to copy: 403 Forbidden"


def test_run_wraps_missing_executable(monkeypatch) -> None:
    def fake_run(*args, **kwargs):  # noqa: ANN001
        raise FileNotFoundError("No such file or directory: 'age'")

    monkeypatch.setattr("backend.services.automation.tool_runner.subprocess.run", fake_run)

    with pytest.raises(ToolExecutionError, match="age could not be started") as excinfo:
        ToolRunner().run("age", ["--version"])
    assert excinfo.value.returncode is None


def test_run_logs_command_without_password(monkeypatch, caplog) -> None:
    monkeypatch.setattr(
        "backend.services.automation.tool_runner.subprocess.run",
        lambda *a, **k: SimpleNamespace(returncode=0, stdout="", stderr=""),
    )
    caplog.set_level(logging.DEBUG, logger="backend.services.automation.tool_runner")

    ToolRunner().run("mongodump", ["--username=reader", "--password=s3cret"])

    assert "--password=***" in caplog.text
    assert "s3cret" not in caplog.text


@pytest.mark.parametrize(
    ("uri", "expected"),
    [
        ("mongodb://admin:hunter2@db:27017/shop", "mongodb://***@db:27017/shop"),
        ("mongodb+srv://reader@cluster.example.net", "mongodb+srv://***@cluster.example.net"),
        ("mongodb://db-0:27017,db-1:27017/?replicaSet=rs0", "mongodb://db-0:27017,db-1:27017/?replicaSet=rs0"),
    ],
)
def test_redact_uri_masks_userinfo(uri: str, expected: str) -> None:
    assert redact_uri(uri) == expected


def test_run_logs_uri_without_credentials(monkeypatch, caplog) -> None:
    monkeypatch.setattr(
        "backend.services.automation.tool_runner.subprocess.run",
        lambda *a, **k: SimpleNamespace(returncode=0, stdout="", stderr=""),
    )
    caplog.set_level(logging.DEBUG, logger="backend.services.automation.tool_runner")

    ToolRunner().run("mongodump", ["--uri=mongodb://admin:hunter2@db:27017", "--db=shop"])

    assert "--uri=mongodb://***@db:27017" in caplog.text
    assert "hunter2" not in caplog.text
