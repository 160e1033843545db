"""Shared fixtures: a complete job environment, tool resolver and clock."""

from __future__ import annotations

from typing import Dict

import pytest

from tests.fakes import NOW


@pytest.fixture
def job_env() -> Dict[str, str]:
    return {
        "RCLONE_CONF": "/etc/rclone/rclone.conf",
        "OSS": "r2",
        "OSS_BUCKET": "backups",
        "OSS_PATH": "/mongodb/widgets",
        "MONGO_DB": "shop",
        "MONGO_COL": "widgets",
        "MONGO_URI": "mongodb://mongo.mongodb.svc:27017",
        "MONGO_RO_USERNAME": "reader",
        "MONGO_RO_PASSWORD": "s3cret",
        "ENCRYPTION_PUBLIC_KEY": "age1qyqszqgpqyqszqgpqyqszqgpqyqszqgpqyqszqgpqyqszqgpqyqs3290gq",
        "RETENTION_PERIOD": "7d",
    }


@pytest.fixture
def which():
    return lambda tool: f"/usr/bin/{tool}"


@pytest.fixture
def fixed_clock():
    return lambda: float(NOW)
