"""Pytest configuration and fixtures

Provides shared fixtures for all tests: a temporary history store, a helper
to build chains of runs, and isolation of VERSIONNUMBER_* environment.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from versionnumber.core.models import BuildInfo, Run, VersionNumberAction
from versionnumber.history.storage import HistoryStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's VERSIONNUMBER_* settings out of tests."""
    for name in (
        "VERSIONNUMBER_DATA_DIR",
        "VERSIONNUMBER_TIMEZONE",
        "VERSIONNUMBER_LOG_LEVEL",
        "VERSIONNUMBER_MCP_PORT",
        "VERSIONNUMBER_WEB_PORT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store(tmp_path):
    return HistoryStore(tmp_path / "history")


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_chain(job, builds):
    """Build linked runs from (timestamp, version_number | None, info | None, result) tuples."""
    previous = None
    runs = []
    for number, (timestamp, version, info, result) in enumerate(builds, start=1):
        run = Run(job=job, number=number, timestamp=timestamp, result=result, previous_build=previous)
        if version is not None:
            run.add_action(VersionNumberAction(info or BuildInfo(), version))
        runs.append(run)
        previous = run
    return runs


@pytest.fixture
def chain():
    return make_chain
