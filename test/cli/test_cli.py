"""Tests for the versionnumber command line."""

from __future__ import annotations

import json

import pytest

from versionnumber.cli import COMMANDS, main
from versionnumber.history.storage import HistoryStore


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / "data")


def _run(capsys, data_dir, *args):
    code = main(["--data-dir", data_dir, *args])
    out, err = capsys.readouterr()
    return code, out, err


def test_command_table():
    assert set(COMMANDS) == {"step", "finish", "show", "history", "serve-mcp", "serve-web"}


def test_step_counts_builds(capsys, data_dir):
    code, out, _ = _run(capsys, data_dir, "step", "1.0.${BUILDS_ALL_TIME}", "--job", "app")
    assert code == 0
    assert out.strip() == "1.0.1"

    code, out, _ = _run(capsys, data_dir, "step", "1.0.${BUILDS_ALL_TIME}", "--job", "app")
    assert out.strip() == "1.0.2"


def test_step_with_timestamp_and_prefix(capsys, data_dir):
    code, out, _ = _run(
        capsys,
        data_dir,
        "step",
        '${BUILD_DATE_FORMATTED, "yyMMdd"}.${BUILDS_TODAY}',
        "--job",
        "app",
        "--version-prefix",
        "rc-",
        "--timestamp",
        "2026-03-05T10:00:00+00:00",
    )
    assert code == 0
    assert out.strip() == "rc-260305.1"


def test_step_reads_process_environment(capsys, data_dir, monkeypatch):
    monkeypatch.setenv("GIT_BRANCH", "feature")
    code, out, _ = _run(capsys, data_dir, "step", "${GIT_BRANCH}-${BUILDS_TODAY}", "--job", "app")
    assert out.strip() == "feature-1"


def test_step_json_output(capsys, data_dir):
    code, out, _ = _run(capsys, data_dir, "step", "${BUILDS_ALL_TIME}", "--job", "app", "--json")
    payload = json.loads(out)
    assert payload["build_number"] == 1
    assert payload["version_number"] == "1"
    assert payload["info"]["builds_all_time"] == 1


def test_step_empty_template_is_usage_error(capsys, data_dir):
    code, out, err = _run(capsys, data_dir, "step", "", "--job", "app")
    assert code == 2
    assert out == ""
    assert '"error_code": "INVALID_ARGUMENT"' in err


def test_step_bad_timestamp(capsys, data_dir):
    code, _, err = _run(capsys, data_dir, "step", "1", "--job", "app", "--timestamp", "yesterday")
    assert code == 2
    assert "INVALID_TIMESTAMP" in err


def test_step_fail_soft_prints_empty_line(capsys, data_dir):
    code, out, _ = _run(capsys, data_dir, "step", "${BUILD_MONTH, 9}", "--job", "app")
    assert code == 0
    assert out == "\n"


def test_finish_and_skip_failed_builds(capsys, data_dir):
    _run(capsys, data_dir, "step", "1.0.${BUILDS_ALL_TIME}", "--job", "app")
    code, out, _ = _run(capsys, data_dir, "finish", "--job", "app", "--result", "FAILURE")
    assert code == 0
    assert out.strip() == "app #1: FAILURE"

    code, out, _ = _run(
        capsys, data_dir, "step", "1.0.${BUILDS_ALL_TIME}", "--job", "app", "--skip-failed-builds"
    )
    assert out.strip() == "1.0.1"


def test_show_latest_and_specific(capsys, data_dir):
    _run(capsys, data_dir, "step", "1.0.${BUILDS_ALL_TIME}", "--job", "app")
    _run(capsys, data_dir, "step", "1.0.${BUILDS_ALL_TIME}", "--job", "app")

    code, out, _ = _run(capsys, data_dir, "show", "--job", "app")
    assert code == 0
    assert out.strip() == "1.0.2"

    code, out, _ = _run(capsys, data_dir, "show", "--job", "app", "--build", "1")
    assert out.strip() == "1.0.1"


def test_show_unknown_job(capsys, data_dir):
    code, _, err = _run(capsys, data_dir, "show", "--job", "nope")
    assert code == 1
    assert "JOB_NOT_FOUND" in err


def test_corrupt_history_action(capsys, data_dir):
    path = HistoryStore(data_dir).history_path("app")
    path.parent.mkdir(parents=True)
    build = {"number": 1, "timestamp": "2026-03-05T09:00:00+00:00", "result": None, "actions": ["x"]}
    path.write_text(json.dumps({"version": 1, "job": "app", "builds": [build]}), encoding="utf-8")

    code, _, err = _run(capsys, data_dir, "show", "--job", "app")
    assert code == 1
    assert "HISTORY_CORRUPT" in err


def test_history(capsys, data_dir):
    _run(capsys, data_dir, "step", "1.0.${BUILDS_ALL_TIME}", "--job", "app")
    _run(capsys, data_dir, "step", "1.0.${BUILDS_ALL_TIME}", "--job", "app")

    code, out, _ = _run(capsys, data_dir, "history", "--job", "app")
    payload = json.loads(out)
    assert payload["job"] == "app"
    assert [b["number"] for b in payload["builds"]] == [1, 2]
    assert payload["builds"][1]["actions"][0]["version_number"] == "1.0.2"


def test_data_dir_from_environment(capsys, tmp_path, monkeypatch):
    monkeypatch.setenv("VERSIONNUMBER_DATA_DIR", str(tmp_path / "env-data"))
    assert main(["step", "1", "--job", "app"]) == 0
    assert HistoryStore(tmp_path / "env-data").history_path("app").exists()
