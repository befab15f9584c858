"""Build history storage layout.

Directory structure::

    data/
    ├── my_app-4c1a9e02/
    │   ├── builds.json         # {"version": 1, "job": "my-app", "builds": [...]}
    │   └── .lock
    ├── team_service-77d0b3a1/
    │   └── builds.json
    └── ...

Each directory is the job slug plus a short hash of the exact job name, so
``my-app`` and ``my_app`` never share a file. Builds are kept oldest first.
previous_build links are rebuilt on load.
"""

from __future__ import annotations

import hashlib
import json
import os
import re
import sys
import tempfile
from contextlib import contextmanager
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Iterator, Optional

from versionnumber.core.models import Result, Run
from versionnumber.exceptions import BuildNotFoundError, HistoryCorruptError, ResourceNotFoundError
from versionnumber.logger import session_logger as logger

HISTORY_VERSION = 1

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def job_to_slug(job: str) -> str:
    """Convert a job name to a filesystem-safe directory name.

    Examples:
        my-app          -> my_app
        Team/Service    -> team_service
    """
    slug = _SLUG_RE.sub("_", job.lower()).strip("_")
    return slug or "unknown"


def job_dir_name(job: str) -> str:
    digest = hashlib.sha256(job.encode("utf-8")).hexdigest()[:8]
    return f"{job_to_slug(job)}-{digest}"


class HistoryStore:
    """Persists the builds of every job under one data directory."""

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def history_path(self, job: str) -> Path:
        return self._data_dir / job_dir_name(job) / "builds.json"

    @contextmanager
    def lock(self, job: str) -> Iterator[None]:
        """Hold an exclusive lock on a job's history.

        Not reentrant: do not nest two lock() blocks for the same job.
        """
        lock_path = self.history_path(job).with_name(".lock")
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        with open(lock_path, "a+b") as handle:
            if sys.platform == "win32":
                import msvcrt

                handle.seek(0)
                msvcrt.locking(handle.fileno(), msvcrt.LK_LOCK, 1)
                try:
                    yield
                finally:
                    handle.seek(0)
                    msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)
            else:
                import fcntl

                fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
                try:
                    yield
                finally:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    def _read(self, job: str) -> dict[str, Any]:
        path = self.history_path(job)
        if not path.exists():
            return {"version": HISTORY_VERSION, "job": job, "builds": []}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise HistoryCorruptError(
                f"Build history for job '{job}' is not valid JSON",
                {"job": job, "path": str(path), "error": str(exc)},
            )
        if not isinstance(data, dict) or not isinstance(data.get("builds"), list):
            raise HistoryCorruptError(
                f"Build history for job '{job}' has no builds list",
                {"job": job, "path": str(path)},
            )
        stored_job = data.get("job")
        if stored_job is not None and stored_job != job:
            raise HistoryCorruptError(
                f"Build history at {path} belongs to job '{stored_job}', not '{job}'",
                {"job": job, "stored_job": stored_job, "path": str(path)},
            )
        return data

    def _write(self, job: str, runs: list[Run]) -> None:
        path = self.history_path(job)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "version": HISTORY_VERSION,
            "job": job,
            "builds": [run.to_dict() for run in runs],
        }
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".builds-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=False)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load_runs(self, job: str) -> list[Run]:
        """Load all builds of a job, oldest first, with previous_build links."""
        data = self._read(job)
        try:
            runs = [Run.from_dict(job, raw) for raw in data["builds"]]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise HistoryCorruptError(
                f"Build history for job '{job}' contains an invalid build",
                {"job": job, "error": str(exc)},
            )
        runs.sort(key=lambda r: r.number)
        previous: Optional[Run] = None
        for run in runs:
            run.previous_build = previous
            previous = run
        return runs

    def latest_run(self, job: str) -> Optional[Run]:
        runs = self.load_runs(job)
        return runs[-1] if runs else None

    def get_run(self, job: str, number: Optional[int] = None) -> Run:
        """Return build ``number`` of a job (latest when number is None)."""
        runs = self.load_runs(job)
        if not runs:
            raise ResourceNotFoundError(
                "JOB_NOT_FOUND",
                f"Job '{job}' has no recorded builds",
                {"job": job},
            )
        if number is None:
            return runs[-1]
        for run in runs:
            if run.number == number:
                return run
        raise BuildNotFoundError(
            f"Job '{job}' has no build #{number}",
            {"job": job, "build_number": number},
        )

    def new_run(self, job: str, timestamp: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> Run:
        """Create (but do not save) the next build of a job.

        The new run is linked to the job's latest build.
        """
        latest = self.latest_run(job)
        if timestamp is None:
            timestamp = datetime.now(tz).astimezone(tz)
        elif timestamp.tzinfo is None:
            # A naive timestamp is wall-clock time in tz, or in local time.
            timestamp = timestamp.replace(tzinfo=tz) if tz is not None else timestamp.astimezone()
        return Run(
            job=job,
            number=(latest.number + 1) if latest else 1,
            timestamp=timestamp,
            previous_build=latest,
        )

    def save_run(self, run: Run) -> None:
        """Insert or replace a build, keyed by number.

        Callers that read before saving hold lock() across both.
        """
        runs = [r for r in self.load_runs(run.job) if r.number != run.number]
        runs.append(run)
        runs.sort(key=lambda r: r.number)
        self._write(run.job, runs)
        logger.debug("Build saved", job=run.job, build=run.number, path=str(self.history_path(run.job)))

    def set_result(self, job: str, number: Optional[int], result: Result) -> Run:
        with self.lock(job):
            run = self.get_run(job, number)
            run.result = result
            self.save_run(run)
        logger.info("Build result recorded", job=job, build=run.number, result=result.value)
        return run

    def list_jobs(self) -> list[str]:
        """List job names that have a history file."""
        if not self._data_dir.exists():
            return []
        jobs = []
        for path in sorted(self._data_dir.glob("*/builds.json")):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                logger.warning("Skipping unreadable build history", path=str(path))
                continue
            if not isinstance(data, dict):
                logger.warning("Skipping build history without a job object", path=str(path))
                continue
            jobs.append(str(data.get("job") or path.parent.name))
        return sorted(jobs)
