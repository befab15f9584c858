"""Run a version number step as the next build of a job."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Mapping, Optional

from versionnumber.core.common import get_version_action
from versionnumber.core.models import Run
from versionnumber.history.storage import HistoryStore
from versionnumber.step import VersionNumberStep


@dataclass
class StepOutcome:
    run: Run
    version_number: str

    def to_dict(self) -> dict[str, Any]:
        action = get_version_action(self.run)
        return {
            "success": True,
            "job": self.run.job,
            "build_number": self.run.number,
            "timestamp": self.run.timestamp.isoformat(),
            "version_number": self.version_number,
            "info": action.info.to_dict() if action else None,
        }


def run_step(
    store: HistoryStore,
    step: VersionNumberStep,
    job: str,
    env: Mapping[str, str],
    timestamp: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> StepOutcome:
    """Create the job's next build, execute the step on it and save it.

    The build is saved even when the step degrades to an empty version, so
    build numbers keep increasing. The job stays locked from numbering to
    saving, so concurrent runs get distinct build numbers.
    """
    with store.lock(job):
        run = store.new_run(job, timestamp=timestamp, tz=tz)
        version = step.start(run, env).run()
        store.save_run(run)
    return StepOutcome(run=run, version_number=version)
