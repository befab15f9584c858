from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Type, TypeVar


class Result(str, Enum):
    """Outcome of a finished build.

    A run whose result is None has not finished yet.
    """

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"


@dataclass(frozen=True)
class BuildInfo:
    """Build ordinals relative to the job's history.

    Each counter is 1-based: the first build of the day has builds_today == 1.
    """

    builds_today: int = 1
    builds_this_week: int = 1
    builds_this_month: int = 1
    builds_this_year: int = 1
    builds_all_time: int = 1

    def to_dict(self) -> dict[str, int]:
        return {
            "builds_today": self.builds_today,
            "builds_this_week": self.builds_this_week,
            "builds_this_month": self.builds_this_month,
            "builds_this_year": self.builds_this_year,
            "builds_all_time": self.builds_all_time,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "BuildInfo":
        return BuildInfo(
            builds_today=int(data.get("builds_today", 1)),
            builds_this_week=int(data.get("builds_this_week", 1)),
            builds_this_month=int(data.get("builds_this_month", 1)),
            builds_this_year=int(data.get("builds_this_year", 1)),
            builds_all_time=int(data.get("builds_all_time", 1)),
        )


@dataclass(frozen=True)
class VersionNumberAction:
    """Version number recorded on a build for later steps and the web API."""

    info: BuildInfo
    version_number: str

    kind = "version_number"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "info": self.info.to_dict(),
            "version_number": self.version_number,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "VersionNumberAction":
        return VersionNumberAction(
            info=BuildInfo.from_dict(data.get("info", {})),
            version_number=str(data.get("version_number", "")),
        )


A = TypeVar("A")


@dataclass
class Run:
    """One build of a job.

    previous_build links to the job's prior run and is rebuilt on load rather
    than serialized.
    """

    job: str
    number: int
    timestamp: datetime
    result: Optional[Result] = None
    actions: list[Any] = field(default_factory=list)
    previous_build: Optional["Run"] = field(default=None, repr=False, compare=False)

    def add_action(self, action: Any) -> None:
        self.actions.append(action)

    def get_action(self, action_type: Type[A]) -> Optional[A]:
        """Return the most recently added action of the given type."""
        for action in reversed(self.actions):
            if isinstance(action, action_type):
                return action
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "timestamp": self.timestamp.isoformat(),
            "result": self.result.value if self.result else None,
            "actions": [a.to_dict() for a in self.actions if hasattr(a, "to_dict")],
        }

    @staticmethod
    def from_dict(job: str, data: dict[str, Any]) -> "Run":
        actions: list[Any] = []
        for raw in data.get("actions", []):
            if raw.get("kind") == VersionNumberAction.kind:
                actions.append(VersionNumberAction.from_dict(raw))
        result = data.get("result")
        return Run(
            job=job,
            number=int(data["number"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            result=Result(result) if result else None,
            actions=actions,
        )
