"""VersionNumber build step.

Returns the version number according to the specified version number
template, e.g.::

    step = VersionNumberStep("1.0.${BUILDS_TODAY}", version_prefix="rc-")
    version = step.start(run, os.environ).run()

The running build and its environment are passed in explicitly; the step
records a VersionNumberAction on the build as a side effect.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from versionnumber.core.common import (
    format_version_number,
    get_previous_build_with_version_number,
    inc_build,
)
from versionnumber.core.dates import EPOCH, parse_date
from versionnumber.core.models import Run, VersionNumberAction
from versionnumber.exceptions import InvalidArgumentError
from versionnumber.logger import session_logger as logger


class VersionNumberStep:
    """Step configuration: template plus three optional settings."""

    def __init__(
        self,
        version_number_string: Optional[str],
        skip_failed_builds: bool = False,
        version_prefix: Optional[str] = None,
        project_start_date: Optional[str] = None,
    ) -> None:
        if not version_number_string:
            raise InvalidArgumentError(
                "must specify a version number string.",
                {"version_number_string": version_number_string},
            )
        self.version_number_string: str = version_number_string
        self.skip_failed_builds = bool(skip_failed_builds)
        self._version_prefix = version_prefix
        self._project_start_date = project_start_date

    @property
    def version_prefix(self) -> Optional[str]:
        if self._version_prefix and self._version_prefix.strip():
            return self._version_prefix
        return None

    @property
    def project_start_date(self) -> Optional[datetime]:
        value = parse_date(self._project_start_date)
        if value != EPOCH:
            return value
        return None

    def start(self, run: Run, env: Mapping[str, str]) -> "VersionNumberExecution":
        return VersionNumberExecution(step=self, run=run, env=env)

    def __repr__(self) -> str:
        return (
            f"VersionNumberStep({self.version_number_string!r}, "
            f"skip_failed_builds={self.skip_failed_builds!r}, "
            f"version_prefix={self._version_prefix!r}, "
            f"project_start_date={self._project_start_date!r})"
        )


class VersionNumberExecution:
    """Synchronous, run-once execution of a VersionNumberStep."""

    def __init__(self, step: VersionNumberStep, run: Run, env: Mapping[str, str]) -> None:
        self.step = step
        self.build = run
        self.env = env
        self._result: Optional[str] = None

    @property
    def done(self) -> bool:
        return self._result is not None

    def run(self) -> str:
        if self._result is None:
            self._result = self._execute()
        return self._result

    def _execute(self) -> str:
        step = self.step
        run = self.build
        if not step.version_number_string:
            return ""
        prefix = step.version_prefix
        try:
            prev_build = get_previous_build_with_version_number(run, prefix)
            info = inc_build(run, prev_build, step.skip_failed_builds)
            formatted = format_version_number(
                step.version_number_string,
                step.project_start_date,
                info,
                self.env,
                run.timestamp,
            )
            # Unlike freestyle jobs, where the prefix was expected inside the
            # template, a configured prefix is always prepended here.
            if prefix is not None:
                formatted = prefix + formatted
            run.add_action(VersionNumberAction(info, formatted))
        except Exception as exc:
            logger.debug(
                "Version number step failed, returning empty version",
                event="version_number.step_failed",
                job=run.job,
                build=run.number,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return ""
        logger.info(
            "Version number computed",
            event="version_number.computed",
            job=run.job,
            build=run.number,
            version=formatted,
        )
        return formatted


@dataclass(frozen=True)
class StepDescriptor:
    """Metadata for exposing a step on the CLI and MCP surfaces."""

    function_name: str
    display_name: str
    input_schema: Dict[str, Any] = field(default_factory=dict)

    def create(self, arguments: Mapping[str, Any]) -> VersionNumberStep:
        """Build a step from camelCase tool arguments."""
        return VersionNumberStep(
            arguments.get("versionNumberString"),
            skip_failed_builds=bool(arguments.get("skipFailedBuilds", False)),
            version_prefix=arguments.get("versionPrefix"),
            project_start_date=arguments.get("projectStartDate"),
        )


DESCRIPTOR = StepDescriptor(
    function_name="VersionNumber",
    display_name="Determine the correct version number",
    input_schema={
        "type": "object",
        "properties": {
            "versionNumberString": {
                "type": "string",
                "description": "Version number template, e.g. '1.0.${BUILDS_TODAY}' or '${BUILD_DATE_FORMATTED, \"yyyyMMdd\"}'.",
            },
            "skipFailedBuilds": {
                "type": "boolean",
                "description": "Do not count builds that did not succeed (default: false).",
            },
            "versionPrefix": {
                "type": "string",
                "description": "Literal prepended to the formatted version; history lookup only considers builds with this prefix.",
            },
            "projectStartDate": {
                "type": "string",
                "description": "Project start date (yyyy-MM-dd) for MONTHS_SINCE_PROJECT_START / YEARS_SINCE_PROJECT_START.",
            },
        },
        "required": ["versionNumberString"],
    },
)
