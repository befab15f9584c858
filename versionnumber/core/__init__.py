"""Version number computation: models, date handling and the step collaborators."""

from versionnumber.core.common import (
    format_version_number,
    get_previous_build_with_version_number,
    get_version_action,
    inc_build,
)
from versionnumber.core.dates import EPOCH, format_java_date, parse_date
from versionnumber.core.models import BuildInfo, Result, Run, VersionNumberAction

__all__ = [
    "BuildInfo",
    "EPOCH",
    "Result",
    "Run",
    "VersionNumberAction",
    "format_java_date",
    "format_version_number",
    "get_previous_build_with_version_number",
    "get_version_action",
    "inc_build",
    "parse_date",
]
