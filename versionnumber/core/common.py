"""Version number computation shared by every invocation surface.

Three operations make up a version number step:

1. ``get_previous_build_with_version_number`` finds the build to count from.
2. ``inc_build`` derives the next ``BuildInfo`` from that build.
3. ``format_version_number`` substitutes template tokens.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from versionnumber.core.dates import format_java_date, months_between, years_between
from versionnumber.core.models import BuildInfo, Result, Run, VersionNumberAction
from versionnumber.exceptions import TemplateFormatError
from versionnumber.logger import session_logger as logger


def get_version_action(run: Run) -> Optional[VersionNumberAction]:
    return run.get_action(VersionNumberAction)


def get_previous_build_with_version_number(run: Run, prefix: Optional[str] = None) -> Optional[Run]:
    """Return the most recent earlier build that recorded a version number.

    With a prefix, only builds whose version number starts with it qualify, so
    jobs producing several version streams count each stream separately.
    """
    candidate = run.previous_build
    while candidate is not None:
        action = get_version_action(candidate)
        if action is not None and (prefix is None or action.version_number.startswith(prefix)):
            return candidate
        candidate = candidate.previous_build
    return None


def _failed(run: Run) -> bool:
    return run.result is not None and run.result != Result.SUCCESS


def inc_build(run: Run, prev_build: Optional[Run], skip_failed_builds: bool) -> BuildInfo:
    """Compute the build ordinals of ``run`` relative to ``prev_build``."""
    if prev_build is None:
        return BuildInfo()

    prev_action = get_version_action(prev_build)
    prev_info = prev_action.info if prev_action is not None else BuildInfo(0, 0, 0, 0, 0)

    # A failed previous build gives its numbers to this one.
    increment = 0 if skip_failed_builds and _failed(prev_build) else 1

    current = run.timestamp
    previous = prev_build.timestamp
    if current.tzinfo is not None and previous.tzinfo is not None:
        previous = previous.astimezone(current.tzinfo)

    same_year = current.year == previous.year
    same_month = same_year and current.month == previous.month
    same_day = same_month and current.day == previous.day
    same_week = current.isocalendar()[:2] == previous.isocalendar()[:2]

    info = BuildInfo(
        builds_today=prev_info.builds_today + increment if same_day else 1,
        builds_this_week=prev_info.builds_this_week + increment if same_week else 1,
        builds_this_month=prev_info.builds_this_month + increment if same_month else 1,
        builds_this_year=prev_info.builds_this_year + increment if same_year else 1,
        builds_all_time=prev_info.builds_all_time + increment,
    )
    logger.debug(
        "Build info computed",
        job=run.job,
        build=run.number,
        previous_build=prev_build.number,
        increment=increment,
        builds_all_time=info.builds_all_time,
    )
    return info


_TOKEN_RE = re.compile(
    r"\$\{\s*(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*(?P<args>(?:,\s*(?:\"[^\"]*\"|[^,\"}]*)\s*)*)\}"
)
# Any ${NAME...} up to the first closing brace, used to catch built-in
# tokens whose arguments _TOKEN_RE cannot parse.
_LOOSE_TOKEN_RE = re.compile(r"\$\{\s*(?P<name>[A-Za-z_][A-Za-z0-9_]*)[^}]*\}")
_ARG_RE = re.compile(r"\"([^\"]*)\"|([^,\s][^,]*)")
_WIDTH_RE = re.compile(r"^[Xx]+$")


def _split_args(raw: str) -> list[str]:
    args = []
    for quoted, bare in _ARG_RE.findall(raw):
        args.append(bare.strip() if bare else quoted)
    return args


def _numeric(name: str, value: int, args: list[str]) -> str:
    text = str(value)
    if not args:
        return text
    if len(args) > 1 or not _WIDTH_RE.match(args[0]):
        raise TemplateFormatError(
            f"{name} accepts a single width modifier made of X characters",
            {"token": name, "arguments": args},
        )
    width = len(args[0])
    if name == "BUILD_YEAR" and width < len(text):
        return text[-width:]
    return text.zfill(width)


def _formatted_date(build_date: datetime, args: list[str]) -> str:
    if not args or len(args) > 2:
        raise TemplateFormatError(
            'BUILD_DATE_FORMATTED expects a pattern and an optional timezone, e.g. ${BUILD_DATE_FORMATTED, "yyyyMMdd"}',
            {"arguments": args},
        )
    moment = build_date
    if len(args) == 2:
        try:
            moment = build_date.astimezone(ZoneInfo(args[1]))
        except (ZoneInfoNotFoundError, ValueError):
            raise TemplateFormatError(f"Unknown timezone '{args[1]}'", {"timezone": args[1]})
    return format_java_date(args[0], moment)


def format_version_number(
    template: str,
    project_start_date: Optional[datetime],
    info: BuildInfo,
    env: Mapping[str, str],
    build_date: datetime,
) -> str:
    """Substitute every ${TOKEN} in the template.

    Names that are neither built-in tokens nor environment variables are left
    in place unchanged.
    """
    start = project_start_date or build_date
    counters: dict[str, Callable[[], int]] = {
        "BUILD_DAY": lambda: build_date.day,
        "BUILD_WEEK": lambda: build_date.isocalendar()[1],
        "BUILD_MONTH": lambda: build_date.month,
        "BUILD_YEAR": lambda: build_date.year,
        "BUILDS_TODAY": lambda: info.builds_today,
        "BUILDS_THIS_WEEK": lambda: info.builds_this_week,
        "BUILDS_THIS_MONTH": lambda: info.builds_this_month,
        "BUILDS_THIS_YEAR": lambda: info.builds_this_year,
        "BUILDS_ALL_TIME": lambda: info.builds_all_time,
        "BUILDS_TODAY_Z": lambda: info.builds_today - 1,
        "BUILDS_THIS_WEEK_Z": lambda: info.builds_this_week - 1,
        "BUILDS_THIS_MONTH_Z": lambda: info.builds_this_month - 1,
        "BUILDS_THIS_YEAR_Z": lambda: info.builds_this_year - 1,
        "BUILDS_ALL_TIME_Z": lambda: info.builds_all_time - 1,
        "MONTHS_SINCE_PROJECT_START": lambda: months_between(start, build_date),
        "YEARS_SINCE_PROJECT_START": lambda: years_between(start, build_date),
    }

    for loose in _LOOSE_TOKEN_RE.finditer(template):
        name = loose.group("name")
        if (name in counters or name == "BUILD_DATE_FORMATTED") and not _TOKEN_RE.match(template, loose.start()):
            raise TemplateFormatError(
                f"Malformed {name} token: {loose.group(0)}",
                {"token": name, "text": loose.group(0)},
            )

    def substitute(match: re.Match) -> str:
        name = match.group("name")
        args = _split_args(match.group("args"))
        if name == "BUILD_DATE_FORMATTED":
            return _formatted_date(build_date, args)
        if name in counters:
            return _numeric(name, counters[name](), args)
        if name in env:
            return env[name]
        return match.group(0)

    return _TOKEN_RE.sub(substitute, template)
