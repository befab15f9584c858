"""Date parsing and SimpleDateFormat style rendering.

Templates written for the build-server ecosystem use SimpleDateFormat
patterns (``yyyyMMdd``, ``yy.MM.dd-HHmm``), so BUILD_DATE_FORMATTED renders
those rather than strftime directives. Names are always English.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

from versionnumber.exceptions import DateFormatError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")


def parse_date(value: Optional[str]) -> datetime:
    """Parse a project start date in yyyy-MM-dd form.

    Anything after the date (e.g. an ISO time part) is ignored. Returns EPOCH
    when the value is missing or cannot be parsed.
    """
    if not value:
        return EPOCH
    match = _DATE_RE.match(value)
    if not match:
        return EPOCH
    year, month, day = (int(g) for g in match.groups())
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return EPOCH


def _pad(value: int, width: int) -> str:
    return str(value).zfill(width)


def _text(full: str, count: int) -> str:
    return full if count >= 4 else full[:3]


def _offset(moment: datetime) -> Optional[int]:
    delta = moment.utcoffset()
    if delta is None:
        return None
    return int(delta.total_seconds() // 60)


def _rfc822_zone(moment: datetime) -> str:
    minutes = _offset(moment) or 0
    sign = "-" if minutes < 0 else "+"
    minutes = abs(minutes)
    return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


def _iso_zone(moment: datetime, count: int) -> str:
    minutes = _offset(moment) or 0
    if minutes == 0:
        return "Z"
    sign = "-" if minutes < 0 else "+"
    minutes = abs(minutes)
    hours, mins = divmod(minutes, 60)
    if count == 1:
        return f"{sign}{hours:02d}"
    if count == 2:
        return f"{sign}{hours:02d}{mins:02d}"
    return f"{sign}{hours:02d}:{mins:02d}"


def _field(letter: str, count: int, moment: datetime) -> str:
    if letter == "G":
        return "AD"
    if letter in ("y", "Y"):
        year = moment.isocalendar()[0] if letter == "Y" else moment.year
        if count == 2:
            return _pad(year % 100, 2)
        return _pad(year, count)
    if letter in ("M", "L"):
        if count >= 3:
            return _text(_MONTHS[moment.month - 1], count)
        return _pad(moment.month, count)
    if letter == "w":
        return _pad(moment.isocalendar()[1], count)
    if letter == "W":
        first_weekday = moment.replace(day=1).weekday()
        return _pad((moment.day + first_weekday - 1) // 7 + 1, count)
    if letter == "D":
        return _pad(moment.timetuple().tm_yday, count)
    if letter == "d":
        return _pad(moment.day, count)
    if letter == "F":
        return _pad((moment.day - 1) // 7 + 1, count)
    if letter == "E":
        return _text(_DAYS[moment.weekday()], count)
    if letter == "u":
        return _pad(moment.isoweekday(), count)
    if letter == "a":
        return "AM" if moment.hour < 12 else "PM"
    if letter == "H":
        return _pad(moment.hour, count)
    if letter == "k":
        return _pad(moment.hour or 24, count)
    if letter == "K":
        return _pad(moment.hour % 12, count)
    if letter == "h":
        return _pad(moment.hour % 12 or 12, count)
    if letter == "m":
        return _pad(moment.minute, count)
    if letter == "s":
        return _pad(moment.second, count)
    if letter == "S":
        return _pad(moment.microsecond // 1000, count)
    if letter == "z":
        return moment.tzname() or "UTC"
    if letter == "Z":
        return _rfc822_zone(moment)
    if letter == "X":
        return _iso_zone(moment, count)
    raise DateFormatError(
        f"Illegal pattern character '{letter}'",
        {"character": letter},
    )


def format_java_date(pattern: str, moment: datetime) -> str:
    """Render ``moment`` using a SimpleDateFormat style pattern.

    Letters repeat to select width or text style; text inside single quotes is
    literal and '' yields one quote.
    """
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        char = pattern[i]
        if char == "'":
            if i + 1 < n and pattern[i + 1] == "'":
                out.append("'")
                i += 2
                continue
            i += 1
            while i < n:
                if pattern[i] == "'":
                    if i + 1 < n and pattern[i + 1] == "'":
                        out.append("'")
                        i += 2
                        continue
                    break
                out.append(pattern[i])
                i += 1
            i += 1
            continue
        if ("a" <= char <= "z") or ("A" <= char <= "Z"):
            j = i
            while j < n and pattern[j] == char:
                j += 1
            out.append(_field(char, j - i, moment))
            i = j
            continue
        out.append(char)
        i += 1
    return "".join(out)


def months_between(start: datetime, end: datetime) -> int:
    """Whole calendar months from start to end (month fields only)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def years_between(start: datetime, end: datetime) -> int:
    """Whole calendar years from start to end (year fields only)."""
    return end.year - start.year
