"""Tests for project start date parsing and SimpleDateFormat rendering."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from versionnumber.core.dates import EPOCH, format_java_date, months_between, parse_date, years_between
from versionnumber.exceptions import DateFormatError

# Thursday, day 64 of the year, ISO week 10
MOMENT = datetime(2026, 3, 5, 7, 8, 9, 123456, tzinfo=timezone.utc)


class TestParseDate:
    def test_plain_date(self):
        assert parse_date("2020-03-15") == datetime(2020, 3, 15, tzinfo=timezone.utc)

    def test_ignores_time_part(self):
        assert parse_date("2020-03-15T10:11:12") == datetime(2020, 3, 15, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "garbage", "15.03.2020", "2020-13-01", "2020-02-30"])
    def test_unparseable_returns_epoch(self, value):
        assert parse_date(value) == EPOCH


class TestFormatJavaDate:
    @pytest.mark.parametrize(
        "pattern,expected",
        [
            ("yyyyMMdd", "20260305"),
            ("yy.MM.dd-HHmm", "26.03.05-0708"),
            ("yyyy-M-d", "2026-3-5"),
            ("EEE, MMM d", "Thu, Mar 5"),
            ("EEEE d MMMM", "Thursday 5 March"),
            ("D", "64"),
            ("w", "10"),
            ("u", "4"),
            ("h:mm a", "7:08 AM"),
            ("ss.SSS", "09.123"),
            ("G", "AD"),
        ],
    )
    def test_patterns(self, pattern, expected):
        assert format_java_date(pattern, MOMENT) == expected

    def test_quoted_literal(self):
        assert format_java_date("yyyy'T'HH", MOMENT) == "2026T07"

    def test_escaped_quote(self):
        assert format_java_date("HH''mm", MOMENT) == "07'08"

    def test_quote_inside_literal(self):
        assert format_java_date("'o''clock' H", MOMENT) == "o'clock 7"

    def test_non_letters_are_literal(self):
        assert format_java_date("[yyyy]/_", MOMENT) == "[2026]/_"

    def test_afternoon_hours(self):
        moment = MOMENT.replace(hour=0)
        assert format_java_date("k K h a", moment) == "24 0 12 AM"

    def test_utc_zones(self):
        assert format_java_date("Z X", MOMENT) == "+0000 Z"

    def test_offset_zones(self):
        moment = MOMENT.astimezone(timezone(timedelta(hours=5, minutes=30)))
        assert format_java_date("Z", moment) == "+0530"
        assert format_java_date("X", moment) == "+05"
        assert format_java_date("XX", moment) == "+0530"
        assert format_java_date("XXX", moment) == "+05:30"

    def test_illegal_letter(self):
        with pytest.raises(DateFormatError) as exc_info:
            format_java_date("yyyy-qq", MOMENT)
        assert exc_info.value.details["character"] == "q"


class TestCalendarDistance:
    def test_months_between(self):
        start = datetime(2024, 11, 20, tzinfo=timezone.utc)
        assert months_between(start, MOMENT) == 16

    def test_years_between(self):
        start = datetime(2024, 11, 20, tzinfo=timezone.utc)
        assert years_between(start, MOMENT) == 2
