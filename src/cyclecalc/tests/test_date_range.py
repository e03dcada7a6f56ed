"""Tests for DateRange and day-number conversion."""

from __future__ import annotations

from datetime import date

import pytest

from cyclecalc.date_range import DateRange, clip_ranges, overlapping_ranges
from cyclecalc.day_numbers import (
    format_day_number,
    from_day_number,
    parse_day_number,
    to_day_number,
)


class TestDayNumbers:
    def test_known_julian_day(self) -> None:
        assert to_day_number(date(2000, 1, 1)) == 2451545

    def test_round_trip_through_leap_day(self) -> None:
        leap = date(2024, 2, 29)
        assert from_day_number(to_day_number(leap)) == leap
        assert to_day_number(date(2024, 3, 1)) - to_day_number(leap) == 1

    def test_parse_and_format(self) -> None:
        day = parse_day_number("2025-03-26")
        assert format_day_number(day) == "2025-03-26"
        assert parse_day_number("2025-04-01") - day == 6


class TestDateRange:
    def test_rejects_reversed_bounds(self) -> None:
        with pytest.raises(ValueError):
            DateRange(10, 9)

    def test_single_day_range(self) -> None:
        r = DateRange.single(5)
        assert r.duration == 1
        assert r.contains(5)
        assert not r.contains(6)

    def test_duration_is_inclusive(self) -> None:
        assert DateRange(1, 5).duration == 5

    def test_overlap_and_intersect(self) -> None:
        a = DateRange(1, 10)
        b = DateRange(8, 15)
        assert a.overlaps(b)
        assert a.intersect(b) == DateRange(8, 10)
        assert a.intersect(DateRange(11, 12)) is None

    def test_merge_touching_ranges(self) -> None:
        assert DateRange(1, 3).merge(DateRange(4, 6)) == DateRange(1, 6)

    def test_merge_disjoint_ranges_raises(self) -> None:
        with pytest.raises(ValueError):
            DateRange(1, 3).merge(DateRange(5, 6))

    def test_shift(self) -> None:
        assert DateRange(12, 14).shift(100) == DateRange(112, 114)

    def test_iterates_days(self) -> None:
        assert list(DateRange(3, 5)) == [3, 4, 5]

    def test_is_immutable(self) -> None:
        r = DateRange(1, 2)
        with pytest.raises(AttributeError):
            r.start_date = 0  # type: ignore[misc]


class TestRangeSelection:
    def test_clip_drops_ranges_outside_window(self) -> None:
        window = DateRange(10, 20)
        ranges = [DateRange(1, 5), DateRange(8, 12), DateRange(18, 25)]
        assert clip_ranges(ranges, window) == [DateRange(10, 12), DateRange(18, 20)]

    def test_overlapping_keeps_whole_ranges(self) -> None:
        window = DateRange(10, 20)
        ranges = [DateRange(1, 5), DateRange(8, 12), DateRange(18, 25)]
        assert overlapping_ranges(ranges, window) == [DateRange(8, 12), DateRange(18, 25)]
