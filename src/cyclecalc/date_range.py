"""Inclusive day-number interval used by every calculator."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class DateRange:
    """An inclusive range of day-numbers.

    Attributes:
        start_date: First day in the range.
        end_date:   Last day in the range (inclusive).

    Raises:
        ValueError: On construction with ``start_date > end_date``.
    """

    start_date: int
    end_date: int

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise ValueError(
                f"DateRange start {self.start_date} is after end {self.end_date}"
            )

    @classmethod
    def single(cls, day: int) -> DateRange:
        return cls(day, day)

    @property
    def duration(self) -> int:
        """Number of days covered, counting both ends."""
        return self.end_date - self.start_date + 1

    def contains(self, day: int) -> bool:
        return self.start_date <= day <= self.end_date

    def overlaps(self, other: DateRange) -> bool:
        return self.start_date <= other.end_date and other.start_date <= self.end_date

    def intersect(self, other: DateRange) -> DateRange | None:
        """Return the overlapping part of two ranges, or None if disjoint."""
        if not self.overlaps(other):
            return None
        return DateRange(
            max(self.start_date, other.start_date),
            min(self.end_date, other.end_date),
        )

    def shift(self, days: int) -> DateRange:
        return DateRange(self.start_date + days, self.end_date + days)

    def is_adjacent_or_overlapping(self, other: DateRange) -> bool:
        return (
            self.start_date <= other.end_date + 1
            and other.start_date <= self.end_date + 1
        )

    def merge(self, other: DateRange) -> DateRange:
        """Return the smallest range covering both ranges.

        Raises:
            ValueError: If the ranges neither overlap nor touch.
        """
        if not self.is_adjacent_or_overlapping(other):
            raise ValueError(f"Cannot merge disjoint ranges {self} and {other}")
        return DateRange(
            min(self.start_date, other.start_date),
            max(self.end_date, other.end_date),
        )

    def __iter__(self):
        return iter(range(self.start_date, self.end_date + 1))


def clip_ranges(ranges: list[DateRange], window: DateRange) -> list[DateRange]:
    """Intersect each range with *window*, dropping those with no overlap."""
    clipped: list[DateRange] = []
    for r in ranges:
        part = r.intersect(window)
        if part is not None:
            clipped.append(part)
    return clipped


def overlapping_ranges(ranges: list[DateRange], window: DateRange) -> list[DateRange]:
    """Keep the ranges that overlap *window*, unmodified."""
    return [r for r in ranges if r.overlaps(window)]
