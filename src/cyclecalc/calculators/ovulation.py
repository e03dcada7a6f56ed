"""Ovulation signals: merging asserted dates and choosing a window source.

Ovulation windows come from one of three sources, in priority order:

1. Asserted dates (positive tests and manually entered days) inside the
   cycle.  Consecutive dates are merged into ranges and the fertile window is
   built around each range.
2. The cycle-length formula (``CycleFormula``).
3. Nothing, when formula windows are suppressed (pill-driven cycles).

The choice is returned as an explicit ``OvulationSource`` value so callers
can inspect why a window was produced.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from cyclecalc.calculators.formula import CycleFormula
from cyclecalc.config_loader import CycleConfig, get_cycle_config
from cyclecalc.date_range import DateRange
from cyclecalc.models import OvulationDay, OvulationTest, TestResult

logger = logging.getLogger("cyclecalc.calculators.ovulation")


# ---------------------------------------------------------------------------
# Date merging
# ---------------------------------------------------------------------------


def merge_consecutive_dates(dates: Iterable[int]) -> list[DateRange]:
    """Group dates into maximal runs of consecutive days.

    Duplicates are ignored and input order does not matter.

    Example::

        merge_consecutive_dates([10, 11, 12, 20])
        # [DateRange(10, 12), DateRange(20, 20)]
    """
    ranges: list[DateRange] = []
    start: int | None = None
    prev: int | None = None
    for day in sorted(set(dates)):
        if start is None:
            start = prev = day
        elif day == prev + 1:
            prev = day
        else:
            ranges.append(DateRange(start, prev))
            start = prev = day
    if start is not None:
        ranges.append(DateRange(start, prev))
    return ranges


def merge_ranges(ranges: Iterable[DateRange]) -> list[DateRange]:
    """Merge overlapping or touching ranges into a sorted, disjoint list."""
    merged: list[DateRange] = []
    for r in sorted(ranges):
        if merged and merged[-1].is_adjacent_or_overlapping(r):
            merged[-1] = merged[-1].merge(r)
        else:
            merged.append(r)
    return merged


def combine_ovulation_dates(
    tests: Iterable[OvulationTest],
    user_days: Iterable[OvulationDay],
    from_date: int,
    to_date: int,
) -> list[int]:
    """Union of positive test dates and manual ovulation dates in a window.

    Both kinds are asserted truth; they are deduplicated only when they fall
    on the same day.

    Returns:
        Sorted unique day-numbers within ``[from_date, to_date]``.
    """
    dates = {t.date for t in tests if t.result == TestResult.POSITIVE}
    dates.update(d.date for d in user_days)
    return sorted(d for d in dates if from_date <= d <= to_date)


# ---------------------------------------------------------------------------
# Window source
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AssertedOvulation:
    """Ovulation taken from tests or manual input."""

    ranges: tuple[DateRange, ...]


@dataclass(frozen=True)
class FormulaOvulation:
    """Ovulation computed from the cycle length."""

    period: int


@dataclass(frozen=True)
class SuppressedOvulation:
    """No formula window is shown for this cycle."""

    reason: str


OvulationSource = AssertedOvulation | FormulaOvulation | SuppressedOvulation


class OvulationCalculator:
    """Resolve and render ovulation / fertile windows for a cycle segment."""

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()
        self._formula = CycleFormula(self._config)

    def fertile_from_ovulation(self, ovulation_ranges: Iterable[DateRange]) -> list[DateRange]:
        """Build a fertile window around each asserted ovulation range."""
        before = self._config.ovulation.fertile_before_days
        after = self._config.ovulation.fertile_after_days
        return [DateRange(r.start_date - before, r.end_date + after) for r in ovulation_ranges]

    def implied_period(self, ovulation_date: int, anchor_start: int) -> int:
        """Cycle length implied by ovulating on *ovulation_date*."""
        return ovulation_date + self._config.ovulation.luteal_phase_days - anchor_start

    def resolve_source(
        self,
        asserted_dates: list[int],
        span: DateRange,
        period: int,
        formula_allowed: bool = True,
    ) -> OvulationSource:
        """Pick the window source for the segment covering *span*.

        Args:
            asserted_dates:  Sorted combined ovulation dates.
            span:            Days belonging to the segment.
            period:          Cycle length fed to the formula.
            formula_allowed: False to hide formula windows (pill cycles).
        """
        inside = [d for d in asserted_dates if span.contains(d)]
        if inside:
            return AssertedOvulation(tuple(merge_consecutive_dates(inside)))
        if formula_allowed:
            return FormulaOvulation(period)
        return SuppressedOvulation("pill")

    def windows(
        self, source: OvulationSource, anchor_start: int
    ) -> tuple[list[DateRange], list[DateRange]]:
        """Return ``(ovulation, fertile)`` windows for a resolved source."""
        if isinstance(source, AssertedOvulation):
            ranges = list(source.ranges)
            return ranges, self.fertile_from_ovulation(ranges)
        if isinstance(source, FormulaOvulation):
            result = self._formula.ovulation_and_fertile(source.period, anchor_start)
            return [result.ovulation], [result.fertile]
        return [], []
