"""Pregnancy dates, progress and the prediction cut-off.

While a pregnancy is active no period, ovulation or fertile window may
start on or after its start date; ranges straddling the start are cut to
end the day before.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cyclecalc.config_loader import CycleConfig, get_cycle_config
from cyclecalc.date_range import DateRange
from cyclecalc.models import PeriodRecord, PregnancyInfo, WeightUnit

logger = logging.getLogger("cyclecalc.calculators.pregnancy")

KG_TO_LBS = 2.20462
KG_TO_STONE = 0.157473


# ---------------------------------------------------------------------------
# Weight helpers
# ---------------------------------------------------------------------------


def kg_to_lbs(kg: float) -> float:
    return kg * KG_TO_LBS


def lbs_to_kg(lbs: float) -> float:
    return lbs / KG_TO_LBS


def kg_to_stone(kg: float) -> float:
    return kg * KG_TO_STONE


def stone_to_kg(stone: float) -> float:
    return stone / KG_TO_STONE


def normalize_weight_to_kg(value: float, unit: WeightUnit) -> float:
    if unit == WeightUnit.LBS:
        return lbs_to_kg(value)
    if unit == WeightUnit.ST:
        return stone_to_kg(value)
    return value


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------


class PregnancyCalculator:
    """Due-date math and pregnancy progress."""

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    @property
    def duration_days(self) -> int:
        return self._config.pregnancy.duration_days

    def calculate_due_date(self, reference_date: int) -> int:
        """Due date for a pregnancy counted from *reference_date*."""
        return reference_date + self.duration_days

    def calculate_last_period_date(self, due_date: int) -> int:
        return due_date - self.duration_days

    def effective_starts_date(self, pregnancy: PregnancyInfo) -> int | None:
        """Start date, falling back to the last period or the due date."""
        if pregnancy.starts_date is not None:
            return pregnancy.starts_date
        if pregnancy.last_the_day_date is not None:
            return pregnancy.last_the_day_date
        if pregnancy.due_date is not None:
            return self.calculate_last_period_date(pregnancy.due_date)
        return None

    def get_due_date_or_calculate(self, pregnancy: PregnancyInfo) -> int | None:
        if pregnancy.is_due_date_decided and pregnancy.due_date is not None:
            return pregnancy.due_date
        if pregnancy.due_date is not None:
            return pregnancy.due_date
        start = self.effective_starts_date(pregnancy)
        return self.calculate_due_date(start) if start is not None else None

    # ── Progress ──

    def weeks_pregnant(self, pregnancy: PregnancyInfo, current_date: int) -> int:
        start = self.effective_starts_date(pregnancy)
        if start is None or current_date < start:
            return 0
        return (current_date - start) // 7

    def weeks_and_days(self, pregnancy: PregnancyInfo, current_date: int) -> tuple[int, int]:
        start = self.effective_starts_date(pregnancy)
        if start is None or current_date < start:
            return (0, 0)
        return divmod(current_date - start, 7)

    def days_until_due(self, pregnancy: PregnancyInfo, current_date: int) -> int | None:
        due = self.get_due_date_or_calculate(pregnancy)
        return due - current_date if due is not None else None

    def trimester(self, pregnancy: PregnancyInfo, current_date: int) -> int:
        """1, 2 or 3; 0 once past week 40."""
        weeks = self.weeks_pregnant(pregnancy, current_date)
        if weeks <= 13:
            return 1
        if weeks <= 27:
            return 2
        if weeks <= 40:
            return 3
        return 0

    def progress_percent(self, pregnancy: PregnancyInfo, current_date: int) -> float:
        start = self.effective_starts_date(pregnancy)
        if start is None:
            return 0.0
        elapsed = current_date - start
        return min(100.0, max(0.0, elapsed * 100.0 / self.duration_days))

    # ── Prediction cut-off ──

    def active_start(self, pregnancy: PregnancyInfo | None) -> int | None:
        """Start date of an active pregnancy, or None."""
        if pregnancy is None or not pregnancy.is_active():
            return None
        start = self.effective_starts_date(pregnancy)
        if start is None:
            logger.warning(
                "Active pregnancy %r has no start date; filtering skipped", pregnancy.id
            )
        return start

    def filter_by_pregnancy(
        self, ranges: Iterable[DateRange], pregnancy: PregnancyInfo | None
    ) -> list[DateRange]:
        """Cut *ranges* at the start of an active pregnancy.

        Inactive pregnancies, or active ones without any derivable start
        date, leave the ranges unchanged.
        """
        return truncate_before(ranges, self.active_start(pregnancy))

    # ── History ──

    def exclude_periods_during(
        self, periods: Iterable[PeriodRecord], pregnancy: PregnancyInfo | None
    ) -> list[PeriodRecord]:
        """Drop records starting between an active pregnancy's start and due date."""
        periods = list(periods)
        if pregnancy is None or not pregnancy.is_active():
            return periods
        start = self.effective_starts_date(pregnancy)
        if start is None:
            return periods
        due = self.get_due_date_or_calculate(pregnancy)
        return [
            p for p in periods
            if p.start_date < start or (due is not None and p.start_date > due)
        ]


def truncate_before(ranges: Iterable[DateRange], cutoff: int | None) -> list[DateRange]:
    """Drop ranges starting on or after *cutoff*; cut straddling ones to end
    the day before.  With no cutoff the ranges pass through unchanged."""
    ranges = list(ranges)
    if cutoff is None:
        return ranges
    kept: list[DateRange] = []
    for r in ranges:
        if r.start_date >= cutoff:
            continue
        if r.end_date >= cutoff:
            r = DateRange(r.start_date, cutoff - 1)
        kept.append(r)
    return kept
