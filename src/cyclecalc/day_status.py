"""Per-day classification over computed cycles.

A calendar cell needs one answer per day.  The day is looked up in every
computed cycle and the most specific match wins::

    PREGNANCY > PERIOD_ONGOING / PERIOD_UPCOMING > PERIOD_DELAYED(_OVER)
              > PERIOD_PREDICTED > OVULATION > FERTILE > NONE

``EMPTY`` means there is no period history to classify against.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from collections.abc import Iterable

from cyclecalc.calculators.pregnancy import PregnancyCalculator
from cyclecalc.config_loader import CycleConfig
from cyclecalc.models import CycleInfo, CycleInput, DayStatus, DayType, PeriodRecord
from cyclecalc.period_calculator import PeriodCalculator, distinct_periods

logger = logging.getLogger("cyclecalc.day_status")


class DayStatusCalculator:
    """Classify days for a calendar view."""

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._calculator = PeriodCalculator(config)
        self._config = self._calculator.config
        self._pregnancy = PregnancyCalculator(self._config)

    def get_day_status(self, cycle_input: CycleInput, date: int, today: int) -> DayStatus:
        return self.get_day_statuses(cycle_input, date, date, today)[0]

    def get_day_statuses(
        self, cycle_input: CycleInput, from_date: int, to_date: int, today: int
    ) -> list[DayStatus]:
        """Status of every day in ``[from_date, to_date]``; empty if reversed."""
        if from_date > to_date:
            return []
        return self.get_day_statuses_for_dates(
            cycle_input, range(from_date, to_date + 1), today
        )

    def get_day_statuses_for_dates(
        self, cycle_input: CycleInput, dates: Iterable[int], today: int
    ) -> list[DayStatus]:
        """Status of each date, in the order given."""
        dates = list(dates)
        if not dates:
            return []
        if not cycle_input.periods:
            return [DayStatus(date=d, type=DayType.EMPTY) for d in dates]

        cycles = self._calculator.calculate(cycle_input, min(dates), max(dates), today)
        periods = distinct_periods(cycle_input.periods)
        pregnancy_start = self._pregnancy.active_start(cycle_input.pregnancy)
        logger.debug("Classifying %d dates against %d cycles", len(dates), len(cycles))
        return [
            self._classify(d, today, cycles, periods, cycle_input, pregnancy_start)
            for d in dates
        ]

    # ------------------------------------------------------------------

    def _classify(
        self,
        date: int,
        today: int,
        cycles: list[CycleInfo],
        periods: list[PeriodRecord],
        cycle_input: CycleInput,
        pregnancy_start: int | None,
    ) -> DayStatus:
        if pregnancy_start is not None and date >= pregnancy_start:
            return DayStatus(date=date, type=DayType.PREGNANCY, gap=date - pregnancy_start)

        gap, period = self._position(date, periods, cycles, cycle_input)
        day_type = self._day_type(date, today, cycles)
        return DayStatus(date=date, type=day_type, gap=gap, period=period)

    def _day_type(self, date: int, today: int, cycles: list[CycleInfo]) -> DayType:
        if any(c.actual_period is not None and c.actual_period.contains(date) for c in cycles):
            return DayType.PERIOD_ONGOING if date <= today else DayType.PERIOD_UPCOMING
        for c in cycles:
            if c.delay_day is not None and c.delay_day.contains(date):
                if c.delay_the_days >= self._config.delay.escalation_days:
                    return DayType.PERIOD_DELAYED_OVER
                return DayType.PERIOD_DELAYED
        if any(r.contains(date) for c in cycles for r in c.predict_days):
            return DayType.PERIOD_PREDICTED
        if any(r.contains(date) for c in cycles for r in c.ovulation_days):
            return DayType.OVULATION
        if any(r.contains(date) for c in cycles for r in c.fertile_days):
            return DayType.FERTILE
        return DayType.NONE

    @staticmethod
    def _position(
        date: int,
        periods: list[PeriodRecord],
        cycles: list[CycleInfo],
        cycle_input: CycleInput,
    ) -> tuple[int, int]:
        """Days since the anchor of the cycle holding *date*, and its length."""
        index = bisect_right([p.start_date for p in periods], date) - 1
        if index < 0:
            return 0, 0
        anchor = periods[index]
        for c in cycles:
            if c.pk == anchor.pk:
                return date - anchor.start_date, c.period
        if index + 1 < len(periods):
            return date - anchor.start_date, periods[index + 1].start_date - anchor.start_date
        return date - anchor.start_date, cycle_input.period_settings.effective_cycle


def get_day_status(
    cycle_input: CycleInput, date: int, today: int, config: CycleConfig | None = None
) -> DayStatus:
    return DayStatusCalculator(config).get_day_status(cycle_input, date, today)


def get_day_statuses(
    cycle_input: CycleInput,
    from_date: int,
    to_date: int,
    today: int,
    config: CycleConfig | None = None,
) -> list[DayStatus]:
    return DayStatusCalculator(config).get_day_statuses(cycle_input, from_date, to_date, today)


def get_day_statuses_for_dates(
    cycle_input: CycleInput,
    dates: Iterable[int],
    today: int,
    config: CycleConfig | None = None,
) -> list[DayStatus]:
    return DayStatusCalculator(config).get_day_statuses_for_dates(cycle_input, dates, today)
