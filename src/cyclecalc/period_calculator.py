"""Cycle orchestrator.

Builds one ``CycleInfo`` per recorded period:

- Earlier periods get their observed cycle length (distance to the next
  record) and a single ovulation / fertile window.
- The most recent period is projected forward: the next start date comes
  from the pill schedule, an asserted ovulation date, or the cycle average
  (in that order), repeats until the end of the query, and gives way to a
  delay window once today passes it.

Every prediction is cut at the start of an active pregnancy and narrowed to
the query window.  The engine is pure: ``today`` is always passed in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from cyclecalc.calculators.ovulation import (
    AssertedOvulation,
    OvulationCalculator,
    combine_ovulation_dates,
)
from cyclecalc.calculators.pill import PillCalculator
from cyclecalc.calculators.pregnancy import PregnancyCalculator, truncate_before
from cyclecalc.config_loader import CycleConfig, get_cycle_config
from cyclecalc.date_range import DateRange, clip_ranges, overlapping_ranges
from cyclecalc.day_numbers import today_day_number
from cyclecalc.models import CycleInfo, CycleInput, PeriodRecord

logger = logging.getLogger("cyclecalc.period_calculator")


def distinct_periods(periods: Iterable[PeriodRecord]) -> list[PeriodRecord]:
    """Sort records by start, keeping the longest record per start date."""
    ordered = sorted(periods, key=lambda p: (p.start_date, -p.range.duration))
    kept: list[PeriodRecord] = []
    for record in ordered:
        if kept and kept[-1].start_date == record.start_date:
            logger.warning(
                "Period %s shares start %d with %s; ignored",
                record.pk,
                record.start_date,
                kept[-1].pk,
            )
            continue
        kept.append(record)
    return kept


@dataclass(frozen=True)
class _Segment:
    """Stretch of a cycle that gets its own ovulation window.

    Attributes:
        anchor: First day of the segment (a real or predicted period start).
        span:   Days belonging to the segment.
    """

    anchor: int
    span: DateRange


@dataclass(frozen=True)
class _NextStart:
    """How the first predicted start of the current cycle was chosen.

    Attributes:
        due_date:    First predicted start, or None for continuous pill use.
        step:        Days between successive predictions.
        pill_driven: The pill schedule sets the dates.
    """

    due_date: int | None
    step: int
    pill_driven: bool = False


class PeriodCalculator:
    """Compute ``CycleInfo`` values for a query window.

    Usage::

        calculator = PeriodCalculator()
        cycles = calculator.calculate(cycle_input, from_date, to_date, today)
        cycles[-1].predict_days
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()
        self._ovulation = OvulationCalculator(self._config)
        self._pill = PillCalculator(self._config)
        self._pregnancy = PregnancyCalculator(self._config)

    @property
    def config(self) -> CycleConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def calculate(
        self,
        cycle_input: CycleInput,
        from_date: int,
        to_date: int,
        today: int,
    ) -> list[CycleInfo]:
        """Compute the cycles visible in ``[from_date, to_date]``.

        Args:
            cycle_input: Records, settings and optional overrides.
            from_date:   First day of the query window.
            to_date:     Last day of the query window.
            today:       Reference day for delay and rest-pill state.

        Returns:
            CycleInfo list in chronological order; empty for a reversed
            window or an empty history.
        """
        if from_date > to_date:
            logger.warning("Reversed query window %d..%d; no cycles", from_date, to_date)
            return []

        pregnancy_start = self._pregnancy.active_start(cycle_input.pregnancy)
        periods = self._pregnancy.exclude_periods_during(
            distinct_periods(cycle_input.periods), cycle_input.pregnancy
        )
        if not periods:
            return []

        query = DateRange(from_date, to_date)
        # Dates past this bound cannot reach the window or today's cycle
        asserted_until = max(to_date + self._config.ovulation.fertile_before_days, today)
        asserted = combine_ovulation_dates(
            cycle_input.ovulation_tests,
            cycle_input.user_ovulation_days,
            periods[0].start_date,
            asserted_until,
        )
        pinned = self._pregnancy_anchor_index(periods, pregnancy_start)

        cycles: list[CycleInfo] = []
        for index, record in enumerate(periods):
            if index + 1 < len(periods):
                info = self._observed_cycle(record, periods[index + 1], cycle_input, asserted)
            else:
                info = self._current_cycle(
                    record, cycle_input, asserted, to_date, today, pregnancy_start
                )
            self._finish(info, query, pregnancy_start)
            if index == pinned or self._is_visible(info, query):
                cycles.append(info)

        logger.debug(
            "%d of %d cycles visible in %d..%d", len(cycles), len(periods), from_date, to_date
        )
        return cycles

    # ------------------------------------------------------------------
    # Cycle builders
    # ------------------------------------------------------------------

    def _observed_cycle(
        self,
        record: PeriodRecord,
        successor: PeriodRecord,
        cycle_input: CycleInput,
        asserted: list[int],
    ) -> CycleInfo:
        """A completed cycle: its length is the distance to the next record."""
        period = successor.start_date - record.start_date
        span = DateRange(record.start_date, successor.start_date - 1)

        pill_driven = self._pill_enabled(cycle_input) and self._pill.check_pill_between_periods(
            record.start_date, successor.start_date, cycle_input.pill_packages
        )
        source = self._ovulation.resolve_source(
            asserted, span, period, formula_allowed=not pill_driven
        )
        ovulation, fertile = self._ovulation.windows(source, record.start_date)

        return CycleInfo(
            pk=record.pk,
            actual_period=record.range,
            period=period,
            ovulation_days=ovulation,
            fertile_days=fertile,
            is_ovulation_period_user_input=isinstance(source, AssertedOvulation),
            the_pill_period=(
                self._pill.package_period(
                    record.start_date,
                    cycle_input.pill_packages,
                    cycle_input.pill_settings,
                    next_date=successor.start_date,
                )
                if pill_driven
                else None
            ),
        )

    def _current_cycle(
        self,
        record: PeriodRecord,
        cycle_input: CycleInput,
        asserted: list[int],
        to_date: int,
        today: int,
        pregnancy_start: int | None,
    ) -> CycleInfo:
        """The most recent cycle, projected forward from its anchor."""
        settings = cycle_input.period_settings
        period = max(1, settings.effective_cycle)
        period_days = max(1, settings.effective_day)
        anchor = record.start_date
        info = CycleInfo(pk=record.pk, actual_period=record.range, period=period)

        if self._pill_enabled(cycle_input):
            info.is_continuous_pill_usage = self._pill.is_continuous_usage(
                anchor, cycle_input.pill_packages, cycle_input.pill_settings
            )

        # Asserted ovulation so far in this cycle implies its length
        observed = DateRange(anchor, max(anchor + period - 1, today))
        own_dates = [d for d in asserted if observed.contains(d)]
        if own_dates:
            info.ovulation_day_period = self._ovulation.implied_period(own_dates[-1], anchor)

        next_start = self._next_start(info, cycle_input, anchor, period)
        if info.is_continuous_pill_usage:
            info.rest_pill = 0
        elif next_start.pill_driven:
            info.rest_pill = self._pill.remaining_rest_days(
                today, cycle_input.pill_packages, cycle_input.pill_settings
            )

        starts: list[int] = []
        first_segment_end = observed.end_date

        if next_start.due_date is not None:
            due = next_start.due_date
            pregnant_now = pregnancy_start is not None and pregnancy_start <= today
            delay = today - due + 1 if today >= due and not pregnant_now else 0
            # A delay starting after the query is not reported
            if delay > 0 and due <= to_date:
                info.delay_the_days = delay
                info.delay_day = DateRange(due, today)

            if delay >= self._config.delay.escalation_days:
                logger.debug("Cycle %s delayed %d days; predictions suppressed", record.pk, delay)
                first_segment_end = today
            else:
                first = today + 1 if delay > 0 else due
                limit = to_date if pregnancy_start is None else min(to_date, pregnancy_start - 1)
                starts = list(self._prediction_starts(first, next_start.step, limit))
                first_segment_end = first - 1

        info.predict_days = [DateRange(s, s + period_days - 1) for s in starts]

        for segment in self._segments(anchor, first_segment_end, starts, next_start.step):
            source = self._ovulation.resolve_source(
                asserted, segment.span, period, formula_allowed=not next_start.pill_driven
            )
            ovulation, fertile = self._ovulation.windows(source, segment.anchor)
            info.ovulation_days.extend(ovulation)
            info.fertile_days.extend(fertile)
            if isinstance(source, AssertedOvulation):
                info.is_ovulation_period_user_input = True

        return info

    def _next_start(
        self, info: CycleInfo, cycle_input: CycleInput, anchor: int, period: int
    ) -> _NextStart:
        """Pick the first predicted start: pill, then asserted ovulation, then average."""
        if info.is_continuous_pill_usage:
            logger.debug("Cycle %s: continuous pill use, no predicted start", info.pk)
            return _NextStart(due_date=None, step=period, pill_driven=True)

        if self._pill_enabled(cycle_input):
            pill_date = self._pill.calculate_pill_based_predict_date(
                anchor, cycle_input.pill_packages, cycle_input.pill_settings, period
            )
            if pill_date is not None:
                info.the_pill_period = self._pill.package_period(
                    anchor, cycle_input.pill_packages, cycle_input.pill_settings
                )
                logger.debug("Cycle %s: pill schedule predicts %d", info.pk, pill_date)
                return _NextStart(
                    due_date=pill_date, step=max(1, info.the_pill_period), pill_driven=True
                )

        if info.ovulation_day_period is not None:
            return _NextStart(due_date=anchor + info.ovulation_day_period, step=period)
        return _NextStart(due_date=anchor + period, step=period)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _pill_enabled(cycle_input: CycleInput) -> bool:
        return cycle_input.pill_settings.is_calculating_with_pill and bool(
            cycle_input.pill_packages
        )

    @staticmethod
    def _prediction_starts(first: int, step: int, limit: int) -> Iterator[int]:
        start = first
        while start <= limit:
            yield start
            start += step

    @staticmethod
    def _segments(
        anchor: int, first_end: int, starts: list[int], step: int
    ) -> Iterator[_Segment]:
        yield _Segment(anchor, DateRange(anchor, first_end))
        for index, start in enumerate(starts):
            end = starts[index + 1] - 1 if index + 1 < len(starts) else start + step - 1
            yield _Segment(start, DateRange(start, end))

    @staticmethod
    def _pregnancy_anchor_index(
        periods: list[PeriodRecord], pregnancy_start: int | None
    ) -> int | None:
        """Index of the last period before an active pregnancy began."""
        if pregnancy_start is None:
            return None
        before = [i for i, p in enumerate(periods) if p.start_date < pregnancy_start]
        return before[-1] if before else None

    def _finish(self, info: CycleInfo, query: DateRange, pregnancy_start: int | None) -> None:
        """Apply the pregnancy cut-off, then narrow windows to the query."""
        if pregnancy_start is not None:
            info.pregnancy_start_date = pregnancy_start
            info.predict_days = truncate_before(info.predict_days, pregnancy_start)
            info.ovulation_days = truncate_before(info.ovulation_days, pregnancy_start)
            info.fertile_days = truncate_before(info.fertile_days, pregnancy_start)

        narrow = clip_ranges if self._config.output.clip_to_query else overlapping_ranges
        info.predict_days = narrow(info.predict_days, query)
        info.ovulation_days = narrow(info.ovulation_days, query)
        info.fertile_days = narrow(info.fertile_days, query)

    @staticmethod
    def _is_visible(info: CycleInfo, query: DateRange) -> bool:
        if info.has_windows:
            return True
        if info.actual_period is not None and info.actual_period.overlaps(query):
            return True
        return info.delay_day is not None and info.delay_day.overlaps(query)


def calculate_cycle_info(
    cycle_input: CycleInput,
    from_date: int,
    to_date: int,
    today: int | None = None,
    config: CycleConfig | None = None,
) -> list[CycleInfo]:
    """Compute cycles for *cycle_input*; *today* defaults to the current date."""
    if today is None:
        today = today_day_number()
    return PeriodCalculator(config).calculate(cycle_input, from_date, to_date, today)
