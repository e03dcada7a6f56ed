"""Repository boundary for the cycle engine.

Storage lives outside this package.  Hosts implement ``PeriodDataRepository``
over their own database; ``load_cycle_input()`` pulls everything one query
needs into an in-memory ``CycleInput`` and the pure engine runs on that.
All I/O is async and happens here, never inside the calculators.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from cyclecalc.config_loader import CycleConfig
from cyclecalc.day_numbers import today_day_number
from cyclecalc.models import (
    CycleInfo,
    CycleInput,
    OvulationDay,
    OvulationTest,
    PeriodRecord,
    PeriodSettings,
    PillPackage,
    PillSettings,
    PregnancyInfo,
)
from cyclecalc.period_calculator import PeriodCalculator

logger = logging.getLogger("cyclecalc.repository")


# ---------------------------------------------------------------------------
# Abstract repository
# ---------------------------------------------------------------------------


class PeriodDataRepository(ABC):
    """Data source for period records, settings and overrides.

    Subclasses must implement every method.  Dates are day-numbers.
    """

    @abstractmethod
    async def get_periods(self, from_date: int, to_date: int) -> list[PeriodRecord]:
        """Periods overlapping ``[from_date, to_date]``, oldest first."""

    @abstractmethod
    async def get_period_settings(self) -> PeriodSettings:
        """Average cycle and period lengths."""

    @abstractmethod
    async def get_ovulation_tests(self, from_date: int, to_date: int) -> list[OvulationTest]:
        """Ovulation test results dated within ``[from_date, to_date]``."""

    @abstractmethod
    async def get_user_ovulation_days(
        self, from_date: int, to_date: int
    ) -> list[OvulationDay]:
        """Manually entered ovulation days within ``[from_date, to_date]``."""

    @abstractmethod
    async def get_pill_packages(self) -> list[PillPackage]:
        """All pill packages."""

    @abstractmethod
    async def get_pill_settings(self) -> PillSettings:
        """Pill switch and default package shape."""

    @abstractmethod
    async def get_active_pregnancy(self) -> PregnancyInfo | None:
        """The current pregnancy if it is active, else None."""

    @abstractmethod
    async def get_last_period_before(self, date: int) -> PeriodRecord | None:
        """Latest period starting on or before *date*."""

    @abstractmethod
    async def get_first_period_after(self, date: int) -> PeriodRecord | None:
        """Earliest period starting on or after *date*."""


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


async def load_cycle_input(
    repository: PeriodDataRepository, from_date: int, to_date: int, today: int
) -> CycleInput:
    """Fetch everything needed to compute cycles for ``[from_date, to_date]``.

    Besides the periods overlapping the window, this pulls the period that
    anchors a window starting mid-cycle and the period after the window, so
    the last visible period gets its observed length instead of the average.

    Args:
        repository: Data source.
        from_date:  First day of the query window.
        to_date:    Last day of the query window.
        today:      Reference day; ovulation signals are loaded up to it.

    Returns:
        A CycleInput snapshot.
    """
    periods = list(await repository.get_periods(from_date, to_date))
    known = {p.pk for p in periods}

    if not periods or from_date < periods[0].start_date:
        before = from_date if not periods else periods[0].start_date - 1
        previous = await repository.get_last_period_before(before)
        if previous is not None and previous.pk not in known:
            periods.insert(0, previous)
            known.add(previous.pk)

    if periods:
        following = await repository.get_first_period_after(to_date + 1)
        if following is not None and following.pk not in known:
            periods.append(following)

    signals_from = periods[0].start_date if periods else from_date
    signals_to = max(to_date, today)

    cycle_input = CycleInput(
        periods=periods,
        period_settings=await repository.get_period_settings(),
        ovulation_tests=await repository.get_ovulation_tests(signals_from, signals_to),
        user_ovulation_days=await repository.get_user_ovulation_days(signals_from, signals_to),
        pill_packages=await repository.get_pill_packages(),
        pill_settings=await repository.get_pill_settings(),
        pregnancy=await repository.get_active_pregnancy(),
    )
    logger.debug(
        "Loaded %d periods for window %d..%d", len(cycle_input.periods), from_date, to_date
    )
    return cycle_input


async def calculate_cycle_info_from_repository(
    repository: PeriodDataRepository,
    from_date: int,
    to_date: int,
    today: int | None = None,
    config: CycleConfig | None = None,
) -> list[CycleInfo]:
    """Load a snapshot from *repository* and compute its cycles.

    *today* defaults to the current date; it is resolved here, at the
    boundary, and passed into the engine explicitly.
    """
    if from_date > to_date:
        logger.warning("Reversed query window %d..%d; no cycles", from_date, to_date)
        return []
    if today is None:
        today = today_day_number()
    cycle_input = await load_cycle_input(repository, from_date, to_date, today)
    return PeriodCalculator(config).calculate(cycle_input, from_date, to_date, today)
