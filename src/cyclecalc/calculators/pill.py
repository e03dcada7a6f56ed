"""Pill-schedule rules.

A withdrawal bleed is expected a couple of days into the rest phase of the
last package, so while a user is on the pill the next period date comes from
the package schedule instead of the cycle average.  The schedule is only
trusted when the first package of the cycle started early enough before the
naturally predicted date.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cyclecalc.config_loader import CycleConfig, get_cycle_config
from cyclecalc.models import PillPackage, PillSettings

logger = logging.getLogger("cyclecalc.calculators.pill")


def _sorted(packages: Iterable[PillPackage]) -> list[PillPackage]:
    return sorted(packages, key=lambda p: p.package_start)


class PillCalculator:
    """Pill-based prediction checks.

    Usage::

        pill = PillCalculator()
        date = pill.calculate_pill_based_predict_date(
            start_date, packages, settings, normal_period=28
        )
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    @property
    def min_lead_days(self) -> int:
        return self._config.pill.min_lead_days

    def check_pill_between_periods(
        self, start_date: int, next_date: int, pill_packages: Iterable[PillPackage]
    ) -> bool:
        """True if the first package started in ``[start_date, next_date)``
        started at least ``min_lead_days`` before *next_date*."""
        in_range = [
            p for p in _sorted(pill_packages) if start_date <= p.package_start < next_date
        ]
        if not in_range:
            return False
        return next_date - in_range[0].package_start >= self.min_lead_days

    def calculate_pill_based_predict_date(
        self,
        start_date: int,
        pill_packages: Iterable[PillPackage],
        pill_settings: PillSettings,
        normal_period: int,
    ) -> int | None:
        """Predicted period start from the pill schedule.

        Args:
            start_date:    Anchor period start.
            pill_packages: All known packages.
            pill_settings: Defaults for package shape.
            normal_period: Average cycle length for the natural prediction.

        Returns:
            ``last package start + pill count + bleed offset``, or None when
            the user takes pills continuously, no package started on or after
            *start_date*, or the first such package started too close to the
            natural prediction.
        """
        if pill_settings.rest_pill == 0:
            return None

        after_start = [p for p in _sorted(pill_packages) if p.package_start >= start_date]
        if not after_start:
            return None

        natural_date = start_date + normal_period
        lead = natural_date - after_start[0].package_start
        if lead < self.min_lead_days:
            logger.debug(
                "Pill package at %d only %d days before natural date %d",
                after_start[0].package_start,
                lead,
                natural_date,
            )
            return None

        last = after_start[-1]
        return (
            last.package_start
            + last.active_count(pill_settings)
            + self._config.pill.bleed_offset_days
        )

    def is_pill_active_on_date(
        self, date: int, pill_packages: Iterable[PillPackage], pill_settings: PillSettings
    ) -> bool:
        if not pill_settings.is_calculating_with_pill:
            return False
        return any(p.active_window(pill_settings).contains(date) for p in pill_packages)

    def is_continuous_usage(
        self, start_date: int, pill_packages: Iterable[PillPackage], pill_settings: PillSettings
    ) -> bool:
        """Pill taken without rest days since *start_date*."""
        if not pill_settings.is_calculating_with_pill or pill_settings.rest_pill != 0:
            return False
        return any(p.package_start >= start_date for p in pill_packages)

    def remaining_rest_days(
        self, today: int, pill_packages: Iterable[PillPackage], pill_settings: PillSettings
    ) -> int | None:
        """Rest days left in the current package, counting today.

        Returns 0 during the active phase and None when *today* is outside
        every package.
        """
        if not pill_settings.is_calculating_with_pill:
            return None
        current = [p for p in _sorted(pill_packages) if p.package_start <= today]
        if not current:
            return None
        package = current[-1]
        active_end = package.package_start + package.active_count(pill_settings) - 1
        cycle_end = package.package_start + package.cycle_length(pill_settings) - 1
        if today <= active_end:
            return 0
        if today <= cycle_end:
            return cycle_end - today + 1
        return None

    def package_period(
        self,
        start_date: int,
        pill_packages: Iterable[PillPackage],
        pill_settings: PillSettings,
        next_date: int | None = None,
    ) -> int:
        """Package cycle length (active + rest) of the schedule driving a cycle.

        Uses the last package started on or after *start_date* (and before
        *next_date* when given), else the settings defaults.
        """
        packages = [
            p for p in _sorted(pill_packages)
            if p.package_start >= start_date
            and (next_date is None or p.package_start < next_date)
        ]
        if packages:
            return packages[-1].cycle_length(pill_settings)
        return pill_settings.pill_count + pill_settings.rest_pill
