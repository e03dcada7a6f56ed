"""Shared fixtures, builders and an in-memory repository for engine tests."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest

from cyclecalc.config_loader import CycleConfig, OutputConfig, load_cycle_config
from cyclecalc.date_range import DateRange
from cyclecalc.day_numbers import parse_day_number
from cyclecalc.models import (
    CycleInput,
    OvulationDay,
    OvulationTest,
    PeriodRecord,
    PeriodSettings,
    PillPackage,
    PillSettings,
    PregnancyInfo,
)
from cyclecalc.repository import PeriodDataRepository
from cyclecalc.schemas import CycleInputPayload

# Fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def d(iso: str) -> int:
    """Day-number for an ISO date string."""
    return parse_day_number(iso)


def dr(start: str, end: str) -> DateRange:
    return DateRange(d(start), d(end))


def make_period(pk: str, start: str, end: str) -> PeriodRecord:
    return PeriodRecord(pk=pk, start_date=d(start), end_date=d(end))


def make_input(
    periods: list[PeriodRecord],
    cycle: int = 28,
    days: int = 5,
    **kwargs,
) -> CycleInput:
    """CycleInput with manual averages of *cycle* / *days*."""
    settings = PeriodSettings(manual_average_cycle=cycle, manual_average_day=days)
    return CycleInput(periods=periods, period_settings=settings, **kwargs)


def load_payload(name: str) -> CycleInput:
    raw = json.loads((FIXTURES_DIR / name).read_text())
    return CycleInputPayload.model_validate(raw).to_domain()


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_config() -> CycleConfig:
    """Load the bundled rule table for tests."""
    return load_cycle_config()


@pytest.fixture
def unclipped_config(cycle_config: CycleConfig) -> CycleConfig:
    """Rule table that emits overlapping ranges whole."""
    return dataclasses.replace(cycle_config, output=OutputConfig(clip_to_query=False))


# ---------------------------------------------------------------------------
# JSON fixture loaders
# ---------------------------------------------------------------------------


@pytest.fixture
def regular_input() -> CycleInput:
    """Three 28-day cycles starting 2025-01-01, -01-29, -02-26."""
    return load_payload("regular_cycle.json")


@pytest.fixture
def manual_ovulation_input() -> CycleInput:
    """Cycles of 31 and 28 days, 30-day average, manual ovulation days."""
    return load_payload("manual_ovulation.json")


@pytest.fixture
def pill_input() -> CycleInput:
    """One period on 2025-03-01 and a 21/7 pill package started the same day."""
    return load_payload("pill_cycle.json")


@pytest.fixture
def pregnancy_input() -> CycleInput:
    """Two periods and a pregnancy starting 2025-02-18."""
    return load_payload("pregnancy.json")


# ---------------------------------------------------------------------------
# In-memory repository
# ---------------------------------------------------------------------------


class InMemoryPeriodRepository(PeriodDataRepository):
    """Repository over plain lists, for tests."""

    def __init__(self, cycle_input: CycleInput) -> None:
        self.periods = sorted(cycle_input.periods, key=lambda p: p.start_date)
        self.period_settings = cycle_input.period_settings
        self.ovulation_tests = list(cycle_input.ovulation_tests)
        self.user_ovulation_days = list(cycle_input.user_ovulation_days)
        self.pill_packages = list(cycle_input.pill_packages)
        self.pill_settings = cycle_input.pill_settings
        self.pregnancy = cycle_input.pregnancy
        self.calls: list[str] = []

    async def get_periods(self, from_date: int, to_date: int) -> list[PeriodRecord]:
        self.calls.append("get_periods")
        window = DateRange(from_date, to_date)
        return [p for p in self.periods if p.range.overlaps(window)]

    async def get_period_settings(self) -> PeriodSettings:
        return self.period_settings

    async def get_ovulation_tests(self, from_date: int, to_date: int) -> list[OvulationTest]:
        return [t for t in self.ovulation_tests if from_date <= t.date <= to_date]

    async def get_user_ovulation_days(
        self, from_date: int, to_date: int
    ) -> list[OvulationDay]:
        return [o for o in self.user_ovulation_days if from_date <= o.date <= to_date]

    async def get_pill_packages(self) -> list[PillPackage]:
        return self.pill_packages

    async def get_pill_settings(self) -> PillSettings:
        return self.pill_settings

    async def get_active_pregnancy(self) -> PregnancyInfo | None:
        if self.pregnancy is not None and self.pregnancy.is_active():
            return self.pregnancy
        return None

    async def get_last_period_before(self, date: int) -> PeriodRecord | None:
        self.calls.append("get_last_period_before")
        before = [p for p in self.periods if p.start_date <= date]
        return before[-1] if before else None

    async def get_first_period_after(self, date: int) -> PeriodRecord | None:
        self.calls.append("get_first_period_after")
        after = [p for p in self.periods if p.start_date >= date]
        return after[0] if after else None
