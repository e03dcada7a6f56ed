"""Domain types consumed and produced by the cycle engine.

All dates are integer day-numbers (see ``cyclecalc.day_numbers``).  Inputs
are plain dataclasses so they can be built by repositories, parsed from JSON
via ``cyclecalc.schemas``, or constructed directly in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from cyclecalc.date_range import DateRange


# ---------------------------------------------------------------------------
# Period history
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PeriodRecord:
    """One observed menstruation.

    Attributes:
        pk:         Opaque identifier, stable per physical period.
        start_date: First bleeding day.
        end_date:   Last bleeding day (inclusive).
    """

    pk: str
    start_date: int
    end_date: int

    @property
    def range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


@dataclass
class PeriodSettings:
    """Average cycle and period lengths.

    Attributes:
        manual_average_cycle: Cycle length entered by the user.
        manual_average_day:   Period length entered by the user.
        auto_average_cycle:   Cycle length averaged from history by the caller.
        auto_average_day:     Period length averaged from history by the caller.
        is_auto_calc:         Use the auto pair instead of the manual pair.
    """

    manual_average_cycle: int = 30
    manual_average_day: int = 5
    auto_average_cycle: int = 30
    auto_average_day: int = 5
    is_auto_calc: bool = False

    @property
    def effective_cycle(self) -> int:
        return self.auto_average_cycle if self.is_auto_calc else self.manual_average_cycle

    @property
    def effective_day(self) -> int:
        return self.auto_average_day if self.is_auto_calc else self.manual_average_day


# ---------------------------------------------------------------------------
# Ovulation signals
# ---------------------------------------------------------------------------


class TestResult(str, Enum):
    __test__ = False  # not a pytest class

    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    UNCLEAR = "UNCLEAR"


@dataclass(frozen=True)
class OvulationTest:
    date: int
    result: TestResult


@dataclass(frozen=True)
class OvulationDay:
    """A manually asserted ovulation date."""

    date: int


# ---------------------------------------------------------------------------
# Pill
# ---------------------------------------------------------------------------


@dataclass
class PillSettings:
    """Pill tracking switch and default package shape.

    Attributes:
        is_calculating_with_pill: Master switch for pill-based predictions.
        pill_count:               Active pills per package.
        rest_pill:                Rest (placebo) days per package; 0 means
                                  continuous use with no withdrawal bleed.
    """

    is_calculating_with_pill: bool = False
    pill_count: int = 21
    rest_pill: int = 7


@dataclass(frozen=True)
class PillPackage:
    """One blister pack.

    ``pill_count`` and ``rest_days`` fall back to ``PillSettings`` when None.
    """

    package_start: int
    pill_count: int | None = None
    rest_days: int | None = None

    def active_count(self, settings: PillSettings) -> int:
        return self.pill_count if self.pill_count is not None else settings.pill_count

    def rest_count(self, settings: PillSettings) -> int:
        return self.rest_days if self.rest_days is not None else settings.rest_pill

    def active_window(self, settings: PillSettings) -> DateRange:
        return DateRange(
            self.package_start, self.package_start + self.active_count(settings) - 1
        )

    def cycle_length(self, settings: PillSettings) -> int:
        return self.active_count(settings) + self.rest_count(settings)


# ---------------------------------------------------------------------------
# Pregnancy
# ---------------------------------------------------------------------------


class WeightUnit(str, Enum):
    KG = "KG"
    LBS = "LBS"
    ST = "ST"


@dataclass
class PregnancyInfo:
    """A tracked pregnancy.

    Attributes:
        id:                       Opaque identifier.
        baby_name:                Optional name entered by the user.
        is_due_date_decided:      True when ``due_date`` was entered by the user.
        last_the_day_date:        Last menstrual period start, used to derive
                                  the start and due dates.
        due_date:                 Expected delivery date.
        starts_date:              Pregnancy start; predictions stop here.
        before_pregnancy_weight:  Weight before pregnancy, in ``weight_unit``.
        weight_unit:              Unit of ``before_pregnancy_weight``.
        is_multiple_birth:        Twins or more.
        is_miscarriage:           Ended in miscarriage.
        is_ended:                 Ended (birth or otherwise).
        is_deleted:               Soft-deleted by the user.
    """

    id: str = ""
    baby_name: str | None = None
    is_due_date_decided: bool = False
    last_the_day_date: int | None = None
    due_date: int | None = None
    starts_date: int | None = None
    before_pregnancy_weight: float | None = None
    weight_unit: WeightUnit = WeightUnit.KG
    is_multiple_birth: bool = False
    is_miscarriage: bool = False
    is_ended: bool = False
    is_deleted: bool = False

    def is_active(self) -> bool:
        return not self.is_ended and not self.is_miscarriage and not self.is_deleted

    def get_weeks_from_start(self, current_date: int) -> int:
        if self.starts_date is None:
            return 0
        return (current_date - self.starts_date) // 7

    def get_days_until_due(self, current_date: int) -> int | None:
        if self.due_date is None:
            return None
        return self.due_date - current_date


# ---------------------------------------------------------------------------
# Engine input / output
# ---------------------------------------------------------------------------


@dataclass
class CycleInput:
    """Resolved in-memory snapshot the engine computes from.

    Attributes:
        periods:              Period records; sorted by start before use.
        period_settings:      Average lengths.
        ovulation_tests:      Ovulation test results (only POSITIVE count).
        user_ovulation_days:  Manually asserted ovulation dates.
        pill_packages:        Pill packages, any order.
        pill_settings:        Pill switch and defaults.
        pregnancy:            Current pregnancy, if any.
    """

    periods: list[PeriodRecord] = field(default_factory=list)
    period_settings: PeriodSettings = field(default_factory=PeriodSettings)
    ovulation_tests: list[OvulationTest] = field(default_factory=list)
    user_ovulation_days: list[OvulationDay] = field(default_factory=list)
    pill_packages: list[PillPackage] = field(default_factory=list)
    pill_settings: PillSettings = field(default_factory=PillSettings)
    pregnancy: PregnancyInfo | None = None


@dataclass
class CycleInfo:
    """Computed view of one anchor period and everything predicted from it.

    Attributes:
        pk:                            Anchor period identifier.
        actual_period:                 The anchor period itself.
        period:                        Cycle length used for this cycle.
        predict_days:                  Future predicted period windows.
        ovulation_days:                Ovulation windows.
        fertile_days:                  Fertile windows.
        delay_the_days:                Days the next period is overdue (0 if not).
        delay_day:                     ``[due date, today]`` while overdue.
        pregnancy_start_date:          Active pregnancy start, if any.
        is_ovulation_period_user_input: True when any ovulation window comes
                                       from tests or manual input.
        ovulation_day_period:          Cycle length implied by an asserted
                                       ovulation date.
        the_pill_period:               Pill package cycle length when the pill
                                       drives the prediction.
        rest_pill:                     Remaining rest-pill days today.
        is_continuous_pill_usage:      Pill taken without rest days.
    """

    pk: str
    actual_period: DateRange | None
    period: int
    predict_days: list[DateRange] = field(default_factory=list)
    ovulation_days: list[DateRange] = field(default_factory=list)
    fertile_days: list[DateRange] = field(default_factory=list)
    delay_the_days: int = 0
    delay_day: DateRange | None = None
    pregnancy_start_date: int | None = None
    is_ovulation_period_user_input: bool = False
    ovulation_day_period: int | None = None
    the_pill_period: int | None = None
    rest_pill: int | None = None
    is_continuous_pill_usage: bool = False

    @property
    def has_windows(self) -> bool:
        return bool(self.predict_days or self.ovulation_days or self.fertile_days)


class DayType(str, Enum):
    NONE = "NONE"
    PERIOD_ONGOING = "PERIOD_ONGOING"
    PERIOD_UPCOMING = "PERIOD_UPCOMING"
    PERIOD_PREDICTED = "PERIOD_PREDICTED"
    PERIOD_DELAYED = "PERIOD_DELAYED"
    PERIOD_DELAYED_OVER = "PERIOD_DELAYED_OVER"
    OVULATION = "OVULATION"
    FERTILE = "FERTILE"
    PREGNANCY = "PREGNANCY"
    EMPTY = "EMPTY"


@dataclass(frozen=True)
class DayStatus:
    """Classification of a single day.

    Attributes:
        date:   The classified day.
        type:   What the day is.
        gap:    Days since the containing cycle's anchor (or pregnancy start).
        period: Cycle length of the containing cycle.
    """

    date: int
    type: DayType
    gap: int = 0
    period: int = 0
