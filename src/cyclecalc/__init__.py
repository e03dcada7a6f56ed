"""Menstrual cycle prediction engine.

Predicts future periods, ovulation and fertile windows, and delay state from
period history, with optional overrides from ovulation tests, manually
entered ovulation days, pill schedules and pregnancy.

Typical use::

    from cyclecalc import CycleInput, PeriodRecord, calculate_cycle_info

    cycles = calculate_cycle_info(cycle_input, from_date, to_date, today)
"""

from cyclecalc.date_range import DateRange
from cyclecalc.day_status import (
    DayStatusCalculator,
    get_day_status,
    get_day_statuses,
    get_day_statuses_for_dates,
)
from cyclecalc.models import (
    CycleInfo,
    CycleInput,
    DayStatus,
    DayType,
    OvulationDay,
    OvulationTest,
    PeriodRecord,
    PeriodSettings,
    PillPackage,
    PillSettings,
    PregnancyInfo,
    TestResult,
    WeightUnit,
)
from cyclecalc.period_calculator import PeriodCalculator, calculate_cycle_info
from cyclecalc.repository import (
    PeriodDataRepository,
    calculate_cycle_info_from_repository,
    load_cycle_input,
)

__all__ = [
    "CycleInfo",
    "CycleInput",
    "DateRange",
    "DayStatus",
    "DayStatusCalculator",
    "DayType",
    "OvulationDay",
    "OvulationTest",
    "PeriodCalculator",
    "PeriodDataRepository",
    "PeriodRecord",
    "PeriodSettings",
    "PillPackage",
    "PillSettings",
    "PregnancyInfo",
    "TestResult",
    "WeightUnit",
    "calculate_cycle_info",
    "calculate_cycle_info_from_repository",
    "get_day_status",
    "get_day_statuses",
    "get_day_statuses_for_dates",
    "load_cycle_input",
]
