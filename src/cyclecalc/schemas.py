"""Pydantic payload schemas for JSON callers.

Hosts that receive cycle data as JSON (API handlers, fixtures, batch jobs)
validate it with these models and convert to the engine's dataclasses with
``to_domain()``.  Dates are ISO ``YYYY-MM-DD`` strings on the wire and
day-numbers inside the engine.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cyclecalc.date_range import DateRange
from cyclecalc.day_numbers import from_day_number, to_day_number
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
    TestResult,
    WeightUnit,
)


class CycleBase(BaseModel):
    """Base model with shared config for all cycle payloads."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def _day(value: date | None) -> int | None:
    return to_day_number(value) if value is not None else None


# ---------- Inputs ----------


class PeriodRecordIn(CycleBase):
    pk: str
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_order(self) -> PeriodRecordIn:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def to_domain(self) -> PeriodRecord:
        return PeriodRecord(
            pk=self.pk,
            start_date=to_day_number(self.start_date),
            end_date=to_day_number(self.end_date),
        )


class PeriodSettingsIn(CycleBase):
    manual_average_cycle: int = Field(default=30, ge=1)
    manual_average_day: int = Field(default=5, ge=1)
    auto_average_cycle: int = Field(default=30, ge=1)
    auto_average_day: int = Field(default=5, ge=1)
    is_auto_calc: bool = False

    def to_domain(self) -> PeriodSettings:
        return PeriodSettings(**self.model_dump())


class OvulationTestIn(CycleBase):
    date: date
    result: TestResult

    def to_domain(self) -> OvulationTest:
        return OvulationTest(date=to_day_number(self.date), result=self.result)


class PillPackageIn(CycleBase):
    package_start: date
    pill_count: int | None = Field(default=None, ge=1)
    rest_days: int | None = Field(default=None, ge=0)

    def to_domain(self) -> PillPackage:
        return PillPackage(
            package_start=to_day_number(self.package_start),
            pill_count=self.pill_count,
            rest_days=self.rest_days,
        )


class PillSettingsIn(CycleBase):
    is_calculating_with_pill: bool = False
    pill_count: int = Field(default=21, ge=1)
    rest_pill: int = Field(default=7, ge=0)

    def to_domain(self) -> PillSettings:
        return PillSettings(**self.model_dump())


class PregnancyIn(CycleBase):
    id: str = ""
    baby_name: str | None = None
    is_due_date_decided: bool = False
    last_the_day_date: date | None = None
    due_date: date | None = None
    starts_date: date | None = None
    before_pregnancy_weight: float | None = Field(default=None, gt=0)
    weight_unit: WeightUnit = WeightUnit.KG
    is_multiple_birth: bool = False
    is_miscarriage: bool = False
    is_ended: bool = False
    is_deleted: bool = False

    def to_domain(self) -> PregnancyInfo:
        return PregnancyInfo(
            id=self.id,
            baby_name=self.baby_name,
            is_due_date_decided=self.is_due_date_decided,
            last_the_day_date=_day(self.last_the_day_date),
            due_date=_day(self.due_date),
            starts_date=_day(self.starts_date),
            before_pregnancy_weight=self.before_pregnancy_weight,
            weight_unit=self.weight_unit,
            is_multiple_birth=self.is_multiple_birth,
            is_miscarriage=self.is_miscarriage,
            is_ended=self.is_ended,
            is_deleted=self.is_deleted,
        )


class CycleInputPayload(CycleBase):
    """Everything the engine needs, as one JSON document."""

    periods: list[PeriodRecordIn] = Field(default_factory=list)
    period_settings: PeriodSettingsIn = Field(default_factory=PeriodSettingsIn)
    ovulation_tests: list[OvulationTestIn] = Field(default_factory=list)
    user_ovulation_days: list[date] = Field(default_factory=list)
    pill_packages: list[PillPackageIn] = Field(default_factory=list)
    pill_settings: PillSettingsIn = Field(default_factory=PillSettingsIn)
    pregnancy: PregnancyIn | None = None

    def to_domain(self) -> CycleInput:
        return CycleInput(
            periods=[p.to_domain() for p in self.periods],
            period_settings=self.period_settings.to_domain(),
            ovulation_tests=[t.to_domain() for t in self.ovulation_tests],
            user_ovulation_days=[OvulationDay(to_day_number(d)) for d in self.user_ovulation_days],
            pill_packages=[p.to_domain() for p in self.pill_packages],
            pill_settings=self.pill_settings.to_domain(),
            pregnancy=self.pregnancy.to_domain() if self.pregnancy else None,
        )


# ---------- Outputs ----------


class DateRangeOut(CycleBase):
    start_date: date
    end_date: date

    @classmethod
    def from_range(cls, r: DateRange) -> DateRangeOut:
        return cls(start_date=from_day_number(r.start_date), end_date=from_day_number(r.end_date))


class CycleInfoOut(CycleBase):
    """JSON view of a ``CycleInfo`` with calendar dates."""

    pk: str
    actual_period: DateRangeOut | None
    period: int
    predict_days: list[DateRangeOut]
    ovulation_days: list[DateRangeOut]
    fertile_days: list[DateRangeOut]
    delay_the_days: int
    delay_day: DateRangeOut | None
    pregnancy_start_date: date | None
    is_ovulation_period_user_input: bool
    ovulation_day_period: int | None
    the_pill_period: int | None
    rest_pill: int | None
    is_continuous_pill_usage: bool

    @classmethod
    def from_cycle(cls, info: CycleInfo) -> CycleInfoOut:
        def _opt(r: DateRange | None) -> DateRangeOut | None:
            return DateRangeOut.from_range(r) if r is not None else None

        return cls(
            pk=info.pk,
            actual_period=_opt(info.actual_period),
            period=info.period,
            predict_days=[DateRangeOut.from_range(r) for r in info.predict_days],
            ovulation_days=[DateRangeOut.from_range(r) for r in info.ovulation_days],
            fertile_days=[DateRangeOut.from_range(r) for r in info.fertile_days],
            delay_the_days=info.delay_the_days,
            delay_day=_opt(info.delay_day),
            pregnancy_start_date=(
                from_day_number(info.pregnancy_start_date)
                if info.pregnancy_start_date is not None
                else None
            ),
            is_ovulation_period_user_input=info.is_ovulation_period_user_input,
            ovulation_day_period=info.ovulation_day_period,
            the_pill_period=info.the_pill_period,
            rest_pill=info.rest_pill,
            is_continuous_pill_usage=info.is_continuous_pill_usage,
        )
