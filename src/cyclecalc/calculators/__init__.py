"""Pure rule calculators used by the period orchestrator."""

from cyclecalc.calculators.formula import CycleFormula, FormulaWindows
from cyclecalc.calculators.ovulation import (
    AssertedOvulation,
    FormulaOvulation,
    OvulationCalculator,
    OvulationSource,
    SuppressedOvulation,
    combine_ovulation_dates,
    merge_consecutive_dates,
    merge_ranges,
)
from cyclecalc.calculators.pill import PillCalculator
from cyclecalc.calculators.pregnancy import (
    PregnancyCalculator,
    normalize_weight_to_kg,
    truncate_before,
)

__all__ = [
    "AssertedOvulation",
    "CycleFormula",
    "FormulaOvulation",
    "FormulaWindows",
    "OvulationCalculator",
    "OvulationSource",
    "PillCalculator",
    "PregnancyCalculator",
    "SuppressedOvulation",
    "combine_ovulation_dates",
    "merge_consecutive_dates",
    "merge_ranges",
    "normalize_weight_to_kg",
    "truncate_before",
]
