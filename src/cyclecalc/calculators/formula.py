"""Bucketed ovulation / fertile window formula.

Maps a cycle length to ovulation and fertile windows expressed as day
offsets from the cycle's first day.  The buckets come from the ordered
``formula.buckets`` table in ``cycle_config.yaml``:

- short (< 26 days): offsets relative to the length, clamped at day 0
- standard (26-32 days, Standard Days Method): ovulation 12-14, fertile 7-18
- long (> 32 days): offsets relative to the length, unclamped

Adding a bucket is a config change, not a code change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cyclecalc.config_loader import CycleConfig, FormulaBucket, get_cycle_config
from cyclecalc.date_range import DateRange

logger = logging.getLogger("cyclecalc.calculators.formula")


@dataclass(frozen=True)
class FormulaWindows:
    """Ovulation and fertile windows for one cycle.

    Attributes:
        bucket:    Name of the bucket that produced the windows.
        ovulation: Ovulation window.
        fertile:   Fertile window.
    """

    bucket: str
    ovulation: DateRange
    fertile: DateRange


def _window(bucket: FormulaBucket, pair: tuple[int, int], period_length: int) -> DateRange:
    if bucket.mode == "fixed":
        return DateRange(pair[0], pair[1])
    start = period_length - pair[0]
    end = period_length - pair[1]
    if bucket.clamp_negative:
        start = max(0, start)
        end = max(0, end)
    return DateRange(start, end)


class CycleFormula:
    """Compute formula-derived windows for a cycle length.

    Usage::

        formula = CycleFormula()
        windows = formula.ovulation_and_fertile(28, anchor_start=day)
        windows.ovulation   # DateRange(day + 12, day + 14)
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    def offsets(self, period_length: int) -> FormulaWindows:
        """Return the windows as offsets from day 0 of the cycle."""
        bucket = self._config.bucket_for(period_length)
        return FormulaWindows(
            bucket=bucket.name,
            ovulation=_window(bucket, bucket.ovulation, period_length),
            fertile=_window(bucket, bucket.fertile, period_length),
        )

    def ovulation_and_fertile(self, period_length: int, anchor_start: int = 0) -> FormulaWindows:
        """Return absolute windows for a cycle starting on *anchor_start*.

        Args:
            period_length: Cycle length in days; selects the bucket.
            anchor_start:  Day-number of the cycle's first day.

        Returns:
            FormulaWindows shifted to *anchor_start*.
        """
        rel = self.offsets(period_length)
        logger.debug(
            "Formula bucket %s for period %d at %d", rel.bucket, period_length, anchor_start
        )
        return FormulaWindows(
            bucket=rel.bucket,
            ovulation=rel.ovulation.shift(anchor_start),
            fertile=rel.fertile.shift(anchor_start),
        )
