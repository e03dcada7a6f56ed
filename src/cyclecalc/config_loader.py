"""Load, validate, and hot-reload the cycle engine rule table.

The rules live in ``cycle_config.yaml`` alongside this module.  At first use
the file is loaded once and cached.  Call ``reload_cycle_config()`` to re-read
it from disk without restarting the host process.

Usage::

    from cyclecalc.config_loader import get_cycle_config

    config = get_cycle_config()
    bucket = config.bucket_for(28)          # "standard"
    config.delay.escalation_days            # 8
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger("cyclecalc.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"

_MODES = ("fixed", "relative")


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class FormulaBucket:
    """One cycle-length class of the ovulation/fertile formula.

    Offsets are day-offsets from the cycle's anchor start.  For ``fixed``
    buckets they are used as-is; for ``relative`` buckets each value is
    subtracted from the period length.
    """

    name: str
    mode: str
    min_length: int | None
    max_length: int | None
    ovulation: tuple[int, int]
    fertile: tuple[int, int]
    clamp_negative: bool = False

    def matches(self, period_length: int) -> bool:
        if self.min_length is not None and period_length < self.min_length:
            return False
        if self.max_length is not None and period_length > self.max_length:
            return False
        return True


@dataclass
class DelayConfig:
    escalation_days: int


@dataclass
class PillConfig:
    min_lead_days: int
    bleed_offset_days: int


@dataclass
class PregnancyConfig:
    duration_days: int


@dataclass
class OvulationConfig:
    """Windows derived from an asserted ovulation range."""

    fertile_before_days: int
    fertile_after_days: int
    luteal_phase_days: int


@dataclass
class OutputConfig:
    clip_to_query: bool


@dataclass
class CycleConfig:
    """Top-level engine configuration.

    Access via ``get_cycle_config()``; do not instantiate directly.
    """

    version: str
    buckets: list[FormulaBucket]
    delay: DelayConfig
    pill: PillConfig
    pregnancy: PregnancyConfig
    ovulation: OvulationConfig
    output: OutputConfig
    _raw: dict = field(default_factory=dict, repr=False)

    def bucket_for(self, period_length: int) -> FormulaBucket:
        """Return the first bucket whose bounds contain *period_length*.

        Raises:
            LookupError: If no bucket matches (only possible with a config
                         that leaves a gap, which validation rejects).
        """
        for bucket in self.buckets:
            if bucket.matches(period_length):
                return bucket
        raise LookupError(f"No formula bucket covers period length {period_length}")


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when cycle_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    import yaml  # pyyaml

    if not path.exists():
        raise FileNotFoundError(f"Cycle config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _int_pair(value: Any, where: str, errors: list[str]) -> tuple[int, int]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        errors.append(f"{where} must be a list of two integers, got {value!r}")
        return (0, 0)
    try:
        return (int(value[0]), int(value[1]))
    except (TypeError, ValueError):
        errors.append(f"{where} must contain integers, got {value!r}")
        return (0, 0)


def _build_bucket(index: int, raw: Any, errors: list[str]) -> FormulaBucket | None:
    where = f"formula.buckets[{index}]"
    if not isinstance(raw, dict):
        errors.append(f"{where} must be a mapping")
        return None

    name = raw.get("name", f"bucket_{index}")
    mode = raw.get("mode")
    if mode not in _MODES:
        errors.append(f"{where}.mode must be one of {_MODES}, got {mode!r}")
        return None

    min_length = raw.get("min_length")
    max_length = raw.get("max_length")
    try:
        min_length = int(min_length) if min_length is not None else None
        max_length = int(max_length) if max_length is not None else None
    except (TypeError, ValueError):
        errors.append(f"{where} bounds must be integers")
        return None
    if min_length is not None and max_length is not None and min_length > max_length:
        errors.append(f"{where} min_length {min_length} > max_length {max_length}")

    if mode == "fixed":
        ovulation = _int_pair(raw.get("ovulation"), f"{where}.ovulation", errors)
        fertile = _int_pair(raw.get("fertile"), f"{where}.fertile", errors)
        if ovulation[0] > ovulation[1] or fertile[0] > fertile[1]:
            errors.append(f"{where} fixed windows must have start <= end")
    else:
        # Subtracted from the length, so start offset >= end offset
        ovulation = _int_pair(
            raw.get("ovulation_offsets"), f"{where}.ovulation_offsets", errors
        )
        fertile = _int_pair(raw.get("fertile_offsets"), f"{where}.fertile_offsets", errors)
        if ovulation[0] < ovulation[1] or fertile[0] < fertile[1]:
            errors.append(f"{where} relative offsets must be given largest first")

    return FormulaBucket(
        name=name,
        mode=mode,
        min_length=min_length,
        max_length=max_length,
        ovulation=ovulation,
        fertile=fertile,
        clamp_negative=bool(raw.get("clamp_negative", False)),
    )


def _check_bucket_coverage(buckets: list[FormulaBucket], errors: list[str]) -> None:
    """Buckets must be ordered, contiguous, and open at both ends."""
    if not buckets:
        return
    if buckets[0].min_length is not None:
        errors.append("formula.buckets: first bucket must have no min_length")
    if buckets[-1].max_length is not None:
        errors.append("formula.buckets: last bucket must have no max_length")
    for prev, nxt in zip(buckets, buckets[1:]):
        if prev.max_length is None or nxt.min_length is None:
            errors.append(
                f"formula.buckets: '{prev.name}' and '{nxt.name}' must share a bound"
            )
        elif nxt.min_length != prev.max_length + 1:
            errors.append(
                f"formula.buckets: gap or overlap between '{prev.name}' "
                f"(max {prev.max_length}) and '{nxt.name}' (min {nxt.min_length})"
            )


def _positive_int(section: dict, key: str, default: int, where: str, errors: list[str]) -> int:
    value = section.get(key, default)
    try:
        number = int(value)
    except (TypeError, ValueError):
        errors.append(f"{where}.{key} must be an integer, got {value!r}")
        return default
    if number <= 0:
        errors.append(f"{where}.{key} must be positive, got {number}")
    return number


def _validate_and_build(raw: dict) -> CycleConfig:
    """Validate the raw YAML dict and construct a CycleConfig.

    Args:
        raw: Parsed YAML dict.

    Returns:
        Validated CycleConfig instance.

    Raises:
        ConfigValidationError: If required fields are missing or invalid.
    """
    errors: list[str] = []

    version = str(raw.get("version", "1.0"))

    # ── Formula buckets ──
    formula_raw = raw.get("formula") or {}
    buckets_raw = formula_raw.get("buckets")
    buckets: list[FormulaBucket] = []
    if not buckets_raw:
        errors.append("'formula.buckets' section is missing or empty")
    else:
        for index, bucket_raw in enumerate(buckets_raw):
            bucket = _build_bucket(index, bucket_raw, errors)
            if bucket is not None:
                buckets.append(bucket)
        _check_bucket_coverage(buckets, errors)

    # ── Delay ──
    delay_raw = raw.get("delay") or {}
    delay = DelayConfig(
        escalation_days=_positive_int(delay_raw, "escalation_days", 8, "delay", errors),
    )

    # ── Pill ──
    pill_raw = raw.get("pill") or {}
    pill = PillConfig(
        min_lead_days=_positive_int(pill_raw, "min_lead_days", 5, "pill", errors),
        bleed_offset_days=int(pill_raw.get("bleed_offset_days", 2)),
    )

    # ── Pregnancy ──
    preg_raw = raw.get("pregnancy") or {}
    pregnancy = PregnancyConfig(
        duration_days=_positive_int(preg_raw, "duration_days", 280, "pregnancy", errors),
    )

    # ── Asserted ovulation ──
    ov_raw = raw.get("ovulation") or {}
    ovulation = OvulationConfig(
        fertile_before_days=int(ov_raw.get("fertile_before_days", 2)),
        fertile_after_days=int(ov_raw.get("fertile_after_days", 1)),
        luteal_phase_days=_positive_int(
            ov_raw, "luteal_phase_days", 14, "ovulation", errors
        ),
    )
    if ovulation.fertile_before_days < 0 or ovulation.fertile_after_days < 0:
        errors.append("ovulation fertile margins must not be negative")

    # ── Output ──
    out_raw = raw.get("output") or {}
    output = OutputConfig(clip_to_query=bool(out_raw.get("clip_to_query", True)))

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return CycleConfig(
        version=version,
        buckets=buckets,
        delay=delay,
        pill=pill,
        pregnancy=pregnancy,
        ovulation=ovulation,
        output=output,
        _raw=raw,
    )


def _default_path() -> Path:
    from cyclecalc.config import get_settings

    override = get_settings().cycle_config_path
    return Path(override) if override else _CONFIG_PATH


def load_cycle_config(path: Path | None = None) -> CycleConfig:
    """Load and validate the rule table from disk.

    Args:
        path: Override path to YAML. Uses ``CYCLECALC_CYCLE_CONFIG_PATH`` or
              the bundled cycle_config.yaml by default.

    Returns:
        Validated CycleConfig instance.
    """
    target = path or _default_path()
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded cycle config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: CycleConfig | None = None
_config_lock = threading.Lock()


def get_cycle_config() -> CycleConfig:
    """Return the global CycleConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_cycle_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_cycle_config()
    return _config


def reload_cycle_config(path: Path | None = None) -> CycleConfig:
    """Reload the rule table from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is
    re-raised.

    Args:
        path: Override path to YAML.

    Returns:
        The newly loaded CycleConfig.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_cycle_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded cycle config: %s → %s", old_version, new_config.version)
    return new_config
