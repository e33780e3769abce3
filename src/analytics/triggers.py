"""Symptom-flare trigger detection by high/low pain cohort comparison.

Days at or above the 75th percentile of overall pain form the high-symptom
cohort, every other day the low-symptom cohort.  Candidate factors are then
compared between the cohorts:

  pressure        mean hPa gap     > 5    (high when > 10)
  sleep duration  mean hours gap   > 1    (high when > 2)
  day of week     share of the high cohort on one weekday > 30 % (high > 50 %)

Each factor needs ``min_cohort_days`` days with data in *both* cohorts;
a factor without enough data is skipped and the others still run.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from analytics.aggregator import DerivedDailyMetrics
from analytics.results import InsufficientData
from config import DEFAULT_THRESHOLDS, AnalysisThresholds
from constants import DAY_NAMES, MIN_DAYS_TRIGGERS

log = logging.getLogger("life_patterns.triggers")


@dataclass(frozen=True)
class TriggerFactor:
    type: str      # weather_pressure | sleep_duration | day_of_week
    factor: str
    severity: str  # high | medium
    description: str
    high_day_avg: Optional[float] = None
    low_day_avg: Optional[float] = None
    difference: Optional[float] = None
    problematic_day: Optional[str] = None
    frequency: Optional[float] = None

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "type": self.type,
            "factor": self.factor,
            "severity": self.severity,
            "description": self.description,
        }
        for key in ("high_day_avg", "low_day_avg", "difference", "frequency"):
            val = getattr(self, key)
            if val is not None:
                out[key] = round(val, 3)
        if self.problematic_day is not None:
            out["problematic_day"] = self.problematic_day
        return out


@dataclass(frozen=True)
class TriggerDetection:
    triggers: List[TriggerFactor]
    high_symptom_threshold: float
    high_cohort_size: int
    low_cohort_size: int
    data_count: int
    skipped_factors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "triggers": [t.to_dict() for t in self.triggers],
            "high_symptom_threshold": round(self.high_symptom_threshold, 3),
            "high_cohort_size": self.high_cohort_size,
            "low_cohort_size": self.low_cohort_size,
            "skipped_factors": list(self.skipped_factors),
            "data_count": self.data_count,
        }


def percentile_nearest_rank(values: Sequence[float], percentile: float) -> float:
    """Nearest-rank percentile: sorted[ceil(p/100 * n) - 1], index clamped at 0."""
    if not values:
        raise ValueError("percentile of an empty sequence")
    ordered = sorted(values)
    index = math.ceil(percentile / 100.0 * len(ordered)) - 1
    return ordered[max(0, min(index, len(ordered) - 1))]


def split_cohorts(metrics: Sequence[DerivedDailyMetrics],
                  threshold: float) -> Tuple[List[DerivedDailyMetrics], List[DerivedDailyMetrics]]:
    high = [m for m in metrics if m.overall_pain >= threshold]
    low = [m for m in metrics if m.overall_pain < threshold]
    return high, low


def _mean(values: List[float]) -> float:
    return sum(values) / len(values)


def _severity(gap: float, threshold: float) -> str:
    return "high" if gap > 2 * threshold else "medium"


def _compare_means(high: Sequence[DerivedDailyMetrics], low: Sequence[DerivedDailyMetrics],
                   field_name: str, min_days: int) -> Optional[Tuple[float, float]]:
    high_vals = [m.get(field_name) for m in high if m.get(field_name) is not None]
    low_vals = [m.get(field_name) for m in low if m.get(field_name) is not None]
    if len(high_vals) < min_days or len(low_vals) < min_days:
        return None
    return _mean(high_vals), _mean(low_vals)


def compare_pressure(high, low, thresholds: AnalysisThresholds) -> Tuple[bool, Optional[TriggerFactor]]:
    """Return (had_enough_data, trigger or None)."""
    means = _compare_means(high, low, "pressure", thresholds.min_cohort_days)
    if means is None:
        return False, None
    high_avg, low_avg = means
    gap = abs(high_avg - low_avg)
    if gap <= thresholds.pressure_gap_hpa:
        return True, None
    direction = "higher" if high_avg > low_avg else "lower"
    return True, TriggerFactor(
        type="weather_pressure",
        factor="barometric pressure",
        severity=_severity(gap, thresholds.pressure_gap_hpa),
        description=f"Average pressure is {direction} on high-symptom days "
                    f"({high_avg:.1f} vs {low_avg:.1f} hPa)",
        high_day_avg=high_avg,
        low_day_avg=low_avg,
        difference=gap,
    )


def compare_sleep(high, low, thresholds: AnalysisThresholds) -> Tuple[bool, Optional[TriggerFactor]]:
    means = _compare_means(high, low, "sleep_duration", thresholds.min_cohort_days)
    if means is None:
        return False, None
    high_avg, low_avg = means
    gap = abs(high_avg - low_avg)
    if gap <= thresholds.sleep_gap_hours:
        return True, None
    direction = "shorter" if high_avg < low_avg else "longer"
    return True, TriggerFactor(
        type="sleep_duration",
        factor="sleep duration",
        severity=_severity(gap, thresholds.sleep_gap_hours),
        description=f"Sleep is {direction} on high-symptom days "
                    f"({high_avg:.1f} vs {low_avg:.1f} h)",
        high_day_avg=high_avg,
        low_day_avg=low_avg,
        difference=gap,
    )


def compare_day_of_week(high, low, thresholds: AnalysisThresholds) -> Tuple[bool, Optional[TriggerFactor]]:
    if len(high) < thresholds.min_cohort_days or len(low) < thresholds.min_cohort_days:
        return False, None
    counts = Counter(m.day_of_week for m in high)
    # Ties resolve to the later weekday (Sunday-first order)
    top_day = max(reversed(range(7)), key=lambda d: counts.get(d, 0))
    share = counts[top_day] / len(high)
    if share <= thresholds.weekday_share:
        return True, None
    day_name = DAY_NAMES[top_day]
    return True, TriggerFactor(
        type="day_of_week",
        factor="day of week",
        severity="high" if share > thresholds.weekday_share_high else "medium",
        description=f"Symptoms tend to flare on {day_name}s "
                    f"({share:.0%} of high-symptom days)",
        problematic_day=day_name,
        frequency=share,
    )


FACTOR_COMPARATORS = [
    ("weather_pressure", compare_pressure),
    ("sleep_duration", compare_sleep),
    ("day_of_week", compare_day_of_week),
]


def detect_triggers(metrics: Sequence[DerivedDailyMetrics],
                    thresholds: Optional[AnalysisThresholds] = None) -> Union[TriggerDetection, InsufficientData]:
    if len(metrics) < MIN_DAYS_TRIGGERS:
        return InsufficientData("trigger_detection", MIN_DAYS_TRIGGERS, len(metrics))
    thresholds = thresholds or DEFAULT_THRESHOLDS

    pain_threshold = percentile_nearest_rank(
        [m.overall_pain for m in metrics], thresholds.pain_percentile)
    high, low = split_cohorts(metrics, pain_threshold)

    triggers: List[TriggerFactor] = []
    skipped: List[str] = []
    for name, compare in FACTOR_COMPARATORS:
        enough, trigger = compare(high, low, thresholds)
        if not enough:
            skipped.append(name)
            continue
        if trigger is not None:
            triggers.append(trigger)

    log.info("   Triggers: threshold=%.2f, cohorts %d/%d, %d triggers, skipped=%s",
             pain_threshold, len(high), len(low), len(triggers), ",".join(skipped) or "none")
    return TriggerDetection(
        triggers=triggers,
        high_symptom_threshold=pain_threshold,
        high_cohort_size=len(high),
        low_cohort_size=len(low),
        data_count=len(metrics),
        skipped_factors=skipped,
    )
