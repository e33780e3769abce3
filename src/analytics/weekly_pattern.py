"""Day-of-week buckets of symptom averages (Sunday-first, 0..6)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from analytics.aggregator import METRIC_FIELDS, DerivedDailyMetrics, to_frame
from analytics.results import InsufficientData
from constants import DAY_NAMES, MIN_DAYS_WEEKLY

log = logging.getLogger("life_patterns.weekly")

WEEKLY_METRICS = ["pain", "fatigue", "mood", "sleep_quality"]


@dataclass(frozen=True)
class WeekdayBucket:
    day_of_week: int
    averages: Dict[str, float]
    counts: Dict[str, int]
    data_count: int

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {k: round(v, 3) for k, v in self.averages.items()}
        out["data_count"] = self.data_count
        return out


@dataclass(frozen=True)
class WeeklyPattern:
    buckets: List[WeekdayBucket]  # index == day_of_week
    data_count: int

    def __getitem__(self, day_of_week: int) -> WeekdayBucket:
        return self.buckets[day_of_week]

    def _with_data(self, metric: str) -> List[WeekdayBucket]:
        return [b for b in self.buckets if b.counts.get(metric, 0) > 0]

    def worst_day(self, metric: str = "pain") -> Optional[WeekdayBucket]:
        """Bucket with the highest average; earliest day wins ties."""
        candidates = self._with_data(metric)
        if not candidates:
            return None
        return max(candidates, key=lambda b: b.averages[metric])

    def best_day(self, metric: str = "pain") -> Optional[WeekdayBucket]:
        candidates = self._with_data(metric)
        if not candidates:
            return None
        return min(candidates, key=lambda b: b.averages[metric])

    def to_dict(self) -> Dict[str, Dict[str, object]]:
        return {b.day_name: b.to_dict() for b in self.buckets}


def weekly_pattern(metrics: Sequence[DerivedDailyMetrics],
                   metric_names: Sequence[str] = WEEKLY_METRICS) -> Union[WeeklyPattern, InsufficientData]:
    """Average each metric per weekday over the days that recorded it.

    Empty buckets average to 0 with ``data_count`` 0, so callers can tell
    "no data" apart from an average of zero values.
    """
    if len(metrics) < MIN_DAYS_WEEKLY:
        return InsufficientData("weekly_pattern", MIN_DAYS_WEEKLY, len(metrics))

    df = to_frame(metrics)
    cols = {name: METRIC_FIELDS[name] for name in metric_names}
    grouped = df.groupby("day_of_week")
    means = grouped[list(cols.values())].mean()
    counts = grouped[list(cols.values())].count()
    sizes = grouped.size()

    buckets: List[WeekdayBucket] = []
    for dow in range(7):
        averages: Dict[str, float] = {}
        n_per_metric: Dict[str, int] = {}
        for name, col in cols.items():
            n = int(counts.at[dow, col]) if dow in counts.index else 0
            n_per_metric[name] = n
            averages[name] = float(means.at[dow, col]) if n > 0 else 0.0
        buckets.append(WeekdayBucket(
            day_of_week=dow,
            averages=averages,
            counts=n_per_metric,
            data_count=int(sizes.get(dow, 0)),
        ))

    log.info("   Weekly pattern: %d days across %d weekdays",
             len(metrics), sum(1 for b in buckets if b.data_count))
    return WeeklyPattern(buckets=buckets, data_count=len(metrics))
