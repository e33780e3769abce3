"""Month-over-month symptom trend over the three most recent calendar months."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd

from analytics.aggregator import METRIC_FIELDS, DerivedDailyMetrics, to_frame
from analytics.results import InsufficientData
from constants import MIN_DAYS_TREND, TREND_METRICS, TREND_MONTHS, TREND_STABLE_PCT

log = logging.getLogger("life_patterns.trend")


@dataclass(frozen=True)
class MonthAverage:
    month: str  # YYYY-MM
    average: float
    n: int


@dataclass(frozen=True)
class MonthlyTrend:
    metric: str
    trend: str  # increasing | decreasing | stable
    change_rate_percent: float
    per_month_averages: List[MonthAverage] = field(default_factory=list)

    @property
    def has_comparison(self) -> bool:
        return len(self.per_month_averages) >= 2

    def to_dict(self) -> Dict[str, object]:
        return {
            "trend": self.trend,
            "change_rate": round(self.change_rate_percent, 2),
            "data": [{"month": m.month, "average": round(m.average, 3), "n": m.n}
                     for m in self.per_month_averages],
        }


def change_rate_percent(first: float, last: float) -> float:
    """(last - first) / first * 100, or 0 when first is 0."""
    if first == 0:
        return 0.0
    return (last - first) / first * 100.0


def classify_trend(rate_percent: float) -> str:
    """stable within ±10 % inclusive, else increasing/decreasing by sign."""
    # Rounded so that e.g. 10 -> 11 is exactly 10 % and stays stable
    rate = round(rate_percent, 9)
    if abs(rate) <= TREND_STABLE_PCT:
        return "stable"
    return "increasing" if rate > 0 else "decreasing"


def recent_months(now: date, n_months: int = TREND_MONTHS) -> List[str]:
    """The ``n_months`` calendar months ending with ``now``'s month, oldest first."""
    current = pd.Period(f"{now.year:04d}-{now.month:02d}", freq="M")
    return [str(current - i) for i in range(n_months - 1, -1, -1)]


def monthly_trend(metrics: Sequence[DerivedDailyMetrics], metric: str,
                  now: Optional[date] = None) -> Union[MonthlyTrend, InsufficientData]:
    """Trend of one metric (``pain``, ``fatigue``, ``mood``, ...).

    Data outside the window of the last three calendar months is ignored.
    Months without a value for the metric, or whose average is 0, are left
    out before the first and last month are compared.
    """
    if len(metrics) < MIN_DAYS_TREND:
        return InsufficientData("monthly_trend", MIN_DAYS_TREND, len(metrics))
    if metric not in METRIC_FIELDS:
        raise ValueError(f"Unknown trend metric: {metric!r}")

    now = now or date.today()
    window = recent_months(now)
    col = METRIC_FIELDS[metric]

    df = to_frame(metrics)
    df["month"] = df["date"].dt.to_period("M").astype(str)
    df = df[df["month"].isin(window)]
    stats = df.groupby("month")[col].agg(["mean", "count"])

    months: List[MonthAverage] = []
    for month in window:
        if month not in stats.index:
            continue
        n = int(stats.at[month, "count"])
        average = float(stats.at[month, "mean"]) if n else 0.0
        # A zero mean is a month without symptom entries, not a symptom-free month
        if average <= 0:
            continue
        months.append(MonthAverage(month=month, average=average, n=n))

    if len(months) < 2:
        return MonthlyTrend(metric=metric, trend="stable", change_rate_percent=0.0,
                            per_month_averages=months)

    rate = change_rate_percent(months[0].average, months[-1].average)
    return MonthlyTrend(
        metric=metric,
        trend=classify_trend(rate),
        change_rate_percent=rate,
        per_month_averages=months,
    )


def monthly_trends(metrics: Sequence[DerivedDailyMetrics], now: Optional[date] = None,
                   metric_names: Sequence[str] = TREND_METRICS) -> Union[Dict[str, MonthlyTrend], InsufficientData]:
    """``monthly_trend`` for every metric in ``metric_names``."""
    if len(metrics) < MIN_DAYS_TREND:
        return InsufficientData("monthly_trend", MIN_DAYS_TREND, len(metrics))
    trends = {}
    for name in metric_names:
        trends[name] = monthly_trend(metrics, name, now=now)
    log.info("   Monthly trend: %s",
             ", ".join(f"{k}={v.trend}" for k, v in trends.items()) or "none")
    return trends
