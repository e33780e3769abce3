"""Pearson correlation between paired daily factors.

Pairs are built per factor pair: a day only contributes when *both* values
are present, so the two series always have equal length and index-aligned
meaning.  Degenerate inputs (empty, constant) score 0 rather than NaN.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import stats as sp_stats

from analytics.aggregator import DerivedDailyMetrics
from analytics.results import InsufficientData
from constants import (
    MIN_DAYS_CORRELATION,
    MIN_MEDICATION_LOGS,
    STRENGTH_MODERATE,
    STRENGTH_STRONG,
    STRENGTH_WEAK,
)

log = logging.getLogger("life_patterns.correlation")

DayFilter = Callable[[DerivedDailyMetrics], bool]

# name -> (x field, y field)
WEATHER_PAIRS = {
    "pressure_pain":      ("pressure", "overall_pain"),
    "pressure_stiffness": ("pressure", "overall_stiffness"),
    "humidity_pain":      ("humidity", "overall_pain"),
    "humidity_swelling":  ("humidity", "overall_swelling"),
}
SLEEP_PAIRS = {
    "duration_pain":           ("sleep_duration", "overall_pain"),
    "quality_pain":            ("sleep_quality", "overall_pain"),
    "quality_fatigue":         ("sleep_quality", "fatigue_physical"),
    "interruptions_stiffness": ("sleep_interruptions", "morning_stiffness"),
}
MEDICATION_PAIRS = {
    "adherence_pain":      ("adherence_rate", "overall_pain"),
    "adherence_swelling":  ("adherence_rate", "overall_swelling"),
    "adherence_stiffness": ("adherence_rate", "overall_stiffness"),
}


@dataclass(frozen=True)
class CorrelationResult:
    name: str
    x_field: str
    y_field: str
    coefficient: float
    strength: str
    n: int
    p_value: float = 1.0

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "factors": [self.x_field, self.y_field],
            "r": round(self.coefficient, 4),
            "strength": self.strength,
            "n": self.n,
            "p": round(self.p_value, 4),
        }


@dataclass(frozen=True)
class CorrelationAnalysis:
    """Named correlations for one analysis family (weather, sleep, ...)."""
    analysis: str
    results: Dict[str, CorrelationResult]
    data_count: int
    average_adherence: Optional[float] = None

    @property
    def coefficients(self) -> Dict[str, float]:
        return {name: r.coefficient for name, r in self.results.items()}

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "correlations": self.coefficients,
            "details": {name: r.to_dict() for name, r in self.results.items()},
            "data_count": self.data_count,
        }
        if self.average_adherence is not None:
            out["average_adherence"] = round(self.average_adherence, 4)
        return out


# ─── Core math ──────────────────────────────────────────────

def correlate(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Two-pass Pearson r.

    r = Σ(Δx·Δy) / sqrt(Σ Δx² · Σ Δy²)

    Returns 0 for empty input or when either series has zero variance.
    """
    if len(xs) != len(ys):
        raise ValueError(f"correlate() needs equal-length series, got {len(xs)} and {len(ys)}")
    if len(xs) == 0:
        return 0.0
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    if np.isnan(x).any() or np.isnan(y).any():
        raise ValueError("correlate() received NaN; build paired samples first")
    dx = x - x.mean()
    dy = y - y.mean()
    sxx = float(np.sum(dx * dx))
    syy = float(np.sum(dy * dy))
    denom = math.sqrt(sxx * syy)
    if denom == 0.0:
        return 0.0
    r = float(np.sum(dx * dy)) / denom
    return max(-1.0, min(1.0, r))


def classify_strength(r: float) -> str:
    """strong / moderate / weak / none on |r|; sign is ignored."""
    a = abs(r)
    if a >= STRENGTH_STRONG:
        return "strong"
    if a >= STRENGTH_MODERATE:
        return "moderate"
    if a >= STRENGTH_WEAK:
        return "weak"
    return "none"


def p_value(r: float, n: int) -> float:
    """Two-sided p for H0: rho = 0 via the t-distribution with n-2 dof."""
    if n < 3 or r == 0.0:
        return 1.0
    if abs(r) >= 1.0:
        return 0.0
    t_stat = r * math.sqrt(n - 2) / math.sqrt(1 - r * r)
    return float(2 * sp_stats.t.sf(abs(t_stat), n - 2))


def paired_samples(metrics: Sequence[DerivedDailyMetrics], x_field: str, y_field: str,
                   where: Optional[DayFilter] = None) -> Tuple[List[float], List[float]]:
    """Index-aligned series over days where both fields are present."""
    xs: List[float] = []
    ys: List[float] = []
    for m in metrics:
        if where is not None and not where(m):
            continue
        x, y = m.get(x_field), m.get(y_field)
        if x is None or y is None:
            continue
        xs.append(float(x))
        ys.append(float(y))
    return xs, ys


def correlate_fields(metrics: Sequence[DerivedDailyMetrics], x_field: str, y_field: str,
                     name: Optional[str] = None,
                     where: Optional[DayFilter] = None) -> CorrelationResult:
    xs, ys = paired_samples(metrics, x_field, y_field, where)
    r = correlate(xs, ys)
    return CorrelationResult(
        name=name or f"{x_field}_{y_field}",
        x_field=x_field,
        y_field=y_field,
        coefficient=r,
        strength=classify_strength(r),
        n=len(xs),
        p_value=p_value(r, len(xs)),
    )


def _correlate_pairs(metrics: Sequence[DerivedDailyMetrics],
                     pairs: Dict[str, Tuple[str, str]],
                     where: Optional[DayFilter] = None) -> Dict[str, CorrelationResult]:
    results: Dict[str, CorrelationResult] = {}
    for name, (x_field, y_field) in pairs.items():
        res = correlate_fields(metrics, x_field, y_field, name=name, where=where)
        if res.n == 0:
            # No paired days at all: nothing to report for this pair
            continue
        results[name] = res
    return results


# ─── Named analyses ─────────────────────────────────────────

def analyze_symptom_weather_correlation(
        metrics: Sequence[DerivedDailyMetrics]) -> Union[CorrelationAnalysis, InsufficientData]:
    """Pressure and humidity against pain, stiffness and swelling."""
    if len(metrics) < MIN_DAYS_CORRELATION:
        return InsufficientData("symptom_weather", MIN_DAYS_CORRELATION, len(metrics))
    results = _correlate_pairs(metrics, WEATHER_PAIRS)
    log.info("   Weather: %d correlations over %d days", len(results), len(metrics))
    return CorrelationAnalysis("symptom_weather", results, len(metrics))


def analyze_symptom_sleep_correlation(
        metrics: Sequence[DerivedDailyMetrics]) -> Union[CorrelationAnalysis, InsufficientData]:
    """Sleep duration/quality/interruptions against pain, fatigue and stiffness."""
    if len(metrics) < MIN_DAYS_CORRELATION:
        return InsufficientData("symptom_sleep", MIN_DAYS_CORRELATION, len(metrics))
    results = _correlate_pairs(metrics, SLEEP_PAIRS)
    n_sleep = sum(1 for m in metrics if m.sleep_duration is not None or m.sleep_quality is not None)
    log.info("   Sleep: %d correlations over %d days with sleep data", len(results), n_sleep)
    return CorrelationAnalysis("symptom_sleep", results, n_sleep)


def analyze_symptom_medication_correlation(
        metrics: Sequence[DerivedDailyMetrics],
        n_medication_logs: int) -> Union[CorrelationAnalysis, InsufficientData]:
    """Daily adherence rate against pain, swelling and stiffness.

    Every symptom day takes part.  A day without a scheduled dose has an
    adherence rate of 0, both in the correlation and in the average.
    """
    if len(metrics) < MIN_DAYS_CORRELATION:
        return InsufficientData("symptom_medication", MIN_DAYS_CORRELATION, len(metrics))
    if n_medication_logs < MIN_MEDICATION_LOGS:
        return InsufficientData("symptom_medication", MIN_MEDICATION_LOGS,
                                n_medication_logs, unit="medication log entries")

    results = _correlate_pairs(metrics, MEDICATION_PAIRS)
    avg = sum(m.adherence_rate for m in metrics) / len(metrics)
    log.info("   Medication: %d correlations over %d days (%d with scheduled doses)",
             len(results), len(metrics), sum(1 for m in metrics if m.doses_scheduled > 0))
    return CorrelationAnalysis("symptom_medication", results, len(metrics), average_adherence=avg)
