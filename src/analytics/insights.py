"""
Insight & recommendation formatting.

Pure mapping from analyzer results to human-readable value objects.  Every
result that crosses its documented threshold produces exactly one item;
nothing below threshold produces anything.

Rules
-----
  correlations   |r| >= 0.5               -> insight (high if |r| >= 0.7)
  pressure_pain  |r| >= 0.5               -> high recommendation
  humidity_pain  |r| >= 0.5               -> medium recommendation
  quality_pain   r <= -0.5                -> high recommendation
  adherence_pain r <= -0.5                -> high recommendation
  avg adherence  < 80 %                   -> medium insight + recommendation
  weekday spread >= 1.0 pain points       -> insight (high if >= 2.0) + recommendation
  monthly trend  >= 2 months of data      -> insight; worsening > 20 % -> high recommendation
  trigger        every detected trigger   -> insight + recommendation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from analytics.correlation import CorrelationAnalysis, CorrelationResult
from analytics.trend import MonthlyTrend
from analytics.triggers import TriggerDetection, TriggerFactor
from analytics.weekly_pattern import WeeklyPattern
from constants import (
    ADHERENCE_WARNING_RATE,
    HIGHER_IS_BETTER,
    INSIGHT_MIN_CORRELATION,
    STRENGTH_STRONG,
    TREND_ALERT_PCT,
    WEEKLY_SPREAD_HIGH,
    WEEKLY_SPREAD_MEDIUM,
)

SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}


@dataclass(frozen=True)
class Insight:
    type: str
    severity: str  # high | medium | low
    message: str
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "severity": self.severity,
                "message": self.message, "evidence": dict(self.evidence)}


@dataclass(frozen=True)
class Recommendation:
    type: str
    priority: str  # high | medium | low
    title: str
    message: str
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "priority": self.priority, "title": self.title,
                "message": self.message, "evidence": dict(self.evidence)}


# correlation name -> (insight type, x label, y label)
CORRELATION_LABELS = {
    "pressure_pain":           ("weather_pressure", "barometric pressure", "pain"),
    "pressure_stiffness":      ("weather_pressure", "barometric pressure", "stiffness"),
    "humidity_pain":           ("weather_humidity", "humidity", "pain"),
    "humidity_swelling":       ("weather_humidity", "humidity", "swelling"),
    "duration_pain":           ("sleep_duration", "sleep duration", "pain"),
    "quality_pain":            ("sleep_quality", "sleep quality", "pain"),
    "quality_fatigue":         ("sleep_quality", "sleep quality", "physical fatigue"),
    "interruptions_stiffness": ("sleep_interruptions", "night waking", "morning stiffness"),
    "adherence_pain":          ("medication_adherence", "medication adherence", "pain"),
    "adherence_swelling":      ("medication_inflammation", "medication adherence", "swelling"),
    "adherence_stiffness":     ("medication_adherence", "medication adherence", "stiffness"),
}

TREND_LABELS = {"pain": "Pain", "fatigue": "Fatigue", "mood": "Mood"}

TRIGGER_ADVICE = {
    "weather_pressure": "Check the pressure forecast and start warming and stretching "
                        "routines before pressure changes arrive.",
    "sleep_duration": "Keep a regular sleep schedule and protect enough hours of sleep.",
    "day_of_week": "Plan lighter activities and preventive care on {day}s.",
}


def by_severity(items):
    """Stable sort: high first, then medium, then low."""
    def rank(item):
        level = getattr(item, "severity", None) or getattr(item, "priority", "low")
        return SEVERITY_ORDER.get(level, len(SEVERITY_ORDER))
    return sorted(items, key=rank)


# ─── Correlations ───────────────────────────────────────────

def _correlation_insight(res: CorrelationResult) -> Insight:
    insight_type, x_label, y_label = CORRELATION_LABELS.get(
        res.name, (res.name, res.x_field, res.y_field))
    r = res.coefficient
    if r < 0:
        relation = f"higher {x_label} goes with lower {y_label}"
    else:
        relation = f"higher {x_label} goes with higher {y_label}"
    return Insight(
        type=insight_type,
        severity="high" if abs(r) >= STRENGTH_STRONG else "medium",
        message=f"{res.strength.capitalize()} correlation: {relation} "
                f"(r={r:+.2f} over {res.n} days).",
        evidence={"correlation": res.name, "r": round(r, 4),
                  "strength": res.strength, "n": res.n},
    )


def correlation_insights(analysis: CorrelationAnalysis) -> List[Insight]:
    return [_correlation_insight(res) for res in analysis.results.values()
            if abs(res.coefficient) >= INSIGHT_MIN_CORRELATION]


def _coef(analysis: CorrelationAnalysis, name: str):
    res = analysis.results.get(name)
    return None if res is None else res.coefficient


def weather_recommendations(analysis: CorrelationAnalysis) -> List[Recommendation]:
    recs: List[Recommendation] = []
    r = _coef(analysis, "pressure_pain")
    if r is not None and abs(r) >= INSIGHT_MIN_CORRELATION:
        falling = "falls" if r < 0 else "rises"
        recs.append(Recommendation(
            type="weather",
            priority="high",
            title="Prepare for pressure changes",
            message=f"Pain tends to rise when pressure {falling}. Warm the joints "
                    f"and do gentle stretching ahead of forecast pressure changes.",
            evidence={"pressure_pain": round(r, 4)},
        ))
    r = _coef(analysis, "humidity_pain")
    if r is not None and abs(r) >= INSIGHT_MIN_CORRELATION:
        recs.append(Recommendation(
            type="weather",
            priority="medium",
            title="Watch humid days" if r > 0 else "Watch dry days",
            message="Pain follows humidity in your log. Keep joints warm and "
                    "consider indoor humidity control.",
            evidence={"humidity_pain": round(r, 4)},
        ))
    return recs


def sleep_recommendations(analysis: CorrelationAnalysis) -> List[Recommendation]:
    r = _coef(analysis, "quality_pain")
    if r is None or r > -INSIGHT_MIN_CORRELATION:
        return []
    return [Recommendation(
        type="sleep",
        priority="high",
        title="Improve sleep quality",
        message="Better sleep goes with less pain. A regular sleep routine may "
                "help reduce symptoms.",
        evidence={"quality_pain": round(r, 4)},
    )]


def medication_insights(analysis: CorrelationAnalysis) -> List[Insight]:
    insights = correlation_insights(analysis)
    avg = analysis.average_adherence
    if avg is not None and avg < ADHERENCE_WARNING_RATE:
        insights.append(Insight(
            type="adherence_warning",
            severity="medium",
            message=f"Medication adherence is low at {avg * 100:.1f}% of scheduled doses.",
            evidence={"average_adherence": round(avg, 4)},
        ))
    return insights


def medication_recommendations(analysis: CorrelationAnalysis) -> List[Recommendation]:
    recs: List[Recommendation] = []
    r = _coef(analysis, "adherence_pain")
    if r is not None and r <= -INSIGHT_MIN_CORRELATION:
        recs.append(Recommendation(
            type="medication",
            priority="high",
            title="Keep taking doses on schedule",
            message="Days with full adherence show less pain. Keep to the "
                    "prescribed schedule.",
            evidence={"adherence_pain": round(r, 4)},
        ))
    avg = analysis.average_adherence
    if avg is not None and avg < ADHERENCE_WARNING_RATE:
        recs.append(Recommendation(
            type="medication",
            priority="medium",
            title="Set dose reminders",
            message="Several scheduled doses were missed. Reminders or a pill "
                    "organiser can help; talk to your doctor if doses are hard to keep.",
            evidence={"average_adherence": round(avg, 4)},
        ))
    return recs


# ─── Weekly pattern ─────────────────────────────────────────

def _weekly_spread(pattern: WeeklyPattern):
    worst = pattern.worst_day("pain")
    best = pattern.best_day("pain")
    if worst is None or best is None or worst.day_of_week == best.day_of_week:
        return None
    return worst, best, worst.averages["pain"] - best.averages["pain"]


def weekly_insights(pattern: WeeklyPattern) -> List[Insight]:
    spread = _weekly_spread(pattern)
    if spread is None or spread[2] < WEEKLY_SPREAD_MEDIUM:
        return []
    worst, best, gap = spread
    return [Insight(
        type="weekly_pattern",
        severity="high" if gap >= WEEKLY_SPREAD_HIGH else "medium",
        message=f"Pain peaks on {worst.day_name} (avg {worst.averages['pain']:.1f}) "
                f"and is lowest on {best.day_name} (avg {best.averages['pain']:.1f}).",
        evidence={"worst_day": worst.day_name, "best_day": best.day_name,
                  "difference": round(gap, 3)},
    )]


def weekly_recommendations(pattern: WeeklyPattern) -> List[Recommendation]:
    spread = _weekly_spread(pattern)
    if spread is None or spread[2] < WEEKLY_SPREAD_MEDIUM:
        return []
    worst, _, gap = spread
    return [Recommendation(
        type="weekly",
        priority="medium",
        title=f"Go easier on {worst.day_name}s",
        message=f"Look at what usually happens before {worst.day_name} and schedule "
                f"lighter activities on that day.",
        evidence={"worst_day": worst.day_name, "difference": round(gap, 3)},
    )]


# ─── Monthly trend ──────────────────────────────────────────

def is_worsening(metric: str, trend: str) -> bool:
    if trend == "stable":
        return False
    if metric in HIGHER_IS_BETTER:
        return trend == "decreasing"
    return trend == "increasing"


def trend_insights(trends: Mapping[str, MonthlyTrend]) -> List[Insight]:
    insights: List[Insight] = []
    for metric, t in trends.items():
        if not t.has_comparison:
            continue
        label = TREND_LABELS.get(metric, metric)
        rate = abs(t.change_rate_percent)
        worsening = is_worsening(metric, t.trend)
        if t.trend == "stable":
            message = f"{label} has been stable over recent months."
        elif worsening:
            message = f"{label} is worsening: {rate:.1f}% {t.trend} month over month."
        else:
            message = f"{label} is improving: {rate:.1f}% {t.trend} month over month."
        if worsening:
            severity = "high" if rate > TREND_ALERT_PCT else "medium"
        else:
            severity = "low"
        insights.append(Insight(
            type="monthly_trend",
            severity=severity,
            message=message,
            evidence={"metric": metric, "trend": t.trend,
                      "change_rate": round(t.change_rate_percent, 2)},
        ))
    return insights


def trend_recommendations(trends: Mapping[str, MonthlyTrend]) -> List[Recommendation]:
    recs: List[Recommendation] = []
    for metric, t in trends.items():
        if not t.has_comparison or not is_worsening(metric, t.trend):
            continue
        if abs(t.change_rate_percent) <= TREND_ALERT_PCT:
            continue
        label = TREND_LABELS.get(metric, metric)
        recs.append(Recommendation(
            type="trend",
            priority="high",
            title=f"{label} is getting worse",
            message=f"{label} changed {t.change_rate_percent:+.1f}% over recent months. "
                    f"Consider discussing it with your doctor.",
            evidence={"metric": metric, "change_rate": round(t.change_rate_percent, 2)},
        ))
    return recs


# ─── Triggers ───────────────────────────────────────────────

def trigger_advice(trigger: TriggerFactor) -> str:
    template = TRIGGER_ADVICE.get(trigger.type, "Discuss suitable countermeasures with your doctor.")
    return template.format(day=trigger.problematic_day or "that day")


def trigger_insights(detection: TriggerDetection) -> List[Insight]:
    return [Insight(
        type=t.type,
        severity=t.severity,
        message=t.description,
        evidence={k: v for k, v in t.to_dict().items() if k not in ("type", "severity", "description")},
    ) for t in detection.triggers]


def trigger_recommendations(detection: TriggerDetection) -> List[Recommendation]:
    return [Recommendation(
        type="trigger",
        priority=t.severity,
        title=f"Counter {t.factor}",
        message=trigger_advice(t),
        evidence={"trigger": t.type},
    ) for t in detection.triggers]
