"""
Life-Pattern Engine
===================
Runs every life-pattern analysis over a journal export and collects the
insights and recommendations they produce.

Pipeline:
  Step 0 - Aggregate:  DailyHealthRecord + MedicationLogEntry -> one
           DerivedDailyMetrics per day (overall symptoms, adherence).
  Step 1 - Correlations:  weather, sleep and medication factor pairs
           (Pearson r, strength band, p-value).
  Step 2 - Patterns:  weekday buckets, month-over-month trend,
           high/low-symptom cohort trigger detection.
  Step 3 - Formatting:  threshold rules -> Insight / Recommendation.

Every analysis runs independently.  One that lacks data returns
InsufficientData and the run is marked ``degraded``; one that raises is
logged, marked ``<analysis>:failed`` and the others still run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from analytics import insights as fmt
from analytics.aggregator import DerivedDailyMetrics, aggregate
from analytics.correlation import (
    CorrelationAnalysis,
    analyze_symptom_medication_correlation,
    analyze_symptom_sleep_correlation,
    analyze_symptom_weather_correlation,
)
from analytics.insights import Insight, Recommendation
from analytics.results import InsufficientData, is_insufficient
from analytics.trend import MonthlyTrend, monthly_trends
from analytics.triggers import TriggerDetection, TriggerFactor, detect_triggers
from analytics.weekly_pattern import WeeklyPattern, weekly_pattern
from config import AnalysisThresholds
from health_records import DailyHealthRecord, MedicationLogEntry

log = logging.getLogger("life_patterns")

CORRELATION_ANALYSES = ["symptom_weather", "symptom_sleep", "symptom_medication"]


@dataclass
class LifePatternReport:
    """Everything one engine run produced.

    Analyses that could not run hold an ``InsufficientData`` (not enough
    records) or ``None`` (the analysis raised) in place of their result.
    """
    data_count: int
    correlations: Dict[str, float] = field(default_factory=dict)
    correlation_details: Dict[str, Union[CorrelationAnalysis, InsufficientData, None]] = field(default_factory=dict)
    weekly_averages: Union[WeeklyPattern, InsufficientData, None] = None
    monthly_trend: Union[Dict[str, MonthlyTrend], InsufficientData, None] = None
    triggers: Union[TriggerDetection, InsufficientData, None] = None
    insights: List[Insight] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)
    analysis_status: str = "success"
    degraded_reasons: List[str] = field(default_factory=list)

    @property
    def trigger_factors(self) -> List[TriggerFactor]:
        if isinstance(self.triggers, TriggerDetection):
            return list(self.triggers.triggers)
        return []

    def to_dict(self) -> Dict[str, Any]:
        def _dump(value):
            if value is None:
                return None
            if isinstance(value, dict):
                return {k: _dump(v) for k, v in value.items()}
            return value.to_dict()

        return {
            "analysis_status": self.analysis_status,
            "degraded_reasons": list(self.degraded_reasons),
            "data_count": self.data_count,
            "correlations": {k: round(v, 4) for k, v in self.correlations.items()},
            "correlation_details": _dump(self.correlation_details),
            "weekly_averages": _dump(self.weekly_averages),
            "monthly_trend": _dump(self.monthly_trend),
            "triggers": _dump(self.triggers),
            "insights": [i.to_dict() for i in self.insights],
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


def _coerce(items, parse: Callable[[Mapping[str, Any]], Any], kind: type, label: str,
            optional: bool = False) -> list:
    if items is None and optional:
        return []
    if items is None or isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Sequence):
        raise TypeError(f"{label} must be a list, got {type(items).__name__}")
    out = []
    for item in items:
        if isinstance(item, kind):
            out.append(item)
        elif isinstance(item, Mapping):
            out.append(parse(item))
        else:
            raise TypeError(f"{label} entries must be {kind.__name__} or dict, "
                            f"got {type(item).__name__}")
    return out


class LifePatternEngine:
    """Orchestrates aggregation, every analyzer and the insight rules."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or AnalysisThresholds.from_env()

    # ─── MAIN ENTRY ─────────────────────────────────────────

    def analyze(self, records: Sequence[Union[DailyHealthRecord, Mapping[str, Any]]],
                medication_logs: Sequence[Union[MedicationLogEntry, Mapping[str, Any]]] = (),
                now: Optional[date] = None) -> LifePatternReport:
        """
        Run every analysis and return the collected report.

        Parameters
        ----------
        records : list
            DailyHealthRecord objects or raw journal dicts.
        medication_logs : list, optional
            MedicationLogEntry objects or raw dicts.
        now : date, optional
            Reference day for the monthly trend window (defaults to today).
        """
        records = _coerce(records, DailyHealthRecord.from_dict, DailyHealthRecord, "records")
        medication_logs = _coerce(medication_logs, MedicationLogEntry.from_dict,
                                  MedicationLogEntry, "medication_logs", optional=True)

        metrics = aggregate(records, medication_logs)
        report = LifePatternReport(data_count=len(metrics))

        self._run_correlations(report, metrics, len(medication_logs))
        report.weekly_averages = self._run(report, "weekly_pattern",
                                           lambda: weekly_pattern(metrics))
        report.monthly_trend = self._run(report, "monthly_trend",
                                         lambda: monthly_trends(metrics, now=now))
        report.triggers = self._run(report, "trigger_detection",
                                    lambda: detect_triggers(metrics, self.thresholds))

        self._collect_pattern_items(report)
        report.insights = fmt.by_severity(report.insights)
        report.recommendations = fmt.by_severity(report.recommendations)

        if report.degraded_reasons:
            log.warning("Life-pattern analysis status=%s (%s)",
                        report.analysis_status, ", ".join(report.degraded_reasons))
        self._log_digest(report, metrics)
        return report

    # ─── Steps ──────────────────────────────────────────────

    def _run(self, report: LifePatternReport, name: str, compute: Callable[[], Any]):
        """Run one analysis; record insufficient data or failure on the report."""
        try:
            result = compute()
        except Exception as e:
            log.exception("%s analysis failed; continuing in degraded mode: %s", name, e)
            report.analysis_status = "degraded"
            report.degraded_reasons.append(f"{name}:failed")
            return None
        if is_insufficient(result):
            log.info("   %s", result.message)
            report.analysis_status = "degraded"
            report.degraded_reasons.append(f"{name}:insufficient_data")
        return result

    def _run_correlations(self, report: LifePatternReport,
                          metrics: List[DerivedDailyMetrics], n_medication_logs: int):
        steps = {
            "symptom_weather": (
                lambda: analyze_symptom_weather_correlation(metrics),
                fmt.correlation_insights, fmt.weather_recommendations),
            "symptom_sleep": (
                lambda: analyze_symptom_sleep_correlation(metrics),
                fmt.correlation_insights, fmt.sleep_recommendations),
            "symptom_medication": (
                lambda: analyze_symptom_medication_correlation(metrics, n_medication_logs),
                fmt.medication_insights, fmt.medication_recommendations),
        }
        for name in CORRELATION_ANALYSES:
            compute, to_insights, to_recommendations = steps[name]
            result = self._run(report, name, compute)
            report.correlation_details[name] = result
            if not isinstance(result, CorrelationAnalysis):
                continue
            report.correlations.update(result.coefficients)
            report.insights.extend(to_insights(result))
            report.recommendations.extend(to_recommendations(result))

    def _collect_pattern_items(self, report: LifePatternReport):
        if isinstance(report.weekly_averages, WeeklyPattern):
            report.insights.extend(fmt.weekly_insights(report.weekly_averages))
            report.recommendations.extend(fmt.weekly_recommendations(report.weekly_averages))
        if isinstance(report.monthly_trend, dict):
            report.insights.extend(fmt.trend_insights(report.monthly_trend))
            report.recommendations.extend(fmt.trend_recommendations(report.monthly_trend))
        if isinstance(report.triggers, TriggerDetection):
            report.insights.extend(fmt.trigger_insights(report.triggers))
            report.recommendations.extend(fmt.trigger_recommendations(report.triggers))

    def _log_digest(self, report: LifePatternReport, metrics: List[DerivedDailyMetrics]):
        if metrics:
            span = f"{min(m.date for m in metrics)} -> {max(m.date for m in metrics)}"
        else:
            span = "no records"
        weekly = report.weekly_averages
        trend = report.monthly_trend
        log.info(
            "\n   LIFE-PATTERN DIGEST (%s, %d days)\n"
            "   Step 0 Aggregate        : %d days with scheduled doses\n"
            "   Step 1 Correlations     : %d coefficients\n"
            "   Step 2a Weekly pattern  : %s\n"
            "   Step 2b Monthly trend   : %s\n"
            "   Step 2c Triggers        : %d detected\n"
            "   Step 3 Formatting       : %d insights, %d recommendations\n"
            "   Status                  : %s",
            span,
            report.data_count,
            sum(1 for m in metrics if m.doses_scheduled),
            len(report.correlations),
            f"{weekly.data_count} days" if isinstance(weekly, WeeklyPattern) else "skipped",
            ", ".join(f"{k}={v.trend}" for k, v in trend.items()) if isinstance(trend, dict) else "skipped",
            len(report.trigger_factors),
            len(report.insights),
            len(report.recommendations),
            report.analysis_status,
        )
