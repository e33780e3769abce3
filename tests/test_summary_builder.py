"""
Tests for the summary builder module.

Covers: build_concise_summary defaults, bullet selection and clipping.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from analytics.insights import Insight, Recommendation
from life_pattern_engine import LifePatternReport
from pipeline.summary_builder import build_concise_summary


def _make_report(insights=(), recommendations=(), data_count=60):
    return LifePatternReport(data_count=data_count, insights=list(insights),
                             recommendations=list(recommendations))


class TestBuildConciseSummary:

    def test_none_input_returns_defaults(self):
        result = build_concise_summary(None)
        assert "What changed" in result
        assert "Why it matters" in result
        assert "Next steps" in result
        assert "Insufficient data" in result

    def test_empty_report_mentions_day_count(self):
        result = build_concise_summary(_make_report(data_count=9))
        assert "Insufficient data" in result
        assert "9 days" in result

    def test_three_bullets(self):
        report = _make_report(
            [Insight("monthly_trend", "high", "Pain is worsening: 25.0% increasing month over month."),
             Insight("weather_pressure", "high", "Average pressure is lower on high-symptom days.")],
            [Recommendation("weather", "high", "Prepare for pressure changes", "Warm the joints.")],
        )
        lines = build_concise_summary(report).split("\n")
        assert len(lines) == 3
        assert lines[0] == "- What changed: Pain is worsening: 25.0% increasing month over month."
        assert lines[1] == "- Why it matters: Average pressure is lower on high-symptom days."
        assert lines[2] == "- Next steps: Prepare for pressure changes. Warm the joints."

    def test_highest_severity_wins(self):
        report = _make_report(
            [Insight("monthly_trend", "low", "Mood has been stable over recent months."),
             Insight("weekly_pattern", "high", "Pain peaks on Monday."),
             Insight("sleep_quality", "medium", "Moderate correlation: sleep.")],
            [Recommendation("weekly", "medium", "Go easier on Mondays", "Plan lighter days."),
             Recommendation("sleep", "high", "Improve sleep quality", "Keep a routine.")],
        )
        lines = build_concise_summary(report).split("\n")
        assert "Pain peaks on Monday." in lines[0]
        assert "sleep" in lines[1]
        assert "Improve sleep quality" in lines[2]

    def test_fallback_when_no_change_insight(self):
        report = _make_report([Insight("humidity", "medium", "Humidity goes with pain.")])
        lines = build_concise_summary(report).split("\n")
        assert "Humidity goes with pain." in lines[0]
        assert "No single factor" in lines[1]
        assert "Keep your current routine" in lines[2]

    def test_truncation_of_long_lines(self):
        report = _make_report([Insight("monthly_trend", "high", "Pain rose " + "x" * 500)])
        for line in build_concise_summary(report).split("\n"):
            assert len(line) <= 280
        assert build_concise_summary(report).split("\n")[0].endswith("...")
