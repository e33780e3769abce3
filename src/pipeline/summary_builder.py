"""Helpers for building a concise life-pattern summary for UI cards."""

from __future__ import annotations

from analytics.insights import by_severity

CHANGE_TYPES = ("monthly_trend", "weekly_pattern", "adherence_warning")
TRIGGER_TYPES = ("weather_pressure", "sleep_duration", "day_of_week")


def _clip(s: str, limit: int = 260) -> str:
    s = s.replace("\n", " ").strip()
    if len(s) <= limit:
        return s
    return s[: limit - 3].rstrip() + "..."


def _bullet(label: str, value: str) -> str:
    prefix = f"- {label}: "
    allowed = max(48, 280 - len(prefix))
    return prefix + _clip(value, allowed)


def build_concise_summary(report) -> str:
    """Create a strict 3-bullet summary from a LifePatternReport.

    What changed   -> highest-severity trend / weekly / adherence insight
    Why it matters -> highest-severity trigger, else the strongest remaining insight
    Next steps     -> highest-priority recommendation
    """
    if report is None or not (report.insights or report.recommendations):
        n = getattr(report, "data_count", 0)
        return (
            f"- What changed: Insufficient data in this run ({n} days recorded).\n"
            "- Why it matters: Patterns only become reliable after a few weeks of entries.\n"
            "- Next steps: Keep logging symptoms, sleep and medication daily."
        )

    insights = by_severity(report.insights)
    used = set()

    def first(types=None):
        for i, item in enumerate(insights):
            if i in used:
                continue
            if types is None or item.type in types:
                used.add(i)
                return item.message
        return ""

    what_changed = first(CHANGE_TYPES) or first()
    why_it_matters = first(TRIGGER_TYPES) or first()

    recs = by_severity(report.recommendations)
    next_steps = f"{recs[0].title}. {recs[0].message}" if recs else ""

    what_changed = what_changed or "No clear change in symptoms over recent months."
    why_it_matters = why_it_matters or "No single factor stands out against symptom days yet."
    next_steps = next_steps or "Keep your current routine and keep logging daily."

    return (
        f"{_bullet('What changed', what_changed)}\n"
        f"{_bullet('Why it matters', why_it_matters)}\n"
        f"{_bullet('Next steps', next_steps)}"
    )
