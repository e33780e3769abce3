"""
Shared constants used across the analytics modules.
Single source of truth for symptom scales and the fixed
thresholds of the analyzers.
"""

# Symptom severity scales (0 = not recorded)
SYMPTOM_SCALES = {
    "pain":      (1, 5),
    "swelling":  (1, 5),
    "stiffness": (1, 5),
    "redness":   (1, 3),
    "warmth":    (1, 3),
}

# Sunday-first weekday mapping (0..6)
DAY_NAMES = [
    "Sunday", "Monday", "Tuesday", "Wednesday",
    "Thursday", "Friday", "Saturday",
]

# Correlation strength bands, applied to |r|
STRENGTH_STRONG = 0.7
STRENGTH_MODERATE = 0.5
STRENGTH_WEAK = 0.3

# Minimum day-records per analysis
MIN_DAYS_CORRELATION = 7
MIN_MEDICATION_LOGS = 7
MIN_DAYS_WEEKLY = 14
MIN_DAYS_TRIGGERS = 14
MIN_DAYS_TREND = 30

# Monthly trend
TREND_MONTHS = 3
TREND_STABLE_PCT = 10.0
TREND_ALERT_PCT = 20.0
TREND_METRICS = ["pain", "fatigue", "mood"]
# Metrics where a rising value is an improvement
HIGHER_IS_BETTER = {"mood"}

# Insight rules
INSIGHT_MIN_CORRELATION = 0.5
ADHERENCE_WARNING_RATE = 0.8
WEEKLY_SPREAD_MEDIUM = 1.0
WEEKLY_SPREAD_HIGH = 2.0
