"""Analysis thresholds loaded from .env

The trigger-detection cut-offs have no clinical validation behind them, so
they are exposed as configuration instead of being baked into the detector.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

from dotenv import load_dotenv

load_dotenv()

ENV_PREFIX = "LIFE_PATTERN_"


@dataclass(frozen=True)
class AnalysisThresholds:
    """Cut-offs used by the trigger detector.

    ``pain_percentile``     percentile of overall pain that opens the high cohort
    ``pressure_gap_hpa``    mean pressure gap between cohorts to flag a trigger
    ``sleep_gap_hours``     mean sleep-duration gap between cohorts
    ``weekday_share``       share of high days on one weekday to flag it
    ``weekday_share_high``  share above which the weekday trigger is ``high``
    ``min_cohort_days``     days with data required in each cohort per factor

    A gap above twice its threshold is reported with ``high`` severity.
    """

    pain_percentile: float = 75.0
    pressure_gap_hpa: float = 5.0
    sleep_gap_hours: float = 1.0
    weekday_share: float = 0.30
    weekday_share_high: float = 0.50
    min_cohort_days: int = 3

    def __post_init__(self):
        if not 0 < self.pain_percentile <= 100:
            raise ValueError(f"pain_percentile must be in (0, 100], got {self.pain_percentile}")
        for name in ("pressure_gap_hpa", "sleep_gap_hours"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if not 0 < self.weekday_share <= self.weekday_share_high <= 1:
            raise ValueError("weekday shares must satisfy 0 < share <= share_high <= 1")
        if self.min_cohort_days < 1:
            raise ValueError("min_cohort_days must be at least 1")

    @classmethod
    def from_env(cls) -> "AnalysisThresholds":
        """Build thresholds from LIFE_PATTERN_* variables, defaults otherwise.

        e.g. LIFE_PATTERN_PRESSURE_GAP_HPA=4.5
        """
        overrides = {}
        for f in fields(cls):
            raw = os.getenv(ENV_PREFIX + f.name.upper())
            if raw is None or not raw.strip():
                continue
            caster = int if f.type in (int, "int") else float
            try:
                overrides[f.name] = caster(raw.strip())
            except ValueError:
                raise ValueError(
                    f"{ENV_PREFIX + f.name.upper()}={raw!r} is not a valid {caster.__name__}"
                ) from None
        return cls(**overrides)


DEFAULT_THRESHOLDS = AnalysisThresholds()
