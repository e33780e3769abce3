"""Per-day derived metrics: the single table every analyzer reads from."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from health_records import DailyHealthRecord, JointSymptoms, MedicationLogEntry

log = logging.getLogger("life_patterns.aggregator")


@dataclass(frozen=True)
class DerivedDailyMetrics:
    """Scalars derived from one DailyHealthRecord.

    Symptom overalls are never ``None``: a day without joint data scores 0.
    Every other measurement is ``None`` when the record did not carry it.
    """
    date: date
    day_of_week: int  # Sunday=0 .. Saturday=6
    overall_pain: float
    overall_swelling: float
    overall_stiffness: float
    sleep_duration: Optional[float] = None
    sleep_quality: Optional[float] = None
    sleep_interruptions: Optional[float] = None
    morning_stiffness: Optional[float] = None
    fatigue_physical: Optional[float] = None
    fatigue_mental: Optional[float] = None
    mood: Optional[float] = None
    stress: Optional[float] = None
    pressure: Optional[float] = None
    humidity: Optional[float] = None
    temperature: Optional[float] = None
    adherence_rate: float = 0.0
    doses_scheduled: int = 0
    doses_taken: int = 0

    def get(self, name: str) -> Optional[float]:
        return getattr(self, name)


# Short metric names used by the weekly/monthly analyzers
METRIC_FIELDS = {
    "pain": "overall_pain",
    "swelling": "overall_swelling",
    "stiffness": "overall_stiffness",
    "fatigue": "fatigue_physical",
    "mood": "mood",
    "sleep_quality": "sleep_quality",
    "sleep_duration": "sleep_duration",
    "adherence": "adherence_rate",
}


def sunday_first_weekday(d: date) -> int:
    # date.weekday() is Monday=0
    return (d.weekday() + 1) % 7


def _overall(joints: Mapping[str, JointSymptoms], symptom: str) -> float:
    values = [getattr(s, symptom) for s in joints.values() if getattr(s, symptom) > 0]
    if not values:
        return 0.0
    return sum(values) / len(values)


def overall_pain(joints: Mapping[str, JointSymptoms]) -> float:
    """Mean pain over joints with a recorded (> 0) pain value, else 0."""
    return _overall(joints, "pain")


def overall_swelling(joints: Mapping[str, JointSymptoms]) -> float:
    return _overall(joints, "swelling")


def overall_stiffness(joints: Mapping[str, JointSymptoms]) -> float:
    return _overall(joints, "stiffness")


def adherence_for_day(entries: Sequence[MedicationLogEntry]) -> Tuple[int, int, float]:
    """Return (taken, scheduled, rate); rate is 0 when nothing was scheduled."""
    scheduled = len(entries)
    taken = sum(1 for e in entries if e.taken)
    rate = taken / scheduled if scheduled > 0 else 0.0
    return taken, scheduled, rate


def _doses_by_date(medication_logs: Iterable[MedicationLogEntry]) -> Dict[date, List[MedicationLogEntry]]:
    by_date: Dict[date, List[MedicationLogEntry]] = defaultdict(list)
    for entry in medication_logs:
        by_date[entry.date].append(entry)
    return by_date


def derive_day(record: DailyHealthRecord,
               doses: Sequence[MedicationLogEntry] = ()) -> DerivedDailyMetrics:
    joints = record.joint_symptoms
    sleep = record.general.sleep
    env = record.environmental
    taken, scheduled, rate = adherence_for_day(doses)
    return DerivedDailyMetrics(
        date=record.date,
        day_of_week=sunday_first_weekday(record.date),
        overall_pain=overall_pain(joints),
        overall_swelling=overall_swelling(joints),
        overall_stiffness=overall_stiffness(joints),
        sleep_duration=sleep.duration,
        sleep_quality=sleep.quality,
        sleep_interruptions=sleep.interruptions,
        morning_stiffness=sleep.morning_stiffness,
        fatigue_physical=record.general.fatigue.physical,
        fatigue_mental=record.general.fatigue.mental,
        mood=record.general.mood,
        stress=record.general.stress,
        pressure=env.pressure,
        humidity=env.humidity,
        temperature=env.temperature,
        adherence_rate=rate,
        doses_scheduled=scheduled,
        doses_taken=taken,
    )


def aggregate(records: Sequence[DailyHealthRecord],
              medication_logs: Iterable[MedicationLogEntry] = ()) -> List[DerivedDailyMetrics]:
    """One DerivedDailyMetrics per record, in input order."""
    if records is None or isinstance(records, (str, bytes, Mapping)):
        raise TypeError("records must be a sequence of DailyHealthRecord")
    by_date = _doses_by_date(medication_logs or ())
    out = [derive_day(r, by_date.get(r.date, ())) for r in records]
    log.debug("Aggregated %d day-records (%d with scheduled doses)",
              len(out), sum(1 for m in out if m.doses_scheduled))
    return out


def to_frame(metrics: Sequence[DerivedDailyMetrics]) -> pd.DataFrame:
    """DataFrame with one row per day; ``None`` becomes NaN."""
    columns = list(DerivedDailyMetrics.__dataclass_fields__)
    if not metrics:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame([asdict(m) for m in metrics], columns=columns)
    df["date"] = pd.to_datetime(df["date"])
    numeric = [c for c in columns if c not in ("date", "day_of_week")]
    df[numeric] = df[numeric].apply(pd.to_numeric, errors="coerce")
    return df
