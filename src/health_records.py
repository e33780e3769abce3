"""
Input data models for the life-pattern analytics.

The journaling app exports one detailed symptom log per day plus one
medication log entry per scheduled dose.  These dataclasses hold that data
with every optional measurement typed as ``Optional`` so that consumers have
to check for ``None`` before aggregating.

Both the app's camelCase export (``jointSymptoms``, ``generalSymptoms``) and
snake_case keys are accepted by the ``from_dict`` constructors.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from constants import SYMPTOM_SCALES


# ─── Type coercion ──────────────────────────────────────────

def _num(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def _positive(value: Any) -> Optional[float]:
    """Numeric value on a scale starting at 1; 0 means "not recorded"."""
    v = _num(value)
    if v is None or v <= 0:
        return None
    return v


def _level(value: Any, symptom: str) -> int:
    """Joint severity as int clamped to the symptom scale, 0 for unset or unparseable."""
    v = _num(value)
    if v is None or v < 0:
        return 0
    _, top = SYMPTOM_SCALES[symptom]
    return min(int(round(v)), top)


def _int_or_none(value: Any) -> Optional[int]:
    v = _num(value)
    return None if v is None else int(round(v))


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw.get(key)
    return None


def parse_date(value: Any) -> date:
    """Parse ISO dates (``YYYY-MM-DD`` or a full timestamp)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
    raise ValueError(f"Invalid record date: {value!r}")


# ─── Records ────────────────────────────────────────────────

@dataclass(frozen=True)
class JointSymptoms:
    """Per-joint severities; 0 = not recorded."""
    pain: int = 0
    swelling: int = 0
    stiffness: int = 0
    redness: int = 0
    warmth: int = 0

    @classmethod
    def from_dict(cls, raw: Any) -> "JointSymptoms":
        raw = _mapping(raw)
        return cls(
            pain=_level(raw.get("pain"), "pain"),
            swelling=_level(raw.get("swelling"), "swelling"),
            stiffness=_level(raw.get("stiffness"), "stiffness"),
            redness=_level(raw.get("redness"), "redness"),
            warmth=_level(raw.get("warmth"), "warmth"),
        )


@dataclass(frozen=True)
class SleepMetrics:
    duration: Optional[float] = None       # hours
    quality: Optional[int] = None          # 1..5
    interruptions: Optional[int] = None    # 0..10, 0 is a real value
    morning_stiffness: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "SleepMetrics":
        raw = _mapping(raw)
        quality = _positive(raw.get("quality"))
        stiffness = _positive(_pick(raw, "morning_stiffness", "morningStiffness"))
        return cls(
            duration=_positive(raw.get("duration")),
            quality=None if quality is None else int(round(quality)),
            interruptions=_int_or_none(raw.get("interruptions")),
            morning_stiffness=None if stiffness is None else int(round(stiffness)),
        )


@dataclass(frozen=True)
class FatigueLevels:
    physical: Optional[float] = None
    mental: Optional[float] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "FatigueLevels":
        raw = _mapping(raw)
        return cls(
            physical=_positive(raw.get("physical")),
            mental=_positive(raw.get("mental")),
        )


@dataclass(frozen=True)
class GeneralSymptoms:
    fatigue: FatigueLevels = field(default_factory=FatigueLevels)
    sleep: SleepMetrics = field(default_factory=SleepMetrics)
    mood: Optional[float] = None
    stress: Optional[float] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "GeneralSymptoms":
        raw = _mapping(raw)
        mood = raw.get("mood")
        # Some exports nest mood as {"overall": n}
        if isinstance(mood, Mapping):
            mood = mood.get("overall")
        return cls(
            fatigue=FatigueLevels.from_dict(raw.get("fatigue")),
            sleep=SleepMetrics.from_dict(raw.get("sleep")),
            mood=_positive(mood),
            stress=_positive(raw.get("stress")),
        )


@dataclass(frozen=True)
class EnvironmentalSample:
    pressure: Optional[float] = None     # hPa
    humidity: Optional[float] = None     # percent
    temperature: Optional[float] = None  # degrees C

    @classmethod
    def from_dict(cls, raw: Any) -> "EnvironmentalSample":
        raw = _mapping(raw)
        return cls(
            pressure=_positive(raw.get("pressure")),
            humidity=_positive(raw.get("humidity")),
            temperature=_num(raw.get("temperature")),
        )


@dataclass(frozen=True)
class DailyHealthRecord:
    """One calendar day of journaled symptoms and environment."""
    date: date
    joint_symptoms: Dict[str, JointSymptoms] = field(default_factory=dict)
    general: GeneralSymptoms = field(default_factory=GeneralSymptoms)
    environmental: EnvironmentalSample = field(default_factory=EnvironmentalSample)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DailyHealthRecord":
        if not isinstance(raw, Mapping):
            raise TypeError(f"Record must be a mapping, got {type(raw).__name__}")
        joints_raw = _mapping(_pick(raw, "jointSymptoms", "joint_symptoms"))
        return cls(
            date=parse_date(raw.get("date")),
            joint_symptoms={
                str(joint): JointSymptoms.from_dict(levels)
                for joint, levels in joints_raw.items()
            },
            general=GeneralSymptoms.from_dict(_pick(raw, "generalSymptoms", "general_symptoms", "general")),
            environmental=EnvironmentalSample.from_dict(raw.get("environmental")),
        )


@dataclass(frozen=True)
class MedicationLogEntry:
    """One scheduled dose and whether it was taken."""
    date: date
    medication_name: str
    taken: bool
    scheduled_time: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MedicationLogEntry":
        if not isinstance(raw, Mapping):
            raise TypeError(f"Medication log must be a mapping, got {type(raw).__name__}")
        taken = raw.get("taken")
        return cls(
            date=parse_date(raw.get("date")),
            medication_name=str(_pick(raw, "medication_name", "medicationName", "name") or ""),
            taken=taken is True or _num(taken) == 1,
            scheduled_time=_pick(raw, "scheduled_time", "scheduledTime"),
        )


def load_records(items: Iterable[Mapping[str, Any]]) -> List[DailyHealthRecord]:
    return [DailyHealthRecord.from_dict(item) for item in items]


def load_medication_logs(items: Iterable[Mapping[str, Any]]) -> List[MedicationLogEntry]:
    return [MedicationLogEntry.from_dict(item) for item in items]
