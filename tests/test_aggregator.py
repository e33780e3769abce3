"""
Tests for the record aggregator.

Covers: overall symptom means, the zero collapse, Sunday-first weekdays,
medication adherence per day and the DataFrame view.
"""
import sys
import os
from datetime import date

import pandas as pd
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from analytics.aggregator import (
    adherence_for_day,
    aggregate,
    overall_pain,
    overall_stiffness,
    overall_swelling,
    sunday_first_weekday,
    to_frame,
)
from health_records import (
    DailyHealthRecord,
    EnvironmentalSample,
    JointSymptoms,
    MedicationLogEntry,
)


def _make_record(day, joints=None, **env):
    return DailyHealthRecord(
        date=day,
        joint_symptoms=joints or {},
        environmental=EnvironmentalSample(**env),
    )


# ─── Overall symptoms ─────────────────────────────────────────


class TestOverallSymptoms:

    def test_mean_over_recorded_joints(self):
        joints = {
            "knees": JointSymptoms(pain=4, swelling=2),
            "wrists": JointSymptoms(pain=2),
            "hips": JointSymptoms(),
        }
        assert overall_pain(joints) == pytest.approx(3.0)
        assert overall_swelling(joints) == pytest.approx(2.0)

    def test_zero_collapse(self):
        """All-zero joints and no joints both score exactly 0."""
        assert overall_pain({"knees": JointSymptoms(), "hips": JointSymptoms()}) == 0.0
        assert overall_pain({}) == 0.0
        assert overall_stiffness({}) == 0.0

    def test_symptoms_are_independent(self):
        joints = {"knees": JointSymptoms(pain=0, stiffness=5), "ankles": JointSymptoms(pain=3)}
        assert overall_pain(joints) == 3.0
        assert overall_stiffness(joints) == 5.0
        assert overall_swelling(joints) == 0.0


# ─── Weekday mapping ──────────────────────────────────────────


class TestWeekday:

    def test_sunday_is_zero(self):
        assert sunday_first_weekday(date(2024, 3, 3)) == 0   # Sunday
        assert sunday_first_weekday(date(2024, 3, 4)) == 1   # Monday
        assert sunday_first_weekday(date(2024, 3, 9)) == 6   # Saturday


# ─── Adherence ────────────────────────────────────────────────


class TestAdherence:

    @staticmethod
    def _make_dose(taken, day=date(2024, 3, 4)):
        return MedicationLogEntry(date=day, medication_name="mtx", taken=taken)

    def test_rate(self):
        taken, scheduled, rate = adherence_for_day(
            [self._make_dose(True), self._make_dose(False), self._make_dose(True), self._make_dose(True)])
        assert (taken, scheduled) == (3, 4)
        assert rate == pytest.approx(0.75)

    def test_nothing_scheduled_is_zero(self):
        assert adherence_for_day([]) == (0, 0, 0.0)

    def test_aggregate_joins_doses_by_date(self):
        recs = [_make_record(date(2024, 3, 4)), _make_record(date(2024, 3, 5))]
        doses = [self._make_dose(True), self._make_dose(False)]
        out = aggregate(recs, doses)
        assert out[0].doses_scheduled == 2
        assert out[0].adherence_rate == pytest.approx(0.5)
        assert out[1].doses_scheduled == 0
        assert out[1].adherence_rate == 0.0


# ─── aggregate / to_frame ─────────────────────────────────────


class TestAggregate:

    def test_one_entry_per_record_in_order(self):
        recs = [_make_record(date(2024, 3, d)) for d in (5, 3, 4)]
        out = aggregate(recs)
        assert [m.date.day for m in out] == [5, 3, 4]

    def test_optional_fields_pass_through_as_none(self):
        out = aggregate([_make_record(date(2024, 3, 4), pressure=1012.0)])
        m = out[0]
        assert m.pressure == 1012.0
        assert m.humidity is None
        assert m.sleep_duration is None
        assert m.mood is None
        assert m.overall_pain == 0.0

    @pytest.mark.parametrize("bad", [None, "records", {"date": "2024-03-04"}])
    def test_non_sequence_raises(self, bad):
        with pytest.raises(TypeError):
            aggregate(bad)

    def test_empty_input(self):
        assert aggregate([]) == []
        assert to_frame([]).empty

    def test_to_frame_none_becomes_nan(self):
        out = aggregate([
            _make_record(date(2024, 3, 4), {"knees": JointSymptoms(pain=3)}, pressure=1010.0),
            _make_record(date(2024, 3, 5), {"knees": JointSymptoms(pain=1)}),
        ])
        df = to_frame(out)
        assert len(df) == 2
        assert pd.api.types.is_datetime64_any_dtype(df["date"])
        assert df["pressure"].isna().tolist() == [False, True]
        assert df["overall_pain"].tolist() == [3.0, 1.0]
