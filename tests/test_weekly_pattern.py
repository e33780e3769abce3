"""
Tests for the day-of-week pattern analyzer.
"""
import sys
import os
from datetime import date, timedelta

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from analytics.aggregator import DerivedDailyMetrics, sunday_first_weekday
from analytics.results import InsufficientData
from analytics.weekly_pattern import weekly_pattern

SUNDAY = date(2024, 3, 3)


def _make_days(n, start=SUNDAY, step=1, pain=lambda d: 2.0, **kw):
    out = []
    for i in range(n):
        d = start + timedelta(days=i * step)
        dow = sunday_first_weekday(d)
        out.append(DerivedDailyMetrics(
            date=d, day_of_week=dow, overall_pain=pain(dow),
            overall_swelling=0.0, overall_stiffness=0.0, **kw))
    return out


class TestGating:

    def test_thirteen_records_insufficient(self):
        result = weekly_pattern(_make_days(13))
        assert isinstance(result, InsufficientData)
        assert result.required == 14
        assert result.available == 13
        assert result.to_dict()["insufficient_data"] is True

    def test_fourteen_records_run(self):
        result = weekly_pattern(_make_days(14))
        assert not isinstance(result, InsufficientData)
        assert result.data_count == 14


class TestBuckets:

    def test_sunday_first_buckets(self):
        result = weekly_pattern(_make_days(14, pain=lambda dow: float(dow)))
        assert result[0].day_name == "Sunday"
        assert result[6].day_name == "Saturday"
        for dow in range(7):
            assert result[dow].averages["pain"] == pytest.approx(dow)
            assert result[dow].data_count == 2

    def test_worst_and_best_day(self):
        result = weekly_pattern(_make_days(21, pain=lambda dow: 4.0 if dow == 1 else 1.5))
        assert result.worst_day("pain").day_name == "Monday"
        assert result.best_day("pain").day_name == "Sunday"

    def test_empty_bucket_is_zero_with_zero_count(self):
        # Every day lands on a Monday
        result = weekly_pattern(_make_days(14, start=SUNDAY + timedelta(days=1), step=7,
                                           pain=lambda dow: 3.0))
        assert result[1].averages["pain"] == 3.0
        assert result[1].data_count == 14
        assert result[0].averages["pain"] == 0.0
        assert result[0].data_count == 0
        assert result.worst_day("pain").day_of_week == 1

    def test_metric_average_skips_missing_values(self):
        days = _make_days(14, mood=None)
        days[0] = DerivedDailyMetrics(date=days[0].date, day_of_week=0, overall_pain=2.0,
                                      overall_swelling=0.0, overall_stiffness=0.0, mood=4.0)
        result = weekly_pattern(days)
        assert result[0].averages["mood"] == 4.0
        assert result[0].counts["mood"] == 1
        assert result[2].averages["mood"] == 0.0

    def test_to_dict_keyed_by_day_name(self):
        out = weekly_pattern(_make_days(14)).to_dict()
        assert list(out) == ["Sunday", "Monday", "Tuesday", "Wednesday",
                             "Thursday", "Friday", "Saturday"]
        assert out["Sunday"]["data_count"] == 2
