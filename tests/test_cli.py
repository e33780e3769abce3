"""
Tests for the analyze_patterns command-line runner.
"""
import sys
import os
import json
from datetime import date, timedelta

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import analyze_patterns


def _write_journal(tmp_path, n=20, wrapped=False):
    records = []
    for i in range(n):
        d = date(2024, 3, 1) + timedelta(days=i)
        records.append({
            "date": d.isoformat(),
            "jointSymptoms": {"knees": {"pain": 1 + i % 4}},
            "environmental": {"pressure": 1015 - 3 * (i % 4)},
        })
    path = tmp_path / "records.json"
    path.write_text(json.dumps({"records": records} if wrapped else records), encoding="utf-8")
    return path


class TestCli:

    def test_prints_report(self, tmp_path, capsys):
        records = _write_journal(tmp_path)
        code = analyze_patterns.main(["--records", str(records), "--as-of", "2024-03-31"])
        assert code == 0
        out = json.loads(capsys.readouterr().out)
        assert out["data_count"] == 20
        assert out["correlations"]["pressure_pain"] == pytest.approx(-1.0)
        assert "summary" not in out

    def test_wrapped_records_and_summary(self, tmp_path, capsys):
        records = _write_journal(tmp_path, wrapped=True)
        code = analyze_patterns.main(["--records", str(records), "--summary"])
        assert code == 0
        out = json.loads(capsys.readouterr().out)
        assert out["summary"].startswith("- What changed:")

    def test_output_file_and_medications(self, tmp_path):
        records = _write_journal(tmp_path)
        meds = tmp_path / "meds.json"
        meds.write_text(json.dumps([
            {"date": (date(2024, 3, 1) + timedelta(days=i)).isoformat(),
             "medicationName": "mtx", "taken": i % 2}
            for i in range(20)
        ]), encoding="utf-8")
        target = tmp_path / "report.json"
        code = analyze_patterns.main(["--records", str(records), "--medications", str(meds),
                                      "--output", str(target)])
        assert code == 0
        out = json.loads(target.read_text(encoding="utf-8"))
        assert "adherence_pain" in out["correlations"]

    def test_missing_file_returns_error(self, tmp_path):
        assert analyze_patterns.main(["--records", str(tmp_path / "nope.json")]) == 1

    def test_invalid_json_shape_returns_error(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text(json.dumps({"rows": []}), encoding="utf-8")
        assert analyze_patterns.main(["--records", str(path)]) == 1

    def test_bad_record_date_returns_error(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text(json.dumps([{"date": "soon"}]), encoding="utf-8")
        assert analyze_patterns.main(["--records", str(path)]) == 1

    def test_bad_as_of_exits(self, tmp_path):
        records = _write_journal(tmp_path)
        with pytest.raises(SystemExit):
            analyze_patterns.main(["--records", str(records), "--as-of", "March"])
