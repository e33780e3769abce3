"""
Life-Pattern Analysis: command-line runner
==========================================
Reads a journal export (daily health records + medication logs) and
prints the life-pattern report as JSON.

Usage:
    python analyze_patterns.py --records records.json
    python analyze_patterns.py --records records.json --medications meds.json
    python analyze_patterns.py --records records.json --as-of 2024-03-31 --summary
    python analyze_patterns.py --records records.json --output report.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger("analyze_patterns")

from config import AnalysisThresholds
from health_records import load_medication_logs, load_records
from life_pattern_engine import LifePatternEngine
from pipeline.summary_builder import build_concise_summary


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}") from None


def read_json_list(path: str, *keys: str) -> list:
    """Load a JSON list, or the first list found under ``keys`` of a JSON object."""
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        for key in keys:
            if isinstance(data.get(key), list):
                return data[key]
        raise ValueError(f"{path}: expected a list or an object with one of {', '.join(keys)}")
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list, got {type(data).__name__}")
    return data


def run(records_path: str, medications_path: str = None, as_of: date = None,
        output_path: str = None, summary: bool = False) -> int:
    try:
        records = load_records(read_json_list(records_path, "records", "entries"))
        meds = []
        if medications_path:
            meds = load_medication_logs(
                read_json_list(medications_path, "medication_logs", "medications", "logs"))
    except (OSError, ValueError, TypeError) as e:
        log.error("Could not load input: %s", e)
        return 1

    log.info("Loaded %d records, %d medication log entries", len(records), len(meds))
    engine = LifePatternEngine(AnalysisThresholds.from_env())
    report = engine.analyze(records, meds, now=as_of)

    payload = report.to_dict()
    if summary:
        payload["summary"] = build_concise_summary(report)
    text = json.dumps(payload, indent=2, ensure_ascii=False, default=str)

    if output_path:
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(text + "\n")
        log.info("Report written to %s (status=%s)", output_path, report.analysis_status)
    else:
        print(text)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Life-pattern analysis for arthritis journal exports"
    )
    parser.add_argument("--records", required=True,
                        help="JSON file with daily health records")
    parser.add_argument("--medications",
                        help="JSON file with medication log entries")
    parser.add_argument("--as-of", type=_iso_date, default=None,
                        help="Reference date for the monthly trend (default: today)")
    parser.add_argument("--output",
                        help="Write the report here instead of stdout")
    parser.add_argument("--summary", action="store_true",
                        help="Add a 3-bullet text summary to the report")
    args = parser.parse_args(argv)

    return run(args.records, args.medications, args.as_of, args.output, args.summary)


if __name__ == "__main__":
    sys.exit(main())
