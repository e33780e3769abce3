"""
Shared test configuration.

Puts src/ on sys.path so the flat modules (health_records, config,
life_pattern_engine) and the analytics/ and pipeline/ packages import the
same way they do when the CLI runs from src/.

Also isolates every test from LIFE_PATTERN_* variables set in the shell or
a local .env file.
"""

import os
import sys

import pytest

_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_src_dir = os.path.join(_project_root, "src")

if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)


@pytest.fixture(autouse=True)
def _clean_threshold_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("LIFE_PATTERN_"):
            monkeypatch.delenv(key, raising=False)
