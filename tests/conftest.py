# tests/conftest.py
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Repo root on sys.path so "qti_results.*" imports work when running pytest at repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

SAMPLES_ROOT = REPO_ROOT / "samples"


@pytest.fixture
def samples() -> Path:
    return SAMPLES_ROOT

@pytest.fixture
def roster_csv() -> Path:
    return SAMPLES_ROOT / "roster.csv"

@pytest.fixture
def assessment_test_xml() -> Path:
    return SAMPLES_ROOT / "assessment-test.qti.xml"
