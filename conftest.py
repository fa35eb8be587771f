"""Pytest configuration: in-repo src package on the path, quiet progress output."""
from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("MPLBACKEND", "Agg")

SRC_PATH = Path(__file__).resolve().parent / "src"
if SRC_PATH.exists():
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture(autouse=True)
def quiet_progress(monkeypatch):
    """Silence tqdm bars and status prints during tests."""
    monkeypatch.setenv("RTSHARE_VERBOSITY", "0")
