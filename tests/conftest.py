from __future__ import annotations

import json
from pathlib import Path

import pytest

from sample_data import AREAS_CSV, POPDEN_CSV, POPDEN_JSON, TRAINS_JSON


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A dataset directory with areas.csv, one year-table CSV and two JSON files."""
    (tmp_path / "areas.csv").write_text(AREAS_CSV, encoding="utf-8")
    (tmp_path / "complete-popu1009-popden.csv").write_text(POPDEN_CSV, encoding="utf-8")
    (tmp_path / "popu1009.json").write_text(json.dumps(POPDEN_JSON), encoding="utf-8")
    (tmp_path / "tran0152.json").write_text(json.dumps(TRAINS_JSON), encoding="utf-8")
    return tmp_path
