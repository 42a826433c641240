# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from fleet_ingest.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """ingest:
  pickup_fallback: {lat: 52.52, lng: 13.405}
  drop_fallback: {lat: 52.5, lng: 13.4}
  default_capacity: 10
  warn_unclassified: true
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "ingest.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_xlsx(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write sheets (rows as lists, first row = header) with openpyxl."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def xlsx_factory(tmp_path: Path):
    def _factory(name: str, sheets: dict[str, list[list[object]]]) -> Path:
        return make_xlsx(tmp_path / name, sheets)
    return _factory


@pytest.fixture()
def orders_csv() -> bytes:
    return (
        "external_id,pickup_name,pickup_lat,pickup_lng,drop_name,drop_lat,drop_lng,priority,weight\n"
        "A-1,Restaurant A,19.0760,72.8777,Customer 1,19.0896,72.8656,2,1.2\n"
        "A-2,Restaurant B,19.0825,72.8751,Customer 2,19.0945,72.8712,1,0.8\n"
    ).encode("utf-8")
