# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from order_grid.logging.init import reset_logging
from order_grid.models.row import RowIdFactory
from order_grid.services.dispatcher import OrderGrid


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("ORDER_GRID_API_URL", raising=False)
        monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def ids() -> RowIdFactory:
    return RowIdFactory()


@pytest.fixture()
def grid() -> OrderGrid:
    """Fresh grid with one default row."""
    return OrderGrid()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """history_depth: 50
defaults:
  payment_type: CIF
  carrying_basis: AIR
strict_numeric_text: false
export_filename: order-items.csv
api:
  base_url: http://api.example.test
  timeout_seconds: 5
save:
  mode: postgres
  table: order_items
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "grid.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_csv() -> str:
    return (
        "Item Code,Description,Quantity,Unit Price,Total Price,Supplier,Payment,"
        "Carrying Basis,Unit Weight (kg),Unit CBM,HS Code,Image,Notes\n"
        "A-100,Steel bolts,10,2.50,999,Acme,CIF,SEA,0.1,0.001,7318.15,img/a.jpg,first\n"
        "B-200,Copper wire,3,12,,Wirecorp,FOB,AIR,1.5,0.02,7408.11,,\n"
        ",,5,1,,,,,,,,,\n"
    )


@pytest.fixture()
def write_csv(temp_workdir: Path, sample_csv: str) -> Path:
    p = temp_workdir / "data" / "order.csv"
    p.write_text(sample_csv, encoding="utf-8")
    return p
