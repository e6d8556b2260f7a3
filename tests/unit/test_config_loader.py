from __future__ import annotations

from pathlib import Path

import pytest

from order_grid.config.loader import ConfigError, config_from_dict, load_config
from order_grid.models.row import CarryingBasis, PaymentType


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.history_depth == 50
    assert cfg.default_payment_type is PaymentType.CIF
    assert cfg.default_carrying_basis is CarryingBasis.AIR
    assert cfg.api.base_url == "http://api.example.test"
    assert cfg.api.timeout_seconds == 5.0
    assert cfg.save.mode == "postgres"
    assert cfg.database.port == 5432
    assert cfg.row_defaults.payment_type is PaymentType.CIF


def test_empty_config_uses_defaults(temp_workdir: Path):
    p = temp_workdir / "config" / "grid.yml"
    p.write_text("", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.history_depth is None
    assert cfg.default_payment_type is PaymentType.FOB
    assert cfg.save.mode == "none"
    assert cfg.api.base_url is None
    assert cfg.export_filename == "order-items.csv"


def test_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "grid.yml"
    p.write_text("history_depth: [1, 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


@pytest.mark.parametrize(
    "data",
    [
        {"unknown_key": 1},
        {"history_depth": 0},
        {"defaults": {"payment_type": "XYZ"}},
        {"save": {"mode": "ftp"}},
        {"save": {"table": "orders; drop table x"}},
        {"export_filename": "../out.txt"},
        {"api": {"timeout_seconds": 0}},
    ],
)
def test_schema_violations_rejected(temp_workdir: Path, data):
    with pytest.raises(ConfigError, match="config validation failed"):
        config_from_dict(data)


def test_api_url_env_override(temp_workdir: Path, monkeypatch):
    monkeypatch.setenv("ORDER_GRID_API_URL", "http://override.test")
    cfg = config_from_dict({"api": {"base_url": "http://file.test"}})
    assert cfg.api.base_url == "http://override.test"


def test_root_must_be_mapping(temp_workdir: Path):
    p = temp_workdir / "config" / "grid.yml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(p)
