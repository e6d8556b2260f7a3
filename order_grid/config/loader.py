from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import ApiConfig, DatabaseConfig, GridConfig, SaveConfig
from ..models.row import CarryingBasis, PaymentType

"""Config loader.

Responsibilities:
- Load YAML config (config/grid.yml by default)
- Validate against grid_schema.json (unknown keys rejected)
- Apply defaults for everything the file leaves out
- Apply environment overrides (ORDER_GRID_API_URL for the API base URL)
"""

SCHEMA_PATH = Path(__file__).with_name("grid_schema.json")
DEFAULT_CONFIG_PATH = Path("config/grid.yml")

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "config_from_dict",
]


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails schema validation.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def config_from_dict(data: dict[str, Any]) -> GridConfig:
    """Build a GridConfig from already-parsed config data (validated here)."""
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")
    _validate_config_schema(data)

    defaults = data.get("defaults") or {}
    api_raw = data.get("api") or {}
    save_raw = data.get("save") or {}
    db_raw = data.get("database") or {}

    base_url = os.getenv("ORDER_GRID_API_URL") or api_raw.get("base_url")
    api = ApiConfig(
        base_url=base_url,
        timeout_seconds=float(api_raw.get("timeout_seconds", ApiConfig.timeout_seconds)),
    )
    save = SaveConfig(
        mode=save_raw.get("mode", SaveConfig.mode),
        table=save_raw.get("table", SaveConfig.table),
    )
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return GridConfig(
        history_depth=data.get("history_depth"),
        default_payment_type=PaymentType(defaults.get("payment_type", "FOB")),
        default_carrying_basis=CarryingBasis(defaults.get("carrying_basis", "SEA")),
        strict_numeric_text=bool(data.get("strict_numeric_text", False)),
        export_filename=data.get("export_filename", GridConfig.export_filename),
        api=api,
        save=save,
        database=db,
    )


def load_config(path: Path) -> GridConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    return config_from_dict(data)
