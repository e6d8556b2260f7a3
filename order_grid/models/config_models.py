from __future__ import annotations

from dataclasses import dataclass, field

from .row import CarryingBasis, PaymentType, RowDefaults

"""Config dataclasses for the order grid.

These are the typed results of order_grid.config.loader; the YAML layout
itself is described by order_grid/config/grid_schema.json.
"""

__all__ = [
    "DatabaseConfig",
    "ApiConfig",
    "SaveConfig",
    "GridConfig",
]


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration for the postgres save mode.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ApiConfig:
    """Base URL and timeout for lookup / estimation / save HTTP services."""
    base_url: str | None = None
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class SaveConfig:
    mode: str = "none"  # http | postgres | none
    table: str = "order_items"


@dataclass(frozen=True)
class GridConfig:
    """Root configuration object for a grid session."""
    history_depth: int | None = None  # None = unbounded (session lifetime)
    default_payment_type: PaymentType = PaymentType.FOB
    default_carrying_basis: CarryingBasis = CarryingBasis.SEA
    strict_numeric_text: bool = False  # True: reject unparsable numeric text instead of 0
    export_filename: str = "order-items.csv"
    api: ApiConfig = field(default_factory=ApiConfig)
    save: SaveConfig = field(default_factory=SaveConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @property
    def row_defaults(self) -> RowDefaults:
        return RowDefaults(
            payment_type=self.default_payment_type,
            carrying_basis=self.default_carrying_basis,
        )
