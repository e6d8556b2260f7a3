from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

import requests

from ..models.columns import COLUMNS, get_value
from ..models.config_models import ApiConfig
from ..models.row import Row

"""HTTP clients for the grid's external collaborators.

- item lookup / autocomplete: GET  {base}/api/items/search?q=...
- price estimation:           POST {base}/api/orders/estimate-price
- order save:                 POST {base}/api/orders

Every failure (network, HTTP status, malformed body) is raised as
ExternalServiceError; callers report it and leave the grid unchanged.
"""

__all__ = [
    "ExternalServiceError",
    "LookupItem",
    "PriceEstimateRequest",
    "PriceEstimate",
    "ItemLookupClient",
    "PriceEstimationClient",
    "OrderSaveClient",
    "row_to_payload",
]

logger = logging.getLogger(__name__)


class ExternalServiceError(Exception):
    """Raised when an external lookup / estimation / save call fails."""


@dataclass(frozen=True)
class LookupItem:
    item_code: str
    description: str
    unit_price: Decimal
    unit_weight: Decimal
    unit_cbm: Decimal

    def as_fields(self) -> dict[str, Any]:
        """Field-key mapping applied to a row as one multi-field edit."""
        return {
            "itemCode": self.item_code,
            "description": self.description,
            "unitPrice": self.unit_price,
            "unitWeight": self.unit_weight,
            "unitCbm": self.unit_cbm,
        }


@dataclass(frozen=True)
class PriceEstimateRequest:
    item_code: str
    description: str
    quantity: int
    supplier: str

    def to_json(self) -> dict[str, Any]:
        return {
            "itemCode": self.item_code,
            "description": self.description,
            "quantity": self.quantity,
            "supplier": self.supplier,
        }


@dataclass(frozen=True)
class PriceEstimate:
    estimated_price: Decimal
    confidence: int  # 0-100
    historical_data: dict[str, Any] | None = None


def _decimal(data: dict[str, Any], key: str, default: str | None = None) -> Decimal:
    raw = data.get(key, default)
    if raw is None:
        raise ExternalServiceError(f"response missing {key}")
    try:
        # float 経由の誤差を避けるため str 化してから Decimal
        return Decimal(str(raw))
    except InvalidOperation as e:
        raise ExternalServiceError(f"invalid {key}: {raw!r}") from e


def row_to_payload(row: Row) -> dict[str, Any]:
    """Serialize a row for the save endpoint (camelCase keys, JSON-safe values)."""
    out: dict[str, Any] = {"id": row.id}
    for col in COLUMNS:
        value = get_value(row, col.key)
        if isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, tuple):
            value = list(value)
        elif hasattr(value, "value"):
            value = value.value
        out[col.key] = value
    out["estimatedPrice"] = str(row.estimated_price) if row.estimated_price is not None else None
    out["priceConfidence"] = row.price_confidence
    return out


class _BaseClient:
    def __init__(self, config: ApiConfig, session: requests.Session | None = None) -> None:
        if not config.base_url:
            raise ExternalServiceError("api base_url is not configured")
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout_seconds
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            raise ExternalServiceError(f"{method} {path} timed out") from e
        except requests.RequestException as e:
            raise ExternalServiceError(f"{method} {path} failed: {e}") from e
        if not response.ok:
            logger.error("%s %s returned %s: %s", method, path, response.status_code, response.text[:500])
            raise ExternalServiceError(f"{method} {path} returned {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(f"{method} {path}: invalid JSON response") from e


class ItemLookupClient(_BaseClient):
    def search(self, query: str, limit: int = 10) -> list[LookupItem]:
        data = self._request("GET", "/api/items/search", params={"q": query, "limit": limit})
        if not isinstance(data, list):
            raise ExternalServiceError("item search: expected a list")
        items: list[LookupItem] = []
        for raw in data:
            if not isinstance(raw, dict):
                continue
            items.append(
                LookupItem(
                    item_code=str(raw.get("itemCode", "")),
                    description=str(raw.get("description", "")),
                    unit_price=_decimal(raw, "unitPrice", "0"),
                    unit_weight=_decimal(raw, "unitWeight", "0"),
                    unit_cbm=_decimal(raw, "unitCbm", "0"),
                )
            )
        return items


class PriceEstimationClient(_BaseClient):
    def estimate(self, request: PriceEstimateRequest) -> PriceEstimate:
        data = self._request("POST", "/api/orders/estimate-price", json=request.to_json())
        if not isinstance(data, dict):
            raise ExternalServiceError("estimate-price: expected an object")
        price = _decimal(data, "estimatedPrice")
        try:
            confidence = int(data.get("confidence", 0))
        except (TypeError, ValueError) as e:
            raise ExternalServiceError(f"invalid confidence: {data.get('confidence')!r}") from e
        if price < 0 or not 0 <= confidence <= 100:
            raise ExternalServiceError(f"estimate out of range: price={price} confidence={confidence}")
        return PriceEstimate(
            estimated_price=price,
            confidence=confidence,
            historical_data=data.get("historicalData"),
        )


class OrderSaveClient(_BaseClient):
    def save(self, rows: Sequence[Row]) -> int:
        payload = {"items": [row_to_payload(r) for r in rows]}
        self._request("POST", "/api/orders", json=payload)
        return len(rows)
