"""Clients for the grid's external services."""

from .api import (
    ExternalServiceError,
    ItemLookupClient,
    LookupItem,
    OrderSaveClient,
    PriceEstimate,
    PriceEstimateRequest,
    PriceEstimationClient,
    row_to_payload,
)

__all__ = [
    "ExternalServiceError",
    "ItemLookupClient",
    "LookupItem",
    "OrderSaveClient",
    "PriceEstimate",
    "PriceEstimateRequest",
    "PriceEstimationClient",
    "row_to_payload",
]
