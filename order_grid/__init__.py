"""order_grid: editable order-entry grid engine."""

__version__ = "0.1.0"
