"""Services: command dispatcher, async price estimation and summary rendering."""

from .dispatcher import OrderGrid, OrderSaver
from .estimation import EstimateCompletion, EstimationQueue
from .summary import render_summary_line

__all__ = [
    "OrderGrid",
    "OrderSaver",
    "EstimateCompletion",
    "EstimationQueue",
    "render_summary_line",
]
