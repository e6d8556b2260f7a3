"""Domain models for the order-entry grid.

This package contains the row / grid types, typed column descriptors,
selection and clipboard values, configuration dataclasses and the result
objects returned by grid operations.
"""

from .columns import COLUMNS, ColumnDescriptor, FieldValueError, ValueType
from .config_models import ApiConfig, DatabaseConfig, GridConfig, SaveConfig
from .notice_record import NoticeRecord
from .results import GridTotals, ImportResult, SaveResult, ValidationIssue
from .row import CarryingBasis, Grid, PaymentType, Row, RowDefaults, RowIdFactory
from .selection import CellCoordinate, ClipboardBuffer, ClipboardEntry, Selection

__all__ = [
    # Row / grid
    "Row",
    "Grid",
    "RowDefaults",
    "RowIdFactory",
    "PaymentType",
    "CarryingBasis",
    # Columns
    "COLUMNS",
    "ColumnDescriptor",
    "FieldValueError",
    "ValueType",
    # Selection / clipboard
    "CellCoordinate",
    "Selection",
    "ClipboardEntry",
    "ClipboardBuffer",
    # Configuration models
    "GridConfig",
    "ApiConfig",
    "SaveConfig",
    "DatabaseConfig",
    # Results
    "GridTotals",
    "ValidationIssue",
    "ImportResult",
    "SaveResult",
    "NoticeRecord",
]
