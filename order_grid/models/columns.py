from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from .row import CarryingBasis, PaymentType, Row

"""Typed column descriptors for the order grid.

One ordered COLUMNS tuple drives CSV header labels, typed parsing of text
cells, value validation at the set-field boundary and export formatting.
Field keys are the camelCase names used by cell coordinates, CSV and the
save payload; attribute is the matching Row dataclass attribute.
"""

__all__ = [
    "ValueType",
    "ColumnDescriptor",
    "FieldValueError",
    "COLUMNS",
    "ESTIMATE_COLUMNS",
    "COLUMN_BY_KEY",
    "COLUMN_BY_LABEL",
    "IMAGE_REF_SEPARATOR",
    "column_for",
    "get_value",
]

IMAGE_REF_SEPARATOR = "|"


class FieldValueError(ValueError):
    """Raised when a value does not satisfy its column's type."""


class ValueType(Enum):
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    PAYMENT = "payment"
    CARRYING = "carrying"
    IMAGES = "images"
    DERIVED = "derived"


_NUMERIC_TYPES = {ValueType.INTEGER, ValueType.DECIMAL}


def _parse_number_text(key: str, text: str, strict: bool) -> Decimal:
    """Parse numeric text with the default-to-zero policy.

    Blank or unparsable text becomes 0 unless strict is set. Text that parses
    to a negative or non-finite number is always rejected.
    """
    stripped = text.strip()
    if stripped == "":
        return Decimal("0")
    try:
        num = Decimal(stripped)
    except InvalidOperation:
        if strict:
            raise FieldValueError(f"{key}: not a number: {text!r}") from None
        return Decimal("0")
    if not num.is_finite():
        if strict:
            raise FieldValueError(f"{key}: not a finite number: {text!r}")
        return Decimal("0")
    if num < 0:
        raise FieldValueError(f"{key}: must not be negative: {text!r}")
    return num


@dataclass(frozen=True)
class ColumnDescriptor:
    key: str  # field key (camelCase)
    label: str  # CSV header / UI label
    value_type: ValueType
    attribute: str  # Row attribute name
    writable: bool = True  # user-writable through set_field / paste

    @property
    def is_numeric(self) -> bool:
        return self.value_type in _NUMERIC_TYPES

    def coerce(self, value: Any, *, strict_numeric_text: bool = False) -> Any:
        """Validate value for this column and return it in the Row's type.

        Raises FieldValueError instead of silently coercing, except for numeric
        text which follows the default-to-zero policy.
        """
        vt = self.value_type
        if vt is ValueType.DERIVED:
            raise FieldValueError(f"{self.key}: derived field is not writable")
        if vt is ValueType.TEXT:
            if not isinstance(value, str):
                raise FieldValueError(f"{self.key}: expected text, got {type(value).__name__}")
            return value
        if vt is ValueType.INTEGER:
            return self._coerce_integer(value, strict_numeric_text)
        if vt is ValueType.DECIMAL:
            return self._coerce_decimal(value, strict_numeric_text)
        if vt is ValueType.PAYMENT:
            return _coerce_enum(self.key, PaymentType, value)
        if vt is ValueType.CARRYING:
            return _coerce_enum(self.key, CarryingBasis, value)
        if vt is ValueType.IMAGES:
            if isinstance(value, str):
                return tuple(p.strip() for p in value.split(IMAGE_REF_SEPARATOR) if p.strip())
            if isinstance(value, Sequence) and all(isinstance(v, str) for v in value):
                return tuple(value)
            raise FieldValueError(f"{self.key}: expected a sequence of image references")
        raise FieldValueError(f"{self.key}: unsupported column type {vt}")  # pragma: no cover

    def _coerce_integer(self, value: Any, strict: bool) -> int:
        if isinstance(value, bool):
            raise FieldValueError(f"{self.key}: expected an integer, got bool")
        if isinstance(value, str):
            num = _parse_number_text(self.key, value, strict)
        elif isinstance(value, int):
            num = Decimal(value)
        elif isinstance(value, (Decimal, float)):
            num = Decimal(str(value))
        else:
            raise FieldValueError(f"{self.key}: expected an integer, got {type(value).__name__}")
        if not num.is_finite() or num != num.to_integral_value():
            raise FieldValueError(f"{self.key}: must be a whole number: {value!r}")
        if num < 0:
            raise FieldValueError(f"{self.key}: must not be negative: {value!r}")
        return int(num)

    def _coerce_decimal(self, value: Any, strict: bool) -> Decimal:
        if isinstance(value, bool):
            raise FieldValueError(f"{self.key}: expected a number, got bool")
        if isinstance(value, str):
            return _parse_number_text(self.key, value, strict)
        if isinstance(value, Decimal):
            num = value
        elif isinstance(value, (int, float)):
            num = Decimal(str(value))
        else:
            raise FieldValueError(f"{self.key}: expected a number, got {type(value).__name__}")
        if not num.is_finite():
            raise FieldValueError(f"{self.key}: not a finite number: {value!r}")
        if num < 0:
            raise FieldValueError(f"{self.key}: must not be negative: {value!r}")
        return num

    def parse_text(self, text: str, *, strict_numeric_text: bool = False) -> Any:
        """Parse a raw text cell (CSV or text input) into the Row's type."""
        if self.value_type is ValueType.TEXT:
            return text  # 入力どおり保持 (空判定は呼び出し側)
        return self.coerce(text, strict_numeric_text=strict_numeric_text)

    def format(self, value: Any) -> str:
        """Render a Row value as raw cell text."""
        if value is None:
            return ""
        if isinstance(value, Enum):
            return str(value.value)
        if self.value_type is ValueType.IMAGES:
            return IMAGE_REF_SEPARATOR.join(value)
        return str(value)


def _coerce_enum(key: str, enum_cls: type[Enum], value: Any) -> Enum:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        code = value.strip().upper()
        try:
            return enum_cls(code)
        except ValueError:
            pass
    allowed = ", ".join(m.value for m in enum_cls)
    raise FieldValueError(f"{key}: must be one of: {allowed} (got {value!r})")


COLUMNS: tuple[ColumnDescriptor, ...] = (
    ColumnDescriptor("itemCode", "Item Code", ValueType.TEXT, "item_code"),
    ColumnDescriptor("description", "Description", ValueType.TEXT, "description"),
    ColumnDescriptor("quantity", "Quantity", ValueType.INTEGER, "quantity"),
    ColumnDescriptor("unitPrice", "Unit Price", ValueType.DECIMAL, "unit_price"),
    ColumnDescriptor("totalPrice", "Total Price", ValueType.DERIVED, "total_price", writable=False),
    ColumnDescriptor("supplier", "Supplier", ValueType.TEXT, "supplier"),
    ColumnDescriptor("paymentType", "Payment", ValueType.PAYMENT, "payment_type"),
    ColumnDescriptor("carryingBasis", "Carrying Basis", ValueType.CARRYING, "carrying_basis"),
    ColumnDescriptor("unitWeight", "Unit Weight (kg)", ValueType.DECIMAL, "unit_weight"),
    ColumnDescriptor("unitCbm", "Unit CBM", ValueType.DECIMAL, "unit_cbm"),
    ColumnDescriptor("hsCode", "HS Code", ValueType.TEXT, "hs_code"),
    ColumnDescriptor("imageRefs", "Image", ValueType.IMAGES, "image_refs"),
    ColumnDescriptor("notes", "Notes", ValueType.TEXT, "notes"),
)

# Not grid columns: written only by the price-estimation merge.
ESTIMATE_COLUMNS: tuple[ColumnDescriptor, ...] = (
    ColumnDescriptor("estimatedPrice", "Estimated Price", ValueType.DECIMAL, "estimated_price", writable=False),
    ColumnDescriptor("priceConfidence", "Price Confidence", ValueType.INTEGER, "price_confidence", writable=False),
)

COLUMN_BY_KEY: dict[str, ColumnDescriptor] = {c.key: c for c in COLUMNS + ESTIMATE_COLUMNS}
COLUMN_BY_LABEL: dict[str, ColumnDescriptor] = {c.label: c for c in COLUMNS}


def column_for(field_key: str) -> ColumnDescriptor:
    try:
        return COLUMN_BY_KEY[field_key]
    except KeyError:
        raise FieldValueError(f"unknown field: {field_key!r}") from None


def get_value(row: Row, field_key: str) -> Any:
    """Read a Row value by field key ("id" included)."""
    if field_key == "id":
        return row.id
    return getattr(row, column_for(field_key).attribute)
