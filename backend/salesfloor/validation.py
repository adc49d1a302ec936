from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from salesfloor.time_utils import parse_iso_date


CENT = Decimal("0.01")


class StoreError(Exception):
    """Base for every business error raised by the store services."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(StoreError):
    """400-level input or business-rule problem."""


class NotFoundError(StoreError):
    """404-level lookup failure."""


class ConflictError(ValidationError):
    """409-level business rule conflict (e.g., occupied register)."""


class NegativeQuantityError(ValidationError):
    def __init__(self, quantity: int, product_id: int | None = None):
        super().__init__(
            f"Quantity cannot be negative: {quantity}",
            details={"quantity": quantity, "product_id": product_id},
        )
        self.quantity = quantity
        self.product_id = product_id


class NegativePercentageError(ValidationError):
    def __init__(self, percentage, field: str = "percentage"):
        super().__init__(
            f"Percentage cannot be negative: {percentage}",
            details={"field": field, "value": str(percentage)},
        )
        self.percentage = percentage


def to_decimal(value: Any, field: str = "value") -> Decimal:
    """
    Coerce a numeric input to Decimal.

    Floats go through str() so 2.0 becomes Decimal("2.0") rather than the
    binary expansion. Booleans are rejected even though they are ints.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be a number")
        try:
            result = Decimal(stripped)
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number")
    else:
        raise ValidationError(f"{field} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return result


def round_money(value: Decimal) -> Decimal:
    """Nearest-cent rounding, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    return str(round_money(value))


def to_int(value: Any, field: str = "value") -> int:
    """Strict integer coercion: rejects floats, decimals and scientific notation."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def to_date(value: Any, field: str = "value") -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"{field} must be an ISO-8601 date")
        if parsed is None:
            raise ValidationError(f"{field} must be an ISO-8601 date")
        return parsed
    raise ValidationError(f"{field} must be a date")


def require_fields(payload: dict, fields: tuple[str, ...]) -> None:
    missing = [f for f in fields if payload.get(f) in (None, "")]
    if missing:
        raise ValidationError(
            f"{', '.join(missing)} required",
            details={"missing": missing},
        )
