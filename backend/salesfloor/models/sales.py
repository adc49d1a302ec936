from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from .inventory import Product
from .registers import Cashier
from ..validation import format_money, to_decimal
from ..time_utils import to_utc_z, parse_iso_datetime


@dataclass(frozen=True)
class ReceiptLine:
    """One sold product: snapshot, quantity and the unit price frozen at sale time."""
    product: Product
    quantity: int
    unit_price: Decimal

    def __post_init__(self):
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price, "unit_price"))

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product": self.product.to_dict(),
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "line_total": format_money(self.line_total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReceiptLine":
        return cls(
            product=Product.from_dict(data["product"]),
            quantity=data["quantity"],
            unit_price=data["unit_price"],
        )


@dataclass(frozen=True)
class Receipt:
    """
    Immutable record of a completed sale.

    WHY: total is computed once when the receipt is issued and stored, so
    reading a receipt never re-prices it (prices move as products near
    expiration).
    """
    number: int
    issued_at: datetime
    cashier: Cashier
    register_number: int
    lines: tuple[ReceiptLine, ...] = field(default_factory=tuple)
    total: Decimal | None = None

    def __post_init__(self):
        object.__setattr__(self, "lines", tuple(self.lines))
        if self.total is None:
            object.__setattr__(self, "total", sum((ln.line_total for ln in self.lines), Decimal("0")))
        else:
            object.__setattr__(self, "total", to_decimal(self.total, "total"))

    @property
    def item_count(self) -> int:
        return sum(ln.quantity for ln in self.lines)

    def render_text(self, currency: str = "BGN") -> str:
        out = [
            f"Receipt #{self.number}",
            f"Date: {to_utc_z(self.issued_at)}",
            f"Cashier: {self.cashier.name}",
            f"Register: {self.register_number}",
            "Items:",
        ]
        for ln in self.lines:
            out.append(f"{ln.product.name} x{ln.quantity} - {format_money(ln.line_total)} {currency}")
        out.append(f"Total: {format_money(self.total)} {currency}")
        return "\n".join(out) + "\n"

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "issued_at": to_utc_z(self.issued_at),
            "cashier": self.cashier.to_dict(),
            "register_number": self.register_number,
            "lines": [ln.to_dict() for ln in self.lines],
            "total": str(self.total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Receipt":
        return cls(
            number=data["number"],
            issued_at=parse_iso_datetime(data["issued_at"]),
            cashier=Cashier.from_dict(data["cashier"]),
            register_number=data["register_number"],
            lines=tuple(ReceiptLine.from_dict(ln) for ln in data["lines"]),
            total=data["total"],
        )
