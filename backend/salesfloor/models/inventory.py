from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from ..validation import NegativeQuantityError, ValidationError, format_money, to_date, to_decimal, to_int


class ProductCategory(str, enum.Enum):
    FOOD = "FOOD"
    NON_FOOD = "NON_FOOD"

    @classmethod
    def parse(cls, value) -> "ProductCategory":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper().replace("-", "_"))
        except ValueError:
            raise ValidationError(
                f"category must be one of {', '.join(c.value for c in cls)}",
                details={"category": value},
            )


@dataclass(frozen=True)
class Product:
    """
    Delivered stock of one product.

    WHY frozen: a Product handed out by the catalog (or embedded in a
    receipt) is a snapshot. Quantity changes go through Catalog, which
    swaps in a new value, so a historical receipt can never be altered by
    a later inventory change.
    """
    id: int
    name: str
    delivery_price: Decimal
    category: ProductCategory
    expiration_date: date
    quantity: int

    def __post_init__(self):
        object.__setattr__(self, "id", to_int(self.id, "id"))
        object.__setattr__(self, "delivery_price", to_decimal(self.delivery_price, "delivery_price"))
        object.__setattr__(self, "category", ProductCategory.parse(self.category))
        object.__setattr__(self, "expiration_date", to_date(self.expiration_date, "expiration_date"))
        object.__setattr__(self, "quantity", to_int(self.quantity, "quantity"))

        if not self.name or not str(self.name).strip():
            raise ValidationError("name is required")
        if self.delivery_price < 0:
            raise ValidationError(
                "delivery_price cannot be negative",
                details={"delivery_price": str(self.delivery_price)},
            )
        if self.quantity < 0:
            raise NegativeQuantityError(self.quantity, product_id=self.id)

    def with_quantity(self, quantity: int) -> "Product":
        return replace(self, quantity=quantity)

    @property
    def delivery_cost(self) -> Decimal:
        return self.delivery_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "delivery_price": str(self.delivery_price),
            "category": self.category.value,
            "expiration_date": self.expiration_date.isoformat(),
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=data["id"],
            name=data["name"],
            delivery_price=data["delivery_price"],
            category=data["category"],
            expiration_date=data["expiration_date"],
            quantity=data["quantity"],
        )

    def describe(self) -> str:
        return (
            f"{self.name}: {self.quantity} units @ {format_money(self.delivery_price)} "
            f"(expires: {self.expiration_date.isoformat()})"
        )
