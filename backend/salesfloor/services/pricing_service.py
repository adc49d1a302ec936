# Overview: Service-layer operations for pricing; turns delivery prices into selling prices.

"""
Selling price = delivery_price * (1 + markup), then
                * (1 - expiration_discount) when the product is near expiration,
rounded to the cent (half-up).

The engine is category-agnostic: the caller picks the markup (food or
non-food) and passes it in.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ..models import Product
from ..validation import NegativePercentageError, round_money, to_decimal
from .inventory_service import Catalog, product_is_near_expiration

ONE = Decimal("1")


class PricingEngine:
    def __init__(self, catalog: Catalog, expiration_threshold_days: int, expiration_discount):
        discount = to_decimal(expiration_discount, "expiration_discount")
        if discount < 0:
            raise NegativePercentageError(discount, field="expiration_discount")
        self.catalog = catalog
        self.expiration_threshold_days = expiration_threshold_days
        self.expiration_discount = discount

    def is_near_expiration(self, product: Product, today: date | None = None) -> bool:
        return product_is_near_expiration(
            product,
            self.expiration_threshold_days,
            today or self.catalog.today(),
        )

    def compute_selling_price(self, product: Product | int, markup_rate, today: date | None = None) -> Decimal:
        """
        Price one unit of ``product``.

        ``product`` may be a Product value or a catalog id; an unknown id
        raises ProductNotFoundError.
        """
        markup = to_decimal(markup_rate, "markup")
        if markup < 0:
            raise NegativePercentageError(markup, field="markup")

        if not isinstance(product, Product):
            product = self.catalog.require_product(product)

        price = product.delivery_price * (ONE + markup)
        if self.is_near_expiration(product, today):
            price = price * (ONE - self.expiration_discount)
        return round_money(price)
