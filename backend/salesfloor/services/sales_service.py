# Overview: Service-layer operations for sales; validates, prices and commits a basket and issues the receipt.

"""
Sale Transaction Engine

WHY: A sale touches four components (register directory, catalog, pricing,
receipt ledger). This module is the only place that ties them together,
and it decides what "atomic" means for a sale.

DESIGN PRINCIPLES:
- All-or-nothing: every line is validated before any quantity changes
- Validation and decrement happen under one catalog reservation, so two
  concurrent sales cannot both pass the quantity check for the same stock
- Receipt numbering and persistence happen after the reservation is
  released; a slow disk never holds up other registers
- A storage failure does not undo the sale (the goods have left the store)

FLOW:
    normalize basket -> resolve cashier -> reserve(ids)
        -> validate all lines -> price all lines -> decrement all
    release -> allocate number -> build Receipt -> ReceiptStore.record
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Callable, Iterable

from ..config import PricingPolicy
from ..models import Product, Receipt, ReceiptLine
from ..time_utils import utcnow
from ..validation import ValidationError, to_int
from .inventory_service import Catalog, ProductNotFoundError, product_is_expired
from .pricing_service import PricingEngine
from .receipt_service import ReceiptStore
from .register_service import RegisterDirectory

logger = logging.getLogger(__name__)


class NoAssignedCashierError(ValidationError):
    def __init__(self, register_number: int):
        super().__init__(
            f"No cashier assigned to register {register_number}",
            details={"register_number": register_number},
        )
        self.register_number = register_number


class ExpiredProductError(ValidationError):
    def __init__(self, product: Product):
        super().__init__(
            f"Cannot sell expired product: {product.name}",
            details={
                "product_id": product.id,
                "expiration_date": product.expiration_date.isoformat(),
            },
        )
        self.product = product


class InsufficientQuantityError(ValidationError):
    def __init__(self, product: Product, requested_quantity: int):
        super().__init__(
            f"Insufficient quantity for {product.name}. "
            f"Requested: {requested_quantity}, Available: {product.quantity}",
            details={
                "product_id": product.id,
                "requested_quantity": requested_quantity,
                "available_quantity": product.quantity,
            },
        )
        self.product = product
        self.requested_quantity = requested_quantity


class InvalidBasketError(ValidationError):
    """Empty basket, or a line with a non-positive quantity."""


def normalize_basket(basket) -> dict[int, int]:
    """
    Collapse a basket into ``{product_id: quantity}``.

    Accepts a mapping or an iterable of ``(product_id, quantity)`` pairs;
    repeated ids are summed. Order of first appearance is kept.
    """
    if basket is None:
        raise InvalidBasketError("Basket is empty")

    pairs: Iterable = basket.items() if isinstance(basket, Mapping) else basket
    lines: dict[int, int] = {}
    try:
        for product_id, quantity in pairs:
            pid = to_int(product_id, "product_id")
            qty = to_int(quantity, "quantity")
            if qty <= 0:
                raise InvalidBasketError(
                    f"Quantity must be positive: {qty}",
                    details={"product_id": pid, "quantity": qty},
                )
            lines[pid] = lines.get(pid, 0) + qty
    except (TypeError, ValueError) as exc:
        raise InvalidBasketError(f"Basket lines must be (product_id, quantity) pairs: {exc}") from exc

    if not lines:
        raise InvalidBasketError("Basket is empty")
    return lines


class SaleTransactionEngine:
    def __init__(
        self,
        catalog: Catalog,
        directory: RegisterDirectory,
        pricing: PricingEngine,
        receipts: ReceiptStore,
        policy: PricingPolicy,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog
        self.directory = directory
        self.pricing = pricing
        self.receipts = receipts
        self.policy = policy
        self._clock = clock

    def create_sale(self, register_number: int, basket) -> Receipt:
        """
        Ring up ``basket`` at ``register_number``.

        Raises (with no state change):
            InvalidBasketError, NoAssignedCashierError, ProductNotFoundError,
            ExpiredProductError, InsufficientQuantityError

        A receipt storage failure is logged by the ReceiptStore; the
        receipt is still returned.
        """
        requested = normalize_basket(basket)

        cashier = self.directory.cashier_at_register(register_number)
        if cashier is None:
            raise NoAssignedCashierError(register_number)

        today = self.catalog.today()
        lines: list[ReceiptLine] = []

        with self.catalog.reserve(requested):
            # Phase 1: validate everything against current stock
            stocked: list[tuple[Product, int]] = []
            for product_id, quantity in requested.items():
                product = self.catalog.get_product(product_id)
                if product is None:
                    raise ProductNotFoundError(product_id)
                if product_is_expired(product, today):
                    raise ExpiredProductError(product)
                if quantity > product.quantity:
                    raise InsufficientQuantityError(product, quantity)
                stocked.append((product, quantity))

            # Phase 2: price, then commit
            for product, quantity in stocked:
                unit_price = self.pricing.compute_selling_price(
                    product, self.policy.markup_for(product.category), today
                )
                lines.append(ReceiptLine(
                    product=product.with_quantity(quantity),
                    quantity=quantity,
                    unit_price=unit_price,
                ))

            for product, quantity in stocked:
                self.catalog.set_quantity(product.id, product.quantity - quantity)

        receipt = Receipt(
            number=self.receipts.next_receipt_number(),
            issued_at=self._clock(),
            cashier=cashier,
            register_number=register_number,
            lines=tuple(lines),
        )
        persisted = self.receipts.record(receipt)

        logger.info(
            "Sale completed: receipt #%s at register %s, %d item(s), total %s%s",
            receipt.number,
            register_number,
            receipt.item_count,
            receipt.total,
            "" if persisted else " (not persisted)",
        )
        return receipt
