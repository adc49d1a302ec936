# Overview: Service-layer operations for inventory; owns the product catalog and every quantity change.

# backend/salesfloor/services/inventory_service.py
"""
Inventory Invariants & Time Semantics (authoritative)

Catalog model:
- Products are keyed by integer id. Adding a product with an existing id
  replaces the earlier entry (allowed, not an error).
- Products are never deleted.
- Quantity is only changed through Catalog.set_quantity; values handed out
  are frozen snapshots.

Business invariants:
- Quantity may never go negative (NegativeQuantityError).
- Delivery expense accumulates delivery_price * quantity for every
  product added, at the quantity it was delivered with.

Shelf life (calendar dates, no time of day):
- Expired: today > expiration_date.
- Near expiration: expiration_date - threshold_days < today (strict).
  A product expiring in exactly threshold_days is NOT near expiration.

Locking:
- _lock guards the product map and the delivery-expense total.
- Each product id has its own RLock. reserve() holds the locks for a set
  of ids (ascending order) across validation and commit of one sale;
  set_quantity takes the same lock, so nothing else can change a reserved
  product mid-sale.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Iterator

from ..models import Product, ProductCategory
from ..time_utils import today as _today
from ..validation import NegativeQuantityError, NotFoundError
from .concurrency import SequenceGenerator, acquire_in_order

logger = logging.getLogger(__name__)


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(
            f"Product not found: {product_id}",
            details={"product_id": product_id},
        )
        self.product_id = product_id


class Catalog:
    """Owns the product set and every quantity mutation."""

    def __init__(self, clock: Callable[[], date] = _today):
        self._products: dict[int, Product] = {}
        self._product_locks: dict[int, threading.RLock] = {}
        self._lock = threading.RLock()
        self._delivery_expense = Decimal("0")
        self._ids = SequenceGenerator()
        self._clock = clock

    # ------------------------------------------------------------------
    # Product set
    # ------------------------------------------------------------------

    def add_product(self, product: Product) -> Product:
        """Insert by id; a duplicate id silently replaces the earlier entry."""
        with self._lock:
            lock = self._product_locks.setdefault(product.id, threading.RLock())
        # product lock before map lock, same order as set_quantity
        with lock:
            with self._lock:
                if product.id in self._products:
                    logger.info("Replacing product %s (%s)", product.id, product.name)
                self._products[product.id] = product
                self._delivery_expense += product.delivery_cost
                self._ids.advance_past(product.id)
        return product

    def create_product(
        self,
        name: str,
        delivery_price,
        category: ProductCategory | str,
        expiration_date,
        quantity: int,
    ) -> Product:
        """Build a product with the next catalog id and add it."""
        product = Product(
            id=self._ids.next(),
            name=name,
            delivery_price=delivery_price,
            category=category,
            expiration_date=expiration_date,
            quantity=quantity,
        )
        return self.add_product(product)

    def get_product(self, product_id: int) -> Product | None:
        with self._lock:
            return self._products.get(product_id)

    def require_product(self, product_id: int) -> Product:
        product = self.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def has_product(self, product_id: int) -> bool:
        with self._lock:
            return product_id in self._products

    def products(self) -> list[Product]:
        with self._lock:
            return [self._products[pid] for pid in sorted(self._products)]

    def total_delivery_expense(self) -> Decimal:
        with self._lock:
            return self._delivery_expense

    # ------------------------------------------------------------------
    # Quantity mutation
    # ------------------------------------------------------------------

    def set_quantity(self, product_id: int, new_quantity: int) -> bool:
        """
        Replace a product's quantity.

        Returns False (no-op) when the id is absent.
        """
        if new_quantity < 0:
            raise NegativeQuantityError(new_quantity, product_id=product_id)

        lock = self._lock_for(product_id)
        if lock is None:
            return False
        with lock:
            with self._lock:
                current = self._products.get(product_id)
                if current is None:
                    return False
                self._products[product_id] = current.with_quantity(new_quantity)
        return True

    @contextmanager
    def reserve(self, product_ids: Iterable[int]) -> Iterator[None]:
        """
        Hold the per-product locks for ``product_ids`` until the block exits.

        Ids not yet in the catalog get a lock too, so a product added
        mid-sale waits in add_product until the reservation is released.
        """
        ids = sorted(set(product_ids))
        with self._lock:
            locks = [self._product_locks.setdefault(pid, threading.RLock()) for pid in ids]
        with acquire_in_order(locks):
            yield

    def _lock_for(self, product_id: int) -> threading.RLock | None:
        with self._lock:
            return self._product_locks.get(product_id)

    # ------------------------------------------------------------------
    # Shelf life
    # ------------------------------------------------------------------

    def today(self) -> date:
        return self._clock()

    def is_expired(self, product_id: int, today: date | None = None) -> bool:
        product = self.get_product(product_id)
        if product is None:
            return False
        return product_is_expired(product, today or self._clock())

    def is_near_expiration(self, product_id: int, threshold_days: int, today: date | None = None) -> bool:
        product = self.get_product(product_id)
        if product is None:
            return False
        return product_is_near_expiration(product, threshold_days, today or self._clock())


def product_is_expired(product: Product, today: date) -> bool:
    return today > product.expiration_date


def product_is_near_expiration(product: Product, threshold_days: int, today: date) -> bool:
    return product.expiration_date - timedelta(days=threshold_days) < today
