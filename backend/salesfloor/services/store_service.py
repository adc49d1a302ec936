# Overview: Store facade; composes the catalog, register directory, pricing, receipts and sale engine.

from __future__ import annotations

import logging
import time
from datetime import date, datetime
from decimal import Decimal
from typing import Callable

from ..config import PricingPolicy, StoreConfig
from ..models import Cashier, Product, ProductCategory, Receipt, RegisterAssignment
from ..time_utils import today, utcnow
from .inventory_service import Catalog
from .persistence_service import ReceiptPersistence
from .pricing_service import PricingEngine
from .receipt_service import ReceiptStore
from .register_service import RegisterDirectory
from .sales_service import SaleTransactionEngine

logger = logging.getLogger(__name__)


class StoreService:
    """
    One store: everything a route, CLI command or test needs.

    Each instance owns its own components and counters, so two stores
    (e.g. two test apps) never share state.
    """

    def __init__(
        self,
        store_config: StoreConfig,
        policy: PricingPolicy,
        *,
        date_clock: Callable[[], date] = today,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = store_config
        self.policy = policy
        self.catalog = Catalog(clock=date_clock)
        self.directory = RegisterDirectory()
        self.pricing = PricingEngine(
            self.catalog,
            policy.expiration_threshold_days,
            policy.expiration_discount,
        )
        self.persistence = ReceiptPersistence(store_config, sleep=sleep)
        self.receipts = ReceiptStore(self.persistence)
        self.engine = SaleTransactionEngine(
            self.catalog,
            self.directory,
            self.pricing,
            self.receipts,
            policy,
            clock=clock,
        )

    @classmethod
    def from_config(cls, cfg) -> "StoreService":
        """Build from a Flask-style config mapping."""
        return cls(StoreConfig.from_mapping(cfg), PricingPolicy.from_mapping(cfg))

    @property
    def name(self) -> str:
        return self.policy.store_name

    # --- products ---

    def add_product(self, product: Product) -> Product:
        return self.catalog.add_product(product)

    def receive_product(
        self,
        name: str,
        delivery_price,
        category: ProductCategory | str,
        expiration_date,
        quantity: int,
    ) -> Product:
        product = self.catalog.create_product(name, delivery_price, category, expiration_date, quantity)
        logger.info("Received %s x%s (product %s)", product.name, product.quantity, product.id)
        return product

    def get_product(self, product_id: int) -> Product | None:
        return self.catalog.get_product(product_id)

    def delivered_products(self) -> list[Product]:
        return self.catalog.products()

    def sold_products(self) -> list[Product]:
        """One snapshot per sold receipt line; quantity is the sold quantity."""
        return [line.product for receipt in self.receipts.receipts() for line in receipt.lines]

    def selling_price(self, product: Product | int) -> Decimal:
        if not isinstance(product, Product):
            product = self.catalog.require_product(product)
        return self.pricing.compute_selling_price(product, self.policy.markup_for(product.category))

    # --- cashiers & registers ---

    def add_cashier(self, cashier: Cashier) -> Cashier:
        return self.directory.add_cashier(cashier)

    def hire_cashier(self, name: str, monthly_salary) -> Cashier:
        return self.directory.hire_cashier(name, monthly_salary)

    def cashiers(self) -> list[Cashier]:
        return self.directory.cashiers()

    def assign_cashier_to_register(self, cashier_id: int, register_number: int) -> RegisterAssignment:
        return self.directory.assign_to_register(cashier_id, register_number)

    def cashier_at_register(self, register_number: int) -> Cashier | None:
        return self.directory.cashier_at_register(register_number)

    def assignments(self) -> list[RegisterAssignment]:
        return self.directory.assignments()

    # --- sales & receipts ---

    def create_sale(self, register_number: int, basket) -> Receipt:
        return self.engine.create_sale(register_number, basket)

    def get_receipt(self, receipt_number: int) -> Receipt | None:
        return self.receipts.get(receipt_number)

    def list_receipts(self) -> list[Receipt]:
        return self.receipts.receipts()

    def receipt_count(self) -> int:
        return self.receipts.receipt_count()

    def reload_receipt(self, receipt_number: int) -> Receipt:
        return self.receipts.reload(receipt_number)

    def read_receipt_text(self, receipt_number: int) -> str:
        return self.receipts.read_text(receipt_number)

    # --- financials ---

    def total_revenue(self) -> Decimal:
        return self.receipts.total_revenue()

    def salary_expenses(self) -> Decimal:
        return self.directory.total_salary_expense()

    def delivery_expenses(self) -> Decimal:
        return self.catalog.total_delivery_expense()

    def income(self) -> Decimal:
        return self.total_revenue() - self.delivery_expenses()

    def profit(self) -> Decimal:
        return self.income() - self.salary_expenses()
