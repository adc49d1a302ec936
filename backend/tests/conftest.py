"""
Pytest fixtures for salesfloor tests.

Provides a fresh store per test (receipts written under tmp_path, no retry
sleeps), the Flask app and test client, and small builders for products,
cashiers and receipts.
"""

from datetime import date, datetime, timedelta

import pytest

from salesfloor import create_app
from salesfloor.config import PricingPolicy, StoreConfig
from salesfloor.models import Cashier, Product, ProductCategory, Receipt, ReceiptLine
from salesfloor.services.inventory_service import Catalog
from salesfloor.services.persistence_service import ReceiptPersistence
from salesfloor.services.store_service import StoreService


TODAY = date(2025, 6, 1)
ISSUED_AT = datetime(2025, 6, 1, 10, 30, 15, 123456)


class SleepRecorder:
    """Stands in for time.sleep; remembers each requested delay."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def store_config(tmp_path):
    return StoreConfig(receipt_output_dir=str(tmp_path / "receipts"), retry_delay=0)


@pytest.fixture
def policy():
    return PricingPolicy(
        food_markup="0.20",
        non_food_markup="0.30",
        expiration_threshold_days=7,
        expiration_discount="0.15",
    )


@pytest.fixture
def catalog():
    return Catalog(clock=lambda: TODAY)


@pytest.fixture
def persistence(store_config, sleeps):
    return ReceiptPersistence(store_config, sleep=sleeps)


@pytest.fixture
def store(store_config, policy, sleeps):
    """StoreService pinned to TODAY."""
    return StoreService(
        store_config,
        policy,
        date_clock=lambda: TODAY,
        clock=lambda: ISSUED_AT,
        sleep=sleeps,
    )


@pytest.fixture
def staffed_store(store):
    """Store with John Doe on register 1."""
    cashier = store.add_cashier(Cashier(1, "John Doe", "1500"))
    store.assign_cashier_to_register(cashier.id, 1)
    return store


@pytest.fixture
def app(tmp_path):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'RECEIPT_OUTPUT_DIR': str(tmp_path / "api-receipts"),
        'RECEIPT_RETRY_DELAY': 0,
    })
    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def make_product(
    product_id=1,
    name="Milk",
    delivery_price="2.0",
    category=ProductCategory.FOOD,
    expires_in=30,
    quantity=10,
    today=TODAY,
):
    return Product(
        id=product_id,
        name=name,
        delivery_price=delivery_price,
        category=category,
        expiration_date=today + timedelta(days=expires_in),
        quantity=quantity,
    )


def make_receipt(number=1, lines=None):
    cashier = Cashier(1, "John Doe", "1500", register_number=1)
    if lines is None:
        lines = (ReceiptLine(make_product(quantity=2), 2, "2.04"),)
    return Receipt(
        number=number,
        issued_at=ISSUED_AT,
        cashier=cashier,
        register_number=1,
        lines=tuple(lines),
    )
