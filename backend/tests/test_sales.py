# Overview: Pytest coverage for sale transactions, including concurrent sales.

"""
Sale Transaction Tests

Covers:
1. The priced, decremented, numbered, persisted happy path
2. All-or-nothing validation (nothing changes when any line fails)
3. Basket shapes (mapping, pairs, repeated ids)
4. Concurrent sales never oversell and never deadlock
"""

import threading
from decimal import Decimal

import pytest

from conftest import ISSUED_AT, make_product
from salesfloor.config import StoreConfig
from salesfloor.models import Cashier, ProductCategory
from salesfloor.services.inventory_service import ProductNotFoundError
from salesfloor.services.sales_service import (
    ExpiredProductError,
    InsufficientQuantityError,
    InvalidBasketError,
    NoAssignedCashierError,
)
from salesfloor.services.store_service import StoreService


@pytest.fixture
def stocked_store(staffed_store):
    """Milk (near expiration), Bread (expired), Soap (long shelf life)."""
    staffed_store.add_product(make_product(1, "Milk", "2.0", ProductCategory.FOOD, expires_in=5, quantity=10))
    staffed_store.add_product(make_product(2, "Bread", "1.5", ProductCategory.FOOD, expires_in=-1, quantity=15))
    staffed_store.add_product(make_product(3, "Soap", "3.0", ProductCategory.NON_FOOD, expires_in=365, quantity=20))
    return staffed_store


def quantities(store):
    return {p.id: p.quantity for p in store.delivered_products()}


@pytest.mark.sales
class TestCreateSale:
    def test_milk_sale(self, stocked_store):
        """
        SCENARIO: 2x Milk (2.00 delivery, food, expires in 5 days).
        EXPECTED: unit 2.04, total 4.08, Milk left 8, receipt #1 on disk.
        """
        receipt = stocked_store.create_sale(1, {1: 2})

        assert receipt.number == 1
        assert receipt.lines[0].unit_price == Decimal("2.04")
        assert receipt.total == Decimal("4.08")
        assert stocked_store.get_product(1).quantity == 8
        assert stocked_store.persistence.text_path(1).is_file()
        assert stocked_store.persistence.snapshot_path(1).is_file()

    def test_receipt_snapshots(self, stocked_store):
        receipt = stocked_store.create_sale(1, {1: 2, 3: 3})

        assert receipt.cashier.name == "John Doe"
        assert receipt.register_number == 1
        assert receipt.issued_at == ISSUED_AT
        assert [(ln.product.name, ln.quantity) for ln in receipt.lines] == [("Milk", 2), ("Soap", 3)]
        # line snapshot carries the sold quantity, not the shelf quantity
        assert receipt.lines[1].product.quantity == 3
        assert receipt.total == Decimal("15.78")

    def test_receipt_numbers_are_sequential(self, stocked_store):
        numbers = [stocked_store.create_sale(1, {3: 1}).number for _ in range(3)]
        assert numbers == [1, 2, 3]

    def test_repeated_ids_are_summed(self, stocked_store):
        receipt = stocked_store.create_sale(1, [(3, 1), (3, 2)])

        assert len(receipt.lines) == 1
        assert receipt.lines[0].quantity == 3
        assert stocked_store.get_product(3).quantity == 17

    def test_whole_stock_can_be_sold(self, stocked_store):
        stocked_store.create_sale(1, {1: 10})
        assert stocked_store.get_product(1).quantity == 0

    def test_reload_matches_issued_receipt(self, stocked_store):
        receipt = stocked_store.create_sale(1, {1: 2})
        assert stocked_store.reload_receipt(receipt.number) == receipt


@pytest.mark.sales
class TestRejectedSales:
    def test_insufficient_quantity(self, stocked_store):
        """
        SCENARIO: 20x Milk requested, 10 on hand.
        EXPECTED: InsufficientQuantityError; Milk stays at 10; no receipt.
        """
        with pytest.raises(InsufficientQuantityError) as exc:
            stocked_store.create_sale(1, {1: 20})

        assert exc.value.requested_quantity == 20
        assert exc.value.product.quantity == 10
        assert str(exc.value) == "Insufficient quantity for Milk. Requested: 20, Available: 10"
        assert stocked_store.get_product(1).quantity == 10
        assert stocked_store.receipt_count() == 0

    def test_all_or_nothing(self, stocked_store):
        before = quantities(stocked_store)

        with pytest.raises(InsufficientQuantityError):
            stocked_store.create_sale(1, {1: 2, 3: 999})

        assert quantities(stocked_store) == before
        assert stocked_store.receipt_count() == 0

    def test_expired_product(self, stocked_store):
        before = quantities(stocked_store)

        with pytest.raises(ExpiredProductError) as exc:
            stocked_store.create_sale(1, {1: 1, 2: 1})

        assert exc.value.product.name == "Bread"
        assert quantities(stocked_store) == before

    def test_unknown_product(self, stocked_store):
        before = quantities(stocked_store)

        with pytest.raises(ProductNotFoundError):
            stocked_store.create_sale(1, {1: 1, 42: 1})

        assert quantities(stocked_store) == before

    def test_register_without_cashier(self, stocked_store):
        with pytest.raises(NoAssignedCashierError) as exc:
            stocked_store.create_sale(2, {1: 1})

        assert exc.value.register_number == 2
        assert stocked_store.get_product(1).quantity == 10

    def test_failed_sale_does_not_use_a_number(self, stocked_store):
        with pytest.raises(InsufficientQuantityError):
            stocked_store.create_sale(1, {1: 20})

        assert stocked_store.create_sale(1, {1: 1}).number == 1

    @pytest.mark.parametrize("basket", [{}, [], None, {1: 0}, {1: -2}, [(1, 1), (3, 0)]])
    def test_invalid_basket(self, stocked_store, basket):
        before = quantities(stocked_store)

        with pytest.raises(InvalidBasketError):
            stocked_store.create_sale(1, basket)

        assert quantities(stocked_store) == before


@pytest.mark.sales
class TestPersistenceDuringSale:
    def test_storage_failure_does_not_undo_sale(self, tmp_path, policy, sleeps, today):
        config = StoreConfig(
            receipt_output_dir=str(tmp_path / "missing"),
            create_missing_directories=False,
            retry_delay=0,
        )
        store = StoreService(config, policy, date_clock=lambda: today, sleep=sleeps)
        store.add_product(make_product(quantity=10))
        store.add_cashier(Cashier(1, "John Doe", "1500"))
        store.assign_cashier_to_register(1, 1)

        receipt = store.create_sale(1, {1: 2})

        assert receipt.total == Decimal("4.08")
        assert store.get_product(1).quantity == 8
        assert store.total_revenue() == Decimal("4.08")
        assert len(store.receipts.persistence_failures()) == 1


@pytest.mark.sales
@pytest.mark.concurrency
class TestConcurrentSales:
    def _run(self, targets):
        threads = [threading.Thread(target=t) for t in targets]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=20)
        assert not any(t.is_alive() for t in threads)

    def test_no_oversell(self, stocked_store):
        """
        SCENARIO: 20 threads each buy 1 Milk; 10 are in stock.
        EXPECTED: exactly 10 sales succeed, Milk ends at 0, receipt numbers 1..10.
        """
        barrier = threading.Barrier(20)
        sold, refused = [], []
        lock = threading.Lock()

        def buy():
            barrier.wait()
            try:
                receipt = stocked_store.create_sale(1, {1: 1})
            except InsufficientQuantityError:
                with lock:
                    refused.append(1)
            else:
                with lock:
                    sold.append(receipt.number)

        self._run([buy] * 20)

        assert len(sold) == 10
        assert len(refused) == 10
        assert sorted(sold) == list(range(1, 11))
        assert stocked_store.get_product(1).quantity == 0

    def test_overlapping_baskets_do_not_deadlock(self, stocked_store):
        """
        SCENARIO: Half the threads list Soap before Milk, half Milk before Soap.
        EXPECTED: every sale finishes; stock conserved.
        """
        stocked_store.catalog.set_quantity(1, 100)
        stocked_store.catalog.set_quantity(3, 100)
        barrier = threading.Barrier(10)

        def forward():
            barrier.wait()
            for _ in range(5):
                stocked_store.create_sale(1, [(1, 1), (3, 1)])

        def backward():
            barrier.wait()
            for _ in range(5):
                stocked_store.create_sale(1, [(3, 1), (1, 1)])

        self._run([forward] * 5 + [backward] * 5)

        assert stocked_store.get_product(1).quantity == 50
        assert stocked_store.get_product(3).quantity == 50
        assert stocked_store.receipt_count() == 50

    def test_conservation_across_registers(self, stocked_store):
        jane = stocked_store.hire_cashier("Jane Roe", "1200")
        stocked_store.assign_cashier_to_register(jane.id, 2)
        barrier = threading.Barrier(2)

        def register(number):
            def ring():
                barrier.wait()
                for _ in range(10):
                    try:
                        stocked_store.create_sale(number, {3: 1})
                    except InsufficientQuantityError:
                        pass
            return ring

        self._run([register(1), register(2)])

        sold = sum(line.quantity for r in stocked_store.list_receipts() for line in r.lines)
        assert sold == 20
        assert stocked_store.get_product(3).quantity == 0

    def test_product_added_mid_sale_cannot_be_sold_twice(self, stocked_store, monkeypatch):
        """
        SCENARIO: Register 1 reserves Eggs (id 5) before they exist. While it
        validates, Eggs x1 are delivered and register 2 tries to sell one.
        EXPECTED: the delivery and the second sale both wait for register 1;
        at most one egg is ever sold.
        """
        jane = stocked_store.hire_cashier("Jane Roe", "1200")
        stocked_store.assign_cashier_to_register(jane.id, 2)
        catalog = stocked_store.catalog
        get_product = catalog.get_product
        outcomes, waiting = [], {}

        def deliver():
            stocked_store.add_product(make_product(5, "Eggs", quantity=1))

        def second_sale():
            try:
                outcomes.append(stocked_store.create_sale(2, {5: 1}))
            except (ProductNotFoundError, InsufficientQuantityError) as exc:
                outcomes.append(exc)

        others = [threading.Thread(target=deliver), threading.Thread(target=second_sale)]

        def get_product_while_others_run(product_id):
            if product_id == 5 and not waiting:
                for t in others:
                    t.start()
                for t in others:
                    t.join(timeout=0.2)
                waiting.update({t.name: t.is_alive() for t in others})
            return get_product(product_id)

        monkeypatch.setattr(catalog, "get_product", get_product_while_others_run)

        with pytest.raises(ProductNotFoundError):
            stocked_store.create_sale(1, {5: 1})

        self._run_joined(others)
        assert list(waiting.values()) == [True, True]

        sold = sum(
            line.quantity for r in stocked_store.list_receipts() for line in r.lines if line.product.id == 5
        )
        assert sold <= 1
        assert get_product(5).quantity == 1 - sold
        assert len(outcomes) == 1

    def _run_joined(self, threads):
        for t in threads:
            t.join(timeout=20)
        assert not any(t.is_alive() for t in threads)
